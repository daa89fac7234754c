"""SQLite implementations of the audit log and ban list."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import TYPE_CHECKING, Any

from party_queue.domain.admission.entities import BannedTrack, SubmissionAttempt
from party_queue.domain.admission.repository import (
    BannedTrackRepository,
    SubmissionAttemptRepository,
)
from party_queue.domain.admission.value_objects import AttemptOutcome
from party_queue.domain.shared.datetime_utils import UtcDateTime

if TYPE_CHECKING:
    from ..database import Database


class SQLiteSubmissionAttemptRepository(SubmissionAttemptRepository):
    def __init__(self, database: Database) -> None:
        self._db = database

    async def add(self, attempt: SubmissionAttempt) -> SubmissionAttempt:
        async with self._db.transaction() as conn:
            cursor = await conn.execute(
                """
                INSERT INTO submission_attempts
                    (identity_id, track_id, track_name, artist_name,
                     outcome, error_detail, timestamp)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    attempt.identity_id,
                    attempt.track_id,
                    attempt.track_name,
                    attempt.artist_name,
                    attempt.outcome.value,
                    attempt.error_detail,
                    UtcDateTime(attempt.timestamp).iso,
                ),
            )
            row_id = cursor.lastrowid
        return attempt.model_copy(update={"id": row_id})

    async def count_successes_since(self, windows: Mapping[str, datetime]) -> int:
        if not windows:
            return 0
        clauses = " OR ".join("(identity_id = ? AND timestamp > ?)" for _ in windows)
        params: list[Any] = [AttemptOutcome.SUCCESS.value]
        for identity_id, since in windows.items():
            params.extend((identity_id, UtcDateTime(since).iso))
        row = await self._db.fetch_one(
            f"""
            SELECT COUNT(*) AS cnt FROM submission_attempts
            WHERE outcome = ? AND ({clauses})
            """,  # noqa: S608
            tuple(params),
        )
        return row["cnt"] if row else 0

    async def has_success(self, track_id: str) -> bool:
        row = await self._db.fetch_one(
            "SELECT 1 FROM submission_attempts WHERE track_id = ? AND outcome = ? LIMIT 1",
            (track_id, AttemptOutcome.SUCCESS.value),
        )
        return row is not None

    async def tracks_with_success(self, track_ids: Iterable[str]) -> set[str]:
        ids = list(dict.fromkeys(track_ids))
        if not ids:
            return set()
        placeholders = ",".join("?" for _ in ids)
        rows = await self._db.fetch_all(
            f"""
            SELECT DISTINCT track_id FROM submission_attempts
            WHERE track_id IN ({placeholders}) AND outcome = ?
            """,  # noqa: S608
            (*ids, AttemptOutcome.SUCCESS.value),
        )
        return {row["track_id"] for row in rows}

    async def list_for_identity(self, identity_id: str, limit: int = 50) -> list[SubmissionAttempt]:
        rows = await self._db.fetch_all(
            """
            SELECT * FROM submission_attempts
            WHERE identity_id = ?
            ORDER BY timestamp DESC, id DESC
            LIMIT ?
            """,
            (identity_id, limit),
        )
        return [self._row_to_attempt(row) for row in rows]

    async def count_for_identity(self, identity_id: str) -> int:
        row = await self._db.fetch_one(
            "SELECT COUNT(*) AS cnt FROM submission_attempts WHERE identity_id = ?",
            (identity_id,),
        )
        return row["cnt"] if row else 0

    async def count(self, successful_only: bool = False) -> int:
        if successful_only:
            row = await self._db.fetch_one(
                "SELECT COUNT(*) AS cnt FROM submission_attempts WHERE outcome = ?",
                (AttemptOutcome.SUCCESS.value,),
            )
        else:
            row = await self._db.fetch_one("SELECT COUNT(*) AS cnt FROM submission_attempts")
        return row["cnt"] if row else 0

    def _row_to_attempt(self, row: dict[str, Any]) -> SubmissionAttempt:
        return SubmissionAttempt(
            id=row["id"],
            identity_id=row["identity_id"],
            track_id=row["track_id"],
            track_name=row["track_name"],
            artist_name=row["artist_name"],
            outcome=AttemptOutcome(row["outcome"]),
            error_detail=row["error_detail"],
            timestamp=UtcDateTime.from_iso(row["timestamp"]).dt,
        )


class SQLiteBannedTrackRepository(BannedTrackRepository):
    def __init__(self, database: Database) -> None:
        self._db = database

    async def is_banned(self, track_id: str) -> bool:
        row = await self._db.fetch_one(
            "SELECT 1 FROM banned_tracks WHERE track_id = ?", (track_id,)
        )
        return row is not None

    async def add(self, banned: BannedTrack) -> bool:
        changed = await self._db.execute(
            """
            INSERT INTO banned_tracks (track_id, artist_id, reason, created_at)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(track_id) DO NOTHING
            """,
            (
                banned.track_id,
                banned.artist_id,
                banned.reason,
                UtcDateTime(banned.created_at).iso,
            ),
        )
        return changed > 0

    async def remove(self, track_id: str) -> bool:
        changed = await self._db.execute(
            "DELETE FROM banned_tracks WHERE track_id = ?", (track_id,)
        )
        return changed > 0

    async def list_all(self) -> list[BannedTrack]:
        rows = await self._db.fetch_all("SELECT * FROM banned_tracks ORDER BY created_at DESC")
        return [
            BannedTrack(
                track_id=row["track_id"],
                artist_id=row["artist_id"],
                reason=row["reason"],
                created_at=UtcDateTime.from_iso(row["created_at"]).dt,
            )
            for row in rows
        ]
