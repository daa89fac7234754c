"""SQLite implementation of the prequeue repository."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from party_queue.domain.prequeue.entities import PrequeueEntry
from party_queue.domain.prequeue.repository import PrequeueRepository
from party_queue.domain.prequeue.value_objects import PrequeueStatus
from party_queue.domain.shared.datetime_utils import UtcDateTime

if TYPE_CHECKING:
    from ..database import Database


class SQLitePrequeueRepository(PrequeueRepository):
    def __init__(self, database: Database) -> None:
        self._db = database

    async def add_pending(self, entry: PrequeueEntry) -> bool:
        # The partial unique index on pending track_id turns a duplicate into a no-op.
        changed = await self._db.execute(
            """
            INSERT INTO prequeue_entries
                (id, identity_id, track_id, track_name, artist_name, album_art, status, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT DO NOTHING
            """,
            (
                entry.id,
                entry.identity_id,
                entry.track_id,
                entry.track_name,
                entry.artist_name,
                entry.album_art,
                PrequeueStatus.PENDING.value,
                UtcDateTime(entry.created_at).iso,
            ),
        )
        return changed > 0

    async def get(self, entry_id: str) -> PrequeueEntry | None:
        row = await self._db.fetch_one("SELECT * FROM prequeue_entries WHERE id = ?", (entry_id,))
        return self._row_to_entry(row) if row else None

    async def has_pending_for_track(self, track_id: str) -> bool:
        row = await self._db.fetch_one(
            "SELECT 1 FROM prequeue_entries WHERE track_id = ? AND status = ?",
            (track_id, PrequeueStatus.PENDING.value),
        )
        return row is not None

    async def save_transition(self, entry: PrequeueEntry) -> bool:
        changed = await self._db.execute(
            """
            UPDATE prequeue_entries
            SET status = ?, approved_by = ?
            WHERE id = ? AND status = ?
            """,
            (entry.status.value, entry.approved_by, entry.id, PrequeueStatus.PENDING.value),
        )
        return changed > 0

    async def list_by_status(self, status: PrequeueStatus) -> list[PrequeueEntry]:
        rows = await self._db.fetch_all(
            "SELECT * FROM prequeue_entries WHERE status = ? ORDER BY created_at DESC",
            (status.value,),
        )
        return [self._row_to_entry(row) for row in rows]

    def _row_to_entry(self, row: dict[str, Any]) -> PrequeueEntry:
        return PrequeueEntry(
            id=row["id"],
            identity_id=row["identity_id"],
            track_id=row["track_id"],
            track_name=row["track_name"],
            artist_name=row["artist_name"],
            album_art=row["album_art"],
            status=PrequeueStatus(row["status"]),
            approved_by=row["approved_by"],
            created_at=UtcDateTime.from_iso(row["created_at"]).dt,
        )
