"""SQLite implementation of the track vote repository."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from party_queue.domain.shared.datetime_utils import UtcDateTime
from party_queue.domain.voting.repository import TrackVoteRepository
from party_queue.domain.voting.services import VotingDomainService
from party_queue.domain.voting.value_objects import VoteChange, VoteDirection, VoteOutcome

if TYPE_CHECKING:
    from ..database import Database


class SQLiteTrackVoteRepository(TrackVoteRepository):
    def __init__(self, database: Database) -> None:
        self._db = database

    async def apply(
        self,
        track_id: str,
        identity_id: str,
        direction: VoteDirection,
        now: datetime,
    ) -> VoteOutcome:
        async with self._db.transaction() as conn:
            cursor = await conn.execute(
                "SELECT direction FROM track_votes WHERE track_id = ? AND identity_id = ?",
                (track_id, identity_id),
            )
            row = await cursor.fetchone()
            existing = VoteDirection(row["direction"]) if row else None

            change, new_direction = VotingDomainService.resolve_change(existing, direction)

            if change is VoteChange.ADDED:
                await conn.execute(
                    """
                    INSERT INTO track_votes (track_id, identity_id, direction, created_at)
                    VALUES (?, ?, ?, ?)
                    """,
                    (track_id, identity_id, direction.value, UtcDateTime(now).iso),
                )
            elif change is VoteChange.FLIPPED:
                await conn.execute(
                    """
                    UPDATE track_votes SET direction = ?, created_at = ?
                    WHERE track_id = ? AND identity_id = ?
                    """,
                    (direction.value, UtcDateTime(now).iso, track_id, identity_id),
                )
            else:
                await conn.execute(
                    "DELETE FROM track_votes WHERE track_id = ? AND identity_id = ?",
                    (track_id, identity_id),
                )

            cursor = await conn.execute(
                "SELECT COALESCE(SUM(direction), 0) AS net FROM track_votes WHERE track_id = ?",
                (track_id,),
            )
            net_row = await cursor.fetchone()

        return VoteOutcome(
            track_id=track_id,
            change=change,
            user_vote=new_direction.value if new_direction is not None else None,
            net_votes=net_row["net"] if net_row else 0,
        )

    async def net_for_track(self, track_id: str) -> int:
        row = await self._db.fetch_one(
            "SELECT COALESCE(SUM(direction), 0) AS net FROM track_votes WHERE track_id = ?",
            (track_id,),
        )
        return row["net"] if row else 0

    async def net_by_track(self) -> dict[str, int]:
        rows = await self._db.fetch_all(
            "SELECT track_id, SUM(direction) AS net FROM track_votes GROUP BY track_id"
        )
        return {row["track_id"]: row["net"] for row in rows}

    async def votes_by_identity(self, identity_id: str) -> dict[str, int]:
        rows = await self._db.fetch_all(
            "SELECT track_id, direction FROM track_votes WHERE identity_id = ?",
            (identity_id,),
        )
        return {row["track_id"]: row["direction"] for row in rows}

    async def count(self) -> int:
        row = await self._db.fetch_one("SELECT COUNT(*) AS cnt FROM track_votes")
        return row["cnt"] if row else 0
