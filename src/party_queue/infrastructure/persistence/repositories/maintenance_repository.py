"""SQLite implementation of bulk guest-data maintenance."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from party_queue.application.interfaces.maintenance import GuestDataMaintenance
from party_queue.domain.shared.constants import DatabaseTables
from party_queue.domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ..database import Database

logger = logging.getLogger(__name__)

# Children before parents so foreign keys hold at every step.
_RESET_ORDER = (
    DatabaseTables.SUBMISSION_ATTEMPTS,
    DatabaseTables.TRACK_VOTES,
    DatabaseTables.PREQUEUE_ENTRIES,
    DatabaseTables.IDENTITIES,
    DatabaseTables.BANNED_TRACKS,
)


class SQLiteGuestDataMaintenance(GuestDataMaintenance):
    def __init__(self, database: Database) -> None:
        self._db = database

    async def reset_guest_data(self) -> dict[str, int]:
        removed: dict[str, int] = {}
        async with self._db.transaction() as conn:
            for table in _RESET_ORDER:
                cursor = await conn.execute(f"DELETE FROM {table}")  # noqa: S608
                removed[table] = cursor.rowcount

        logger.warning(
            LogTemplates.DATA_RESET,
            removed[DatabaseTables.SUBMISSION_ATTEMPTS],
            removed[DatabaseTables.IDENTITIES],
            removed[DatabaseTables.BANNED_TRACKS],
        )
        return removed
