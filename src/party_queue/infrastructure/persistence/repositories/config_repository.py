"""SQLite implementation of the runtime config store."""

from __future__ import annotations

from typing import TYPE_CHECKING

from party_queue.application.interfaces.config_store import ConfigRepository
from party_queue.domain.shared.datetime_utils import UtcDateTime

if TYPE_CHECKING:
    from ..database import Database


class SQLiteConfigRepository(ConfigRepository):
    def __init__(self, database: Database) -> None:
        self._db = database

    async def get(self, key: str) -> str | None:
        row = await self._db.fetch_one("SELECT value FROM config WHERE key = ?", (key,))
        return row["value"] if row else None

    async def set(self, key: str, value: str) -> None:
        await self._db.execute(
            """
            INSERT INTO config (key, value, updated_at)
            VALUES (?, ?, ?)
            ON CONFLICT(key) DO UPDATE SET
                value = excluded.value,
                updated_at = excluded.updated_at
            """,
            (key, value, UtcDateTime.now().iso),
        )

    async def all(self) -> dict[str, str]:
        rows = await self._db.fetch_all("SELECT key, value FROM config ORDER BY key")
        return {row["key"]: row["value"] for row in rows}
