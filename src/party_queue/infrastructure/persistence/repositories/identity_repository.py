"""SQLite implementation of the identity repository."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Any

from party_queue.domain.guests.entities import Identity
from party_queue.domain.guests.repository import IdentityRepository
from party_queue.domain.guests.value_objects import IdentityStatus
from party_queue.domain.shared.datetime_utils import UtcDateTime, from_iso, to_iso
from party_queue.domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ..database import Database

logger = logging.getLogger(__name__)


def _parse_providers(raw: str | None) -> frozenset[str]:
    if not raw:
        return frozenset()
    return frozenset(p for p in raw.split(",") if p)


def _format_providers(providers: frozenset[str]) -> str:
    return ",".join(sorted(providers))


class SQLiteIdentityRepository(IdentityRepository):
    def __init__(self, database: Database) -> None:
        self._db = database

    async def get(self, identity_id: str) -> Identity | None:
        row = await self._db.fetch_one("SELECT * FROM identities WHERE id = ?", (identity_id,))
        return self._row_to_identity(row) if row else None

    async def get_or_create(self, identity_id: str, now: datetime) -> tuple[Identity, bool]:
        async with self._db.transaction() as conn:
            cursor = await conn.execute(
                """
                INSERT INTO identities (id, first_seen_at, status)
                VALUES (?, ?, ?)
                ON CONFLICT(id) DO NOTHING
                """,
                (identity_id, UtcDateTime(now).iso, IdentityStatus.ACTIVE.value),
            )
            created = cursor.rowcount > 0
            cursor = await conn.execute("SELECT * FROM identities WHERE id = ?", (identity_id,))
            row = await cursor.fetchone()

        if created:
            logger.info(LogTemplates.IDENTITY_CREATED, identity_id)
        return self._row_to_identity(dict(row)), created

    async def list_all(self) -> list[Identity]:
        rows = await self._db.fetch_all(
            "SELECT * FROM identities ORDER BY COALESCE(last_submit_at, first_seen_at) DESC"
        )
        return [self._row_to_identity(row) for row in rows]

    async def list_by_linked_account(self, linked_account_id: str) -> list[Identity]:
        rows = await self._db.fetch_all(
            "SELECT * FROM identities WHERE linked_account_id = ? ORDER BY first_seen_at",
            (linked_account_id,),
        )
        return [self._row_to_identity(row) for row in rows]

    async def link_account(
        self,
        identity_id: str,
        provider: str,
        linked_account_id: str,
        display_name: str | None,
    ) -> Identity | None:
        async with self._db.transaction() as conn:
            cursor = await conn.execute("SELECT * FROM identities WHERE id = ?", (identity_id,))
            row = await cursor.fetchone()
            if row is None:
                return None

            providers = _parse_providers(row["auth_providers"]) | {provider}
            await conn.execute(
                """
                UPDATE identities
                SET linked_account_id = COALESCE(linked_account_id, ?),
                    display_name = COALESCE(display_name, ?),
                    auth_providers = ?
                WHERE id = ?
                """,
                (linked_account_id, display_name, _format_providers(providers), identity_id),
            )
            cursor = await conn.execute("SELECT * FROM identities WHERE id = ?", (identity_id,))
            updated = await cursor.fetchone()

        return self._row_to_identity(dict(updated))

    async def set_display_name_if_unset(self, identity_id: str, display_name: str) -> bool:
        changed = await self._db.execute(
            "UPDATE identities SET display_name = ? WHERE id = ? AND display_name IS NULL",
            (display_name, identity_id),
        )
        return changed > 0

    async def set_status(self, identity_id: str, status: IdentityStatus) -> bool:
        changed = await self._db.execute(
            "UPDATE identities SET status = ? WHERE id = ?",
            (status.value, identity_id),
        )
        return changed > 0

    async def record_submission(self, identity_id: str, at: datetime) -> None:
        await self._db.execute(
            "UPDATE identities SET last_submit_at = ? WHERE id = ?",
            (UtcDateTime(at).iso, identity_id),
        )

    async def set_cooldown(self, identity_ids: list[str], expires_at: datetime) -> None:
        if not identity_ids:
            return
        placeholders = ",".join("?" for _ in identity_ids)
        await self._db.execute(
            "UPDATE identities SET cooldown_expires_at = ? "
            f"WHERE id IN ({placeholders})",  # noqa: S608
            (UtcDateTime(expires_at).iso, *identity_ids),
        )

    async def clear_cooldown(self, identity_id: str, at: datetime) -> bool:
        changed = await self._db.execute(
            """
            UPDATE identities
            SET cooldown_expires_at = NULL, cooldown_reset_at = ?
            WHERE id = ?
            """,
            (UtcDateTime(at).iso, identity_id),
        )
        return changed > 0

    async def clear_all_cooldowns(self, at: datetime) -> int:
        async with self._db.transaction() as conn:
            cursor = await conn.execute(
                "SELECT COUNT(*) AS cnt FROM identities WHERE cooldown_expires_at IS NOT NULL"
            )
            row = await cursor.fetchone()
            await conn.execute(
                "UPDATE identities SET cooldown_expires_at = NULL, cooldown_reset_at = ?",
                (UtcDateTime(at).iso,),
            )
        return row["cnt"] if row else 0

    async def count_by_status(self) -> dict[IdentityStatus, int]:
        rows = await self._db.fetch_all(
            "SELECT status, COUNT(*) AS cnt FROM identities GROUP BY status"
        )
        counts = {status: 0 for status in IdentityStatus}
        for row in rows:
            counts[IdentityStatus(row["status"])] = row["cnt"]
        return counts

    async def count_cooling_down(self, now: datetime) -> int:
        row = await self._db.fetch_one(
            "SELECT COUNT(*) AS cnt FROM identities WHERE cooldown_expires_at > ?",
            (to_iso(now),),
        )
        return row["cnt"] if row else 0

    def _row_to_identity(self, row: dict[str, Any]) -> Identity:
        return Identity(
            id=row["id"],
            first_seen_at=UtcDateTime.from_iso(row["first_seen_at"]).dt,
            last_submit_at=from_iso(row["last_submit_at"]),
            cooldown_expires_at=from_iso(row["cooldown_expires_at"]),
            cooldown_reset_at=from_iso(row["cooldown_reset_at"]),
            status=IdentityStatus(row["status"]),
            display_name=row["display_name"],
            linked_account_id=row["linked_account_id"],
            auth_providers=_parse_providers(row["auth_providers"]),
        )
