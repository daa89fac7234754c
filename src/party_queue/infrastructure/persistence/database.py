"""SQLite database with per-operation connections and WAL mode."""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any

import aiosqlite

from party_queue.domain.shared.constants import DatabaseTables, SQLPragmas
from party_queue.domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ...config.settings import DatabaseSettings

logger = logging.getLogger(__name__)


class Database:
    """Async SQLite access point.

    Every ``connection()``/``transaction()`` block holds one asyncio lock for
    its duration, so statements issued by overlapping coroutines never contend
    for SQLite's single writer. Blocks must not be nested.
    """

    def __init__(self, url: str, settings: DatabaseSettings | None = None) -> None:
        if url.startswith("sqlite:///"):
            self._db_path = url[10:]  # Remove "sqlite:///"
        else:
            self._db_path = url

        self._initialized = False
        self._keepalive_conn: aiosqlite.Connection | None = None
        self._busy_timeout = settings.busy_timeout_ms if settings else 5000
        self._connection_timeout = settings.connection_timeout_s if settings else 10
        self._memory_name = f"party-queue-{uuid.uuid4().hex}"
        self._lock = asyncio.Lock()

    @property
    def db_path(self) -> str:
        return self._db_path

    @property
    def is_memory(self) -> bool:
        return self._db_path == ":memory:"

    async def initialize(self) -> None:
        if self._initialized:
            return

        if not self.is_memory:
            db_dir = Path(self._db_path).parent
            db_dir.mkdir(parents=True, exist_ok=True)

        # Keep one connection alive for in-memory DBs; otherwise the shared
        # in-memory DB is destroyed once the last connection closes.
        if self.is_memory and self._keepalive_conn is None:
            self._keepalive_conn = await self._connect()

        async with self.transaction() as conn:
            await self._ensure_schema(conn)

        self._initialized = True
        logger.info(LogTemplates.DATABASE_INITIALIZED, self._db_path)

    async def _ensure_schema(self, conn: aiosqlite.Connection) -> None:
        await conn.execute(
            f"""
            CREATE TABLE IF NOT EXISTS {DatabaseTables.IDENTITIES} (
                id TEXT PRIMARY KEY,
                first_seen_at TEXT NOT NULL,
                last_submit_at TEXT,
                cooldown_expires_at TEXT,
                cooldown_reset_at TEXT,
                status TEXT NOT NULL DEFAULT 'active',
                display_name TEXT,
                linked_account_id TEXT,
                auth_providers TEXT NOT NULL DEFAULT ''
            )
            """
        )
        await conn.execute(
            f"CREATE INDEX IF NOT EXISTS idx_identities_linked_account "
            f"ON {DatabaseTables.IDENTITIES}(linked_account_id)"
        )

        await conn.execute(
            f"""
            CREATE TABLE IF NOT EXISTS {DatabaseTables.SUBMISSION_ATTEMPTS} (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                identity_id TEXT NOT NULL,
                track_id TEXT,
                track_name TEXT,
                artist_name TEXT,
                outcome TEXT NOT NULL,
                error_detail TEXT,
                timestamp TEXT NOT NULL,
                FOREIGN KEY(identity_id) REFERENCES {DatabaseTables.IDENTITIES}(id)
            )
            """
        )
        await conn.execute(
            f"CREATE INDEX IF NOT EXISTS idx_attempts_identity_outcome_ts "
            f"ON {DatabaseTables.SUBMISSION_ATTEMPTS}(identity_id, outcome, timestamp)"
        )
        await conn.execute(
            f"CREATE INDEX IF NOT EXISTS idx_attempts_track_outcome "
            f"ON {DatabaseTables.SUBMISSION_ATTEMPTS}(track_id, outcome)"
        )

        await conn.execute(
            f"""
            CREATE TABLE IF NOT EXISTS {DatabaseTables.BANNED_TRACKS} (
                track_id TEXT PRIMARY KEY,
                artist_id TEXT,
                reason TEXT,
                created_at TEXT NOT NULL
            )
            """
        )

        await conn.execute(
            f"""
            CREATE TABLE IF NOT EXISTS {DatabaseTables.PREQUEUE_ENTRIES} (
                id TEXT PRIMARY KEY,
                identity_id TEXT NOT NULL,
                track_id TEXT NOT NULL,
                track_name TEXT NOT NULL DEFAULT '',
                artist_name TEXT NOT NULL DEFAULT '',
                album_art TEXT,
                status TEXT NOT NULL DEFAULT 'pending',
                approved_by TEXT,
                created_at TEXT NOT NULL,
                FOREIGN KEY(identity_id) REFERENCES {DatabaseTables.IDENTITIES}(id)
            )
            """
        )
        # At most one pending entry per track.
        await conn.execute(
            f"CREATE UNIQUE INDEX IF NOT EXISTS idx_prequeue_pending_track "
            f"ON {DatabaseTables.PREQUEUE_ENTRIES}(track_id) WHERE status = 'pending'"
        )
        await conn.execute(
            f"CREATE INDEX IF NOT EXISTS idx_prequeue_status_created "
            f"ON {DatabaseTables.PREQUEUE_ENTRIES}(status, created_at)"
        )

        await conn.execute(
            f"""
            CREATE TABLE IF NOT EXISTS {DatabaseTables.TRACK_VOTES} (
                track_id TEXT NOT NULL,
                identity_id TEXT NOT NULL,
                direction INTEGER NOT NULL CHECK (direction IN (-1, 1)),
                created_at TEXT NOT NULL,
                PRIMARY KEY (track_id, identity_id),
                FOREIGN KEY(identity_id) REFERENCES {DatabaseTables.IDENTITIES}(id)
            )
            """
        )
        await conn.execute(
            f"CREATE INDEX IF NOT EXISTS idx_track_votes_identity "
            f"ON {DatabaseTables.TRACK_VOTES}(identity_id)"
        )

        await conn.execute(
            f"""
            CREATE TABLE IF NOT EXISTS {DatabaseTables.CONFIG} (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
            """
        )

        await self._ensure_column(
            conn, DatabaseTables.IDENTITIES, "auth_providers", "TEXT NOT NULL DEFAULT ''"
        )
        await self._ensure_column(conn, DatabaseTables.IDENTITIES, "cooldown_reset_at", "TEXT")

    async def _ensure_column(
        self,
        conn: aiosqlite.Connection,
        table: str,
        column: str,
        column_type_sql: str,
    ) -> None:
        rows = await conn.execute_fetchall(SQLPragmas.TABLE_INFO.format(table=table))
        existing_columns = {r[1] for r in rows}
        if column in existing_columns:
            return

        await conn.execute(f"ALTER TABLE {table} ADD COLUMN {column} {column_type_sql}")
        logger.info(LogTemplates.TABLE_MIGRATED, table, column)

    async def _connect(self) -> aiosqlite.Connection:
        # SQLite ":memory:" is per-connection, so use a shared URI to allow
        # multiple connections to see the same in-memory database.
        if self.is_memory:
            db_path = f"file:{self._memory_name}?mode=memory&cache=shared"
            uri = True
        else:
            db_path = self._db_path
            uri = False

        conn = await aiosqlite.connect(
            db_path,
            # detect_types=0 because our ISO 8601 timestamps use 'T' separator,
            # but SQLite's built-in converter expects space-separated format.
            detect_types=0,
            uri=uri,
            timeout=self._connection_timeout,
        )
        conn.row_factory = aiosqlite.Row

        await conn.execute(SQLPragmas.JOURNAL_MODE_WAL)
        await conn.execute(SQLPragmas.FOREIGN_KEYS_ON)
        await conn.execute(SQLPragmas.BUSY_TIMEOUT.format(timeout=self._busy_timeout))

        return conn

    @asynccontextmanager
    async def connection(self) -> AsyncGenerator[aiosqlite.Connection, None]:
        async with self._lock:
            conn = await self._connect()
            try:
                yield conn
            except Exception:
                try:
                    await conn.rollback()
                except Exception:
                    logger.debug("Rollback failed on a closing connection", exc_info=True)
                raise
            finally:
                await conn.close()

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[aiosqlite.Connection, None]:
        """Get a transaction context manager with auto-commit/rollback."""
        async with self.connection() as conn:
            try:
                yield conn
                await conn.commit()
            except Exception:
                await conn.rollback()
                raise

    async def execute(self, sql: str, parameters: tuple[Any, ...] | None = None) -> int:
        """Execute a SQL statement in its own transaction.

        Returns:
            The number of rows changed.
        """
        async with self.transaction() as conn:
            cursor = await conn.execute(sql, parameters or ())
            return cursor.rowcount

    async def fetch_one(
        self, sql: str, parameters: tuple[Any, ...] | None = None
    ) -> dict[str, Any] | None:
        """Fetch a single row."""
        async with self.connection() as conn:
            cursor = await conn.execute(sql, parameters or ())
            row = await cursor.fetchone()
            return dict(row) if row else None

    async def fetch_all(
        self, sql: str, parameters: tuple[Any, ...] | None = None
    ) -> list[dict[str, Any]]:
        """Fetch all rows."""
        async with self.connection() as conn:
            cursor = await conn.execute(sql, parameters or ())
            rows = await cursor.fetchall()
            return [dict(row) for row in rows]

    async def get_stats(self) -> dict[str, Any]:
        """Get database statistics.

        Returns:
            Dictionary with file size and per-table row counts.
        """
        stats: dict[str, Any] = {
            "db_path": self._db_path,
            "initialized": self._initialized,
            "tables": {},
        }

        db_file = Path(self._db_path)
        if not self.is_memory and db_file.exists():
            stats["file_size_bytes"] = db_file.stat().st_size

        if not self._initialized:
            return stats

        try:
            async with self.connection() as conn:
                for table_name in (
                    DatabaseTables.IDENTITIES,
                    DatabaseTables.SUBMISSION_ATTEMPTS,
                    DatabaseTables.BANNED_TRACKS,
                    DatabaseTables.PREQUEUE_ENTRIES,
                    DatabaseTables.TRACK_VOTES,
                    DatabaseTables.CONFIG,
                ):
                    count_cursor = await conn.execute(
                        f"SELECT COUNT(*) FROM {table_name}"  # noqa: S608
                    )
                    count_row = await count_cursor.fetchone()
                    stats["tables"][table_name] = count_row[0] if count_row else 0

                page_cursor = await conn.execute(SQLPragmas.PAGE_COUNT)
                page_count_row = await page_cursor.fetchone()
                stats["page_count"] = page_count_row[0] if page_count_row else 0

                page_size_cursor = await conn.execute(SQLPragmas.PAGE_SIZE)
                page_size_row = await page_size_cursor.fetchone()
                stats["page_size"] = page_size_row[0] if page_size_row else 0

        except Exception as e:
            logger.error(LogTemplates.DATABASE_STATS_FAILED, e)
            stats["error"] = str(e)

        return stats

    async def close(self) -> None:
        """Close the database manager.

        For file-based DBs this is mostly a no-op. For in-memory DBs we also
        close the keepalive connection.
        """
        if self._keepalive_conn is not None:
            try:
                await self._keepalive_conn.close()
            finally:
                self._keepalive_conn = None
        self._initialized = False
        logger.info(LogTemplates.DATABASE_CLOSED)
