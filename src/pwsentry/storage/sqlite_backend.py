"""
SQLite backend for breach cache and password history storage.

Each operation opens a short-lived connection and runs in a worker thread,
so independent validation calls never share a connection.
"""

import asyncio
import os
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Generator

from pwsentry.exceptions import StoreError, StoreUnavailable
from pwsentry.storage.base import (
    BreachCacheEntry,
    BreachCacheStore,
    ChangeReason,
    CheckReason,
    PasswordHistoryEntry,
    PasswordHistoryStore,
)


class SQLiteStore(BreachCacheStore, PasswordHistoryStore):
    """SQLite-based cache and history store."""

    SCHEMA_VERSION = 1

    def __init__(self, db_path: str | Path):
        """Initialize SQLite store.

        Args:
            db_path: Path to the database file
        """
        self.db_path = Path(db_path)

    def initialize(self) -> None:
        """Create the database file and tables."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        with self._get_conn() as conn:
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS schema_version (
                    version INTEGER PRIMARY KEY
                );

                -- Breach lookup cache
                CREATE TABLE IF NOT EXISTS breach_checks (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    account_id TEXT NOT NULL,
                    password_hash_prefix TEXT NOT NULL,
                    fingerprint TEXT NOT NULL,
                    is_breached INTEGER NOT NULL,
                    breach_count INTEGER NOT NULL DEFAULT 0,
                    check_reason TEXT,
                    expires_at TEXT NOT NULL,
                    created_at TEXT NOT NULL
                );

                -- Password history
                CREATE TABLE IF NOT EXISTS password_history (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    account_id TEXT NOT NULL,
                    password_hash TEXT NOT NULL,
                    changed_at TEXT NOT NULL,
                    ip_address TEXT,
                    user_agent TEXT,
                    change_reason TEXT
                );

                CREATE INDEX IF NOT EXISTS idx_breach_checks_key
                    ON breach_checks(account_id, password_hash_prefix, fingerprint);
                CREATE INDEX IF NOT EXISTS idx_breach_checks_expires_at
                    ON breach_checks(expires_at);
                CREATE INDEX IF NOT EXISTS idx_password_history_account
                    ON password_history(account_id, changed_at);
            """)
            conn.execute(
                "INSERT OR IGNORE INTO schema_version (version) VALUES (?)",
                (self.SCHEMA_VERSION,),
            )

        # Password hashes live here
        os.chmod(self.db_path, 0o600)

    @contextmanager
    def _get_conn(self) -> Generator[sqlite3.Connection, None, None]:
        """Open a connection, commit on success and translate errors."""
        try:
            conn = sqlite3.connect(str(self.db_path), timeout=10)
        except sqlite3.Error as e:
            raise StoreUnavailable(f"Cannot open {self.db_path}: {e}") from e

        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except sqlite3.OperationalError as e:
            conn.rollback()
            if "no such table" in str(e):
                raise StoreUnavailable(f"Store not initialized: {e}") from e
            raise StoreError(str(e)) from e
        except sqlite3.Error as e:
            conn.rollback()
            raise StoreError(str(e)) from e
        finally:
            conn.close()

    # Breach cache operations

    def _get_cache_entry(
        self,
        account_id: str,
        hash_prefix: str,
        fingerprint: str,
        now: datetime,
    ) -> BreachCacheEntry | None:
        with self._get_conn() as conn:
            row = conn.execute(
                """
                SELECT * FROM breach_checks
                WHERE account_id = ? AND password_hash_prefix = ?
                  AND fingerprint = ? AND expires_at > ?
                ORDER BY created_at DESC, id DESC
                LIMIT 1
                """,
                (account_id, hash_prefix, fingerprint, now.isoformat()),
            ).fetchone()

        return self._row_to_cache_entry(row) if row else None

    def _put_cache_entry(self, entry: BreachCacheEntry) -> None:
        with self._get_conn() as conn:
            conn.execute(
                """
                INSERT INTO breach_checks (
                    account_id, password_hash_prefix, fingerprint, is_breached,
                    breach_count, check_reason, expires_at, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    entry.account_id,
                    entry.hash_prefix,
                    entry.fingerprint,
                    int(entry.is_breached),
                    entry.breach_count,
                    entry.check_reason.value,
                    entry.expires_at.isoformat(),
                    entry.created_at.isoformat(),
                ),
            )

    def _delete_expired(self, before: datetime) -> int:
        with self._get_conn() as conn:
            cursor = conn.execute(
                "DELETE FROM breach_checks WHERE expires_at <= ?",
                (before.isoformat(),),
            )
            return cursor.rowcount

    async def get(
        self,
        account_id: str,
        hash_prefix: str,
        fingerprint: str,
        now: datetime,
    ) -> BreachCacheEntry | None:
        entry = await asyncio.to_thread(
            self._get_cache_entry, account_id, hash_prefix, fingerprint, now
        )
        # ISO strings compare correctly only for matching tz-awareness
        if entry and not entry.is_valid(now):
            return None
        return entry

    async def put(self, entry: BreachCacheEntry) -> None:
        await asyncio.to_thread(self._put_cache_entry, entry)

    async def delete_expired(self, before: datetime) -> int:
        return await asyncio.to_thread(self._delete_expired, before)

    # Password history operations

    def _add_history(self, entry: PasswordHistoryEntry) -> int:
        with self._get_conn() as conn:
            cursor = conn.execute(
                """
                INSERT INTO password_history (
                    account_id, password_hash, changed_at, ip_address,
                    user_agent, change_reason
                ) VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    entry.account_id,
                    entry.password_hash,
                    entry.changed_at.isoformat(),
                    entry.ip_address,
                    entry.user_agent,
                    entry.change_reason.value if entry.change_reason else None,
                ),
            )
            return cursor.lastrowid

    def _list_history(
        self,
        account_id: str,
        limit: int | None,
    ) -> list[PasswordHistoryEntry]:
        query = """
            SELECT * FROM password_history
            WHERE account_id = ?
            ORDER BY changed_at DESC, id DESC
        """
        params: list = [account_id]
        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)

        with self._get_conn() as conn:
            rows = conn.execute(query, params).fetchall()

        return [self._row_to_history_entry(row) for row in rows]

    def _delete_history(self, entry_ids: list[int]) -> int:
        if not entry_ids:
            return 0

        placeholders = ",".join("?" * len(entry_ids))
        with self._get_conn() as conn:
            cursor = conn.execute(
                f"DELETE FROM password_history WHERE id IN ({placeholders})",
                entry_ids,
            )
            return cursor.rowcount

    async def add(self, entry: PasswordHistoryEntry) -> int:
        entry_id = await asyncio.to_thread(self._add_history, entry)
        entry.id = entry_id
        return entry_id

    async def list_for_account(
        self,
        account_id: str,
        limit: int | None = None,
    ) -> list[PasswordHistoryEntry]:
        return await asyncio.to_thread(self._list_history, account_id, limit)

    async def delete(self, entry_ids: list[int]) -> int:
        return await asyncio.to_thread(self._delete_history, list(entry_ids))

    # Row conversion

    def _row_to_cache_entry(self, row: sqlite3.Row) -> BreachCacheEntry:
        return BreachCacheEntry(
            account_id=row["account_id"],
            hash_prefix=row["password_hash_prefix"],
            fingerprint=row["fingerprint"],
            is_breached=bool(row["is_breached"]),
            breach_count=row["breach_count"],
            expires_at=datetime.fromisoformat(row["expires_at"]),
            check_reason=CheckReason(row["check_reason"]) if row["check_reason"] else CheckReason.PASSWORD_CHANGE,
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    def _row_to_history_entry(self, row: sqlite3.Row) -> PasswordHistoryEntry:
        return PasswordHistoryEntry(
            id=row["id"],
            account_id=row["account_id"],
            password_hash=row["password_hash"],
            changed_at=datetime.fromisoformat(row["changed_at"]),
            ip_address=row["ip_address"],
            user_agent=row["user_agent"],
            change_reason=ChangeReason(row["change_reason"]) if row["change_reason"] else None,
        )
