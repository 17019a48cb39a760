"""
Durable state for the signer service.

The service keeps three logical maps, each a namespace in one store:
    - salt: the one-time salt under the fixed key "salt".
    - owner: the owner's raw identity under the fixed key "owner".
    - public_key_cache: 32-byte public keys keyed by identity text.

Invariants:
    - Values are opaque bytes; the store never interprets them.
    - ``insert_if_absent`` is a compare-and-set: it writes only when the
      key is missing at write time and reports whether it won.
    - ``clear`` removes a whole namespace inside one transaction, so no
      partial clear is ever observable.

SQLite conventions:
    - _get_conn() with a persistent connection for :memory:
    - _transaction() context manager with commit/rollback
    - _init_schema() via executescript
    - WAL mode for file-backed databases
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)

# Namespaces and fixed slot keys
SALT_NS = "salt"
OWNER_NS = "owner"
PUBLIC_KEY_CACHE_NS = "public_key_cache"

SALT_KEY = "salt"
OWNER_KEY = "owner"


_SCHEMA = """\
CREATE TABLE IF NOT EXISTS state_entries (
    namespace TEXT NOT NULL,
    key TEXT NOT NULL,
    value BLOB NOT NULL,
    PRIMARY KEY (namespace, key)
);
"""


@runtime_checkable
class StateStore(Protocol):
    """Durable key-value map partitioned into namespaces."""

    def get(self, namespace: str, key: str) -> bytes | None:
        """Return the stored value, or None if absent."""
        ...

    def insert(self, namespace: str, key: str, value: bytes) -> None:
        """Insert or overwrite a value."""
        ...

    def insert_if_absent(self, namespace: str, key: str, value: bytes) -> bool:
        """Insert only if the key is missing. Returns True if written."""
        ...

    def remove(self, namespace: str, key: str) -> bool:
        """Remove a key. Returns True if something was removed."""
        ...

    def keys(self, namespace: str) -> list[str]:
        """All keys in a namespace, sorted."""
        ...

    def clear(self, namespace: str) -> int:
        """Remove every key in a namespace atomically. Returns the count."""
        ...


class SqliteStateStore:
    """SQLite-backed StateStore.

    Args:
        db_path: Path to SQLite database file, or ":memory:" for in-memory.
    """

    def __init__(self, db_path: str | Path = ":memory:") -> None:
        self._db_path = str(db_path)
        self._is_memory = self._db_path == ":memory:"

        if self._is_memory:
            self._persistent_conn: sqlite3.Connection | None = sqlite3.connect(
                ":memory:", check_same_thread=False
            )
        else:
            self._persistent_conn = None

        self._init_schema()

    @property
    def db_path(self) -> str:
        return self._db_path

    def _get_conn(self) -> sqlite3.Connection:
        """Get a database connection with proper settings."""
        if self._persistent_conn is not None:
            return self._persistent_conn

        conn = sqlite3.connect(self._db_path)
        conn.execute("PRAGMA journal_mode = WAL")
        return conn

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        """Context manager for a database transaction."""
        conn = self._get_conn()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            if self._persistent_conn is None:
                conn.close()

    def _init_schema(self) -> None:
        """Create tables if they don't exist."""
        with self._transaction() as conn:
            conn.executescript(_SCHEMA)

    def close(self) -> None:
        if self._persistent_conn is not None:
            self._persistent_conn.close()
            self._persistent_conn = None

    # -----------------------------------------------------------------
    # StateStore protocol
    # -----------------------------------------------------------------

    def get(self, namespace: str, key: str) -> bytes | None:
        with self._transaction() as conn:
            row = conn.execute(
                "SELECT value FROM state_entries WHERE namespace = ? AND key = ?",
                (namespace, key),
            ).fetchone()
        if row is None:
            return None
        return bytes(row[0])

    def insert(self, namespace: str, key: str, value: bytes) -> None:
        with self._transaction() as conn:
            conn.execute(
                """
                INSERT INTO state_entries (namespace, key, value)
                VALUES (?, ?, ?)
                ON CONFLICT (namespace, key) DO UPDATE SET value = excluded.value
                """,
                (namespace, key, bytes(value)),
            )

    def insert_if_absent(self, namespace: str, key: str, value: bytes) -> bool:
        with self._transaction() as conn:
            try:
                conn.execute(
                    "INSERT INTO state_entries (namespace, key, value) VALUES (?, ?, ?)",
                    (namespace, key, bytes(value)),
                )
                return True
            except sqlite3.IntegrityError:
                return False

    def remove(self, namespace: str, key: str) -> bool:
        with self._transaction() as conn:
            cursor = conn.execute(
                "DELETE FROM state_entries WHERE namespace = ? AND key = ?",
                (namespace, key),
            )
            return cursor.rowcount > 0

    def keys(self, namespace: str) -> list[str]:
        with self._transaction() as conn:
            rows = conn.execute(
                "SELECT key FROM state_entries WHERE namespace = ? ORDER BY key",
                (namespace,),
            ).fetchall()
        return [row[0] for row in rows]

    def clear(self, namespace: str) -> int:
        with self._transaction() as conn:
            cursor = conn.execute(
                "DELETE FROM state_entries WHERE namespace = ?",
                (namespace,),
            )
            removed = cursor.rowcount
        logger.debug("Cleared %d entries from namespace %s", removed, namespace)
        return removed
