import sqlite3
import threading
from typing import Any, Dict, List, Optional, Sequence

from .keyvaluestore import KeyValueStore

Row = sqlite3.Row

SCHEMA_VERSION = 1


DDL = """
-- 1) Client state slots
CREATE TABLE IF NOT EXISTS kv_store (
  key             TEXT PRIMARY KEY,
  value           TEXT NOT NULL,
  updated_at      TEXT NOT NULL DEFAULT (datetime('now'))
);
"""

class StorageService(KeyValueStore):
    """SQLite-backed key/value store holding the client's persisted state."""

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._local = threading.local()
        # Initialize the schema using a temporary connection
        conn = sqlite3.connect(db_path)
        conn.execute("PRAGMA journal_mode = WAL;")
        conn.execute("PRAGMA synchronous = NORMAL;")
        conn.row_factory = sqlite3.Row
        self._ensure_schema_with_connection(conn)
        conn.close()

    @property
    def connection(self) -> sqlite3.Connection:
        """Get a thread-local connection to the database."""
        if not hasattr(self._local, 'connection') or self._local.connection is None:
            self._local.connection = sqlite3.connect(self.db_path)
            self._local.connection.execute("PRAGMA journal_mode = WAL;")
            self._local.connection.execute("PRAGMA synchronous = NORMAL;")
            self._local.connection.row_factory = sqlite3.Row
        return self._local.connection

    # ---------- internal ----------
    def _ensure_schema_with_connection(self, conn: sqlite3.Connection) -> None:
        """Ensure schema exists using the provided connection."""
        cur = conn.execute("PRAGMA user_version;")
        version = cur.fetchone()[0]
        if version < 1:
            conn.executescript(DDL)
            conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION};")
            conn.commit()

    def close(self) -> None:
        """Close the thread-local connection if it exists."""
        if hasattr(self._local, 'connection') and self._local.connection is not None:
            self._local.connection.commit()
            self._local.connection.close()
            self._local.connection = None

    def _one(self, sql: str, params: Sequence[Any] = ()) -> Optional[Row]:
        cur = self.connection.execute(sql, params)
        return cur.fetchone()

    # ---------- slots ----------
    def get(self, key: str) -> Optional[str]:
        row = self._one("SELECT value FROM kv_store WHERE key = ?", (key,))
        return row["value"] if row else None

    def set(self, key: str, value: str) -> None:
        self.connection.execute(
            """
            INSERT INTO kv_store (key, value) VALUES (?, ?)
            ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = datetime('now')
            """,
            (key, value)
        )
        self.connection.commit()


class MemoryStorageService(KeyValueStore):
    """Process-local store, used when no durable state is wanted."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._slots: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._slots.get(key)

    def set(self, key: str, value: str) -> None:
        self._slots[key] = value

