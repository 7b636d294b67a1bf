"""Persistent key-value storage backing the insight cache.

Both backends expose the same small string-to-string surface
(``get_item``/``set_item``/``remove_item``/``keys``). Failures of the
underlying medium are raised as :class:`StorageError`; callers decide
whether to absorb them.
"""

import sqlite3
from pathlib import Path
from typing import Optional

from ..errors import StorageError

SCHEMA_SQL = """
    CREATE TABLE IF NOT EXISTS kv_store (
        key   TEXT PRIMARY KEY,
        value TEXT NOT NULL
    );
"""


class MemoryStorage:
    """In-process storage, used when no database path is configured."""

    def __init__(self):
        self._items: dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._items)


class SQLiteStorage:
    """SQLite-backed storage; one short-lived connection per operation."""

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._initialized = False

    def _connect(self) -> sqlite3.Connection:
        try:
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self.db_path)
            if not self._initialized:
                with conn:
                    conn.executescript(SCHEMA_SQL)
                self._initialized = True
            return conn
        except (sqlite3.Error, OSError) as e:
            raise StorageError(f"cannot open storage at {self.db_path}: {e}") from e

    def get_item(self, key: str) -> Optional[str]:
        conn = self._connect()
        try:
            row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"read failed for {key}: {e}") from e
        finally:
            conn.close()
        return row[0] if row else None

    def set_item(self, key: str, value: str) -> None:
        conn = self._connect()
        try:
            with conn:
                conn.execute(
                    "INSERT OR REPLACE INTO kv_store(key, value) VALUES (?, ?)",
                    (key, value),
                )
        except sqlite3.Error as e:
            raise StorageError(f"write failed for {key}: {e}") from e
        finally:
            conn.close()

    def remove_item(self, key: str) -> None:
        conn = self._connect()
        try:
            with conn:
                conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
        except sqlite3.Error as e:
            raise StorageError(f"delete failed for {key}: {e}") from e
        finally:
            conn.close()

    def keys(self) -> list[str]:
        conn = self._connect()
        try:
            rows = conn.execute("SELECT key FROM kv_store").fetchall()
        except sqlite3.Error as e:
            raise StorageError(f"key listing failed: {e}") from e
        finally:
            conn.close()
        return [row[0] for row in rows]


def create_storage(db_path: Optional[str]):
    """Pick a storage backend: SQLite for a path, memory otherwise."""
    if db_path and db_path != ":memory:":
        return SQLiteStorage(db_path)
    return MemoryStorage()
