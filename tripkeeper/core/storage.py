"""
Key-value store backends
In-memory store (tests, quota simulation) and SQLite-file store
"""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, List, Optional

from tripkeeper.core.logger import get_logger

logger = get_logger(__name__)

CREATE_KV_TABLE = """
    CREATE TABLE IF NOT EXISTS kv_store (
        key TEXT PRIMARY KEY,
        value TEXT NOT NULL
    )
"""

SELECT_ITEM = "SELECT value FROM kv_store WHERE key = ?"
UPSERT_ITEM = """
    INSERT INTO kv_store (key, value) VALUES (?, ?)
    ON CONFLICT(key) DO UPDATE SET value = excluded.value
"""
DELETE_ITEM = "DELETE FROM kv_store WHERE key = ?"
SELECT_USAGE_EXCLUDING = (
    "SELECT COALESCE(SUM(LENGTH(CAST(key AS BLOB)) + LENGTH(CAST(value AS BLOB))), 0) "
    "AS used FROM kv_store WHERE key != ?"
)
SELECT_KEYS = "SELECT key FROM kv_store ORDER BY key"
DELETE_ALL = "DELETE FROM kv_store"


class StorageQuotaExceeded(Exception):
    """The store refused a write because its capacity would be exceeded"""

    def __init__(self, key: str, required: int, quota: int):
        super().__init__(
            f"Writing '{key}' needs {required} bytes, quota is {quota} bytes"
        )
        self.key = key
        self.required = required
        self.quota = quota


def _entry_size(key: str, value: str) -> int:
    return len(key.encode("utf-8")) + len(value.encode("utf-8"))


class MemoryKeyValueStore:
    """Process-local store

    quota_bytes bounds the total size of keys plus values; 0 means unlimited.
    """

    def __init__(self, quota_bytes: int = 0):
        self.quota_bytes = quota_bytes
        self._items: Dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self.quota_bytes:
            used = sum(_entry_size(k, v) for k, v in self._items.items() if k != key)
            required = used + _entry_size(key, value)
            if required > self.quota_bytes:
                raise StorageQuotaExceeded(key, required, self.quota_bytes)

        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> List[str]:
        return sorted(self._items)

    def clear(self) -> None:
        self._items.clear()

    def usage_bytes(self) -> int:
        return sum(_entry_size(k, v) for k, v in self._items.items())


class SqliteKeyValueStore:
    """Key-value store kept in a single SQLite file"""

    def __init__(self, db_path: str, quota_bytes: int = 0):
        self.db_path = db_path
        self.quota_bytes = quota_bytes
        self._init_database()

    def _init_database(self):
        """Create the store file and table"""
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        with self.get_connection() as conn:
            conn.execute(CREATE_KV_TABLE)
            conn.commit()

        logger.info(f"Key-value store initialized: {self.db_path}")

    @contextmanager
    def get_connection(self):
        """Get database connection context manager"""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    def get_item(self, key: str) -> Optional[str]:
        with self.get_connection() as conn:
            row = conn.execute(SELECT_ITEM, (key,)).fetchone()
        return row["value"] if row is not None else None

    def set_item(self, key: str, value: str) -> None:
        with self.get_connection() as conn:
            if self.quota_bytes:
                used = conn.execute(SELECT_USAGE_EXCLUDING, (key,)).fetchone()["used"]
                required = used + _entry_size(key, value)
                if required > self.quota_bytes:
                    raise StorageQuotaExceeded(key, required, self.quota_bytes)

            conn.execute(UPSERT_ITEM, (key, value))
            conn.commit()

    def remove_item(self, key: str) -> None:
        with self.get_connection() as conn:
            conn.execute(DELETE_ITEM, (key,))
            conn.commit()

    def keys(self) -> List[str]:
        with self.get_connection() as conn:
            rows = conn.execute(SELECT_KEYS).fetchall()
        return [row["key"] for row in rows]

    def clear(self) -> None:
        with self.get_connection() as conn:
            conn.execute(DELETE_ALL)
            conn.commit()
