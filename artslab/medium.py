"""
Persistence media for the record store.

A medium is a flat string key -> string value store, the same shape as a
browser's localStorage.  The record store keeps one JSON blob per partition
in it and never updates anything incrementally.
"""

import sqlite3
from pathlib import Path
from typing import Optional


DB_FILENAME = "artslab.db"


class MemoryMedium:
    """Dict-backed medium. Lives as long as the object; used by tests."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    def read(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def write(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._data)


class SqliteMedium:
    """
    SQLite-backed medium.

    A single ``kv`` table holds every key.  Each write commits immediately,
    so the last completed write wins across processes.
    """

    def __init__(self, db_path: Path):
        """
        Args:
            db_path: Path to SQLite database file
        """
        self._db_path = db_path
        self._conn: Optional[sqlite3.Connection] = None
        self._init_db()

    def _init_db(self) -> None:
        """Initialize the SQLite database."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(self._db_path), check_same_thread=False)

        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS kv (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL
            )
        """)
        self._conn.commit()

    def read(self, key: str) -> Optional[str]:
        cursor = self._conn.execute("SELECT value FROM kv WHERE key = ?", (key,))
        row = cursor.fetchone()
        return row[0] if row is not None else None

    def write(self, key: str, value: str) -> None:
        self._conn.execute("""
            INSERT OR REPLACE INTO kv (key, value)
            VALUES (?, ?)
        """, (key, value))
        self._conn.commit()

    def delete(self, key: str) -> None:
        self._conn.execute("DELETE FROM kv WHERE key = ?", (key,))
        self._conn.commit()

    def keys(self) -> list[str]:
        cursor = self._conn.execute("SELECT key FROM kv ORDER BY key")
        return [row[0] for row in cursor.fetchall()]

    def close(self) -> None:
        """Close the database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
