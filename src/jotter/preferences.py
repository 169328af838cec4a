"""
Preferences module for Jotter.

Process-wide key-value settings store backed by a single SQLite file.
Values are opaque blobs; callers own their encoding.
"""

import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterator

from jotter.config import get_db_path

# Schema version for migrations
SCHEMA_VERSION = 1

SCHEMA = """
-- Schema version tracking
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY
);

-- One row per preference key
CREATE TABLE IF NOT EXISTS preferences (
    key TEXT PRIMARY KEY,
    value BLOB NOT NULL,
    updated_at TEXT NOT NULL                -- ISO 8601
);
"""


class Preferences:
    """SQLite-backed key-value store."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()
        self._ensure_db()

    def _ensure_db(self) -> None:
        """Ensure database exists and schema is current."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with self._connect() as conn:
            conn.executescript(SCHEMA)
            conn.execute(
                "INSERT OR REPLACE INTO schema_version (version) VALUES (?)",
                (SCHEMA_VERSION,)
            )

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        """Context manager for database connections."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def get(self, key: str) -> bytes | None:
        """Get the stored value for a key, or None if unset."""
        with self._connect() as conn:
            row = conn.execute(
                "SELECT value FROM preferences WHERE key = ?", (key,)
            ).fetchone()
            if row:
                return bytes(row["value"])
        return None

    def set(self, key: str, value: bytes) -> None:
        """Store a value, overwriting any previous one."""
        now = datetime.now(timezone.utc).isoformat()

        with self._connect() as conn:
            conn.execute("""
                INSERT INTO preferences (key, value, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
            """, (key, sqlite3.Binary(value), now))

    def remove(self, key: str) -> bool:
        """Delete a key. Returns True if something was removed."""
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM preferences WHERE key = ?", (key,))
            return cursor.rowcount > 0

    def keys(self) -> list[str]:
        """List stored keys in sorted order."""
        with self._connect() as conn:
            rows = conn.execute("SELECT key FROM preferences ORDER BY key").fetchall()
            return [row["key"] for row in rows]

    def get_stats(self) -> dict[str, Any]:
        """Get storage statistics."""
        with self._connect() as conn:
            total, size = conn.execute(
                "SELECT COUNT(*), COALESCE(SUM(LENGTH(value)), 0) FROM preferences"
            ).fetchone()

            return {
                "total_keys": total,
                "total_bytes": size,
                "path": str(self.db_path),
            }
