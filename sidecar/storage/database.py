"""SQLite key-value storage for persisted UI state (motility map, active pattern)."""

from __future__ import annotations

import os
import sqlite3
from datetime import datetime, timezone

import platformdirs

# Explicit database file; falls back to the OS user data directory
_DB_PATH_ENV = os.getenv("ECHO_DB_PATH", "")

_SCHEMA = """
CREATE TABLE IF NOT EXISTS settings (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
"""


def _now() -> str:
    """Return current UTC time as ISO 8601 string."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _get_db_path() -> str:
    """Return OS-appropriate path for ecodoppler.db."""
    if _DB_PATH_ENV:
        return _DB_PATH_ENV
    data_dir = platformdirs.user_data_dir("EcoDoppler")
    os.makedirs(data_dir, exist_ok=True)
    return os.path.join(data_dir, "ecodoppler.db")


class Database:
    """SQLite-backed key-value settings store."""

    def __init__(self, db_path: str | None = None) -> None:
        self._db_path = db_path or _get_db_path()
        self._init_db()

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _init_db(self) -> None:
        conn = self._get_conn()
        try:
            conn.executescript(_SCHEMA)
            conn.commit()
        finally:
            conn.close()

    # --- Settings ---

    def get_setting(self, key: str) -> str | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT value FROM settings WHERE key = ?", (key,)
            ).fetchone()
            return row["value"] if row else None
        finally:
            conn.close()

    def set_setting(self, key: str, value: str) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                "INSERT OR REPLACE INTO settings (key, value, updated_at) VALUES (?, ?, ?)",
                (key, value, _now()),
            )
            conn.commit()
        finally:
            conn.close()

    def get_all_settings(self) -> dict[str, str]:
        conn = self._get_conn()
        try:
            rows = conn.execute("SELECT key, value FROM settings").fetchall()
            return {row["key"]: row["value"] for row in rows}
        finally:
            conn.close()

    def delete_setting(self, key: str) -> None:
        conn = self._get_conn()
        try:
            conn.execute("DELETE FROM settings WHERE key = ?", (key,))
            conn.commit()
        finally:
            conn.close()


class MemorySettings:
    """Dict-backed settings store with the same interface as Database.

    Used for ephemeral sessions and tests; nothing survives the process.
    """

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})

    def get_setting(self, key: str) -> str | None:
        return self._values.get(key)

    def set_setting(self, key: str, value: str) -> None:
        self._values[key] = value

    def get_all_settings(self) -> dict[str, str]:
        return dict(self._values)

    def delete_setting(self, key: str) -> None:
        self._values.pop(key, None)


_db_instance: Database | None = None


def get_db() -> Database:
    """Return the module-level Database singleton."""
    global _db_instance
    if _db_instance is None:
        _db_instance = Database()
    return _db_instance
