from __future__ import annotations

import json
import logging
import os
import sqlite3
import time
from pathlib import Path

from .preferences import PreferenceStore

logger = logging.getLogger(__name__)

PREFS_PATH_ENV = "AIRLINE_QUIZ_PREFS_PATH"
SCHEMA_VERSION = 1

_SQLITE_SUFFIXES = (".db", ".sqlite", ".sqlite3")


class MemoryPreferenceStore:
    """Process-local store; nothing survives a restart."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})

    def get_string(self, key: str) -> str | None:
        return self._values.get(key)

    def set_string(self, key: str, value: str) -> None:
        self._values[key] = str(value)

    def as_dict(self) -> dict[str, str]:
        return dict(self._values)


class JsonPreferenceStore:
    """Flat JSON object of string values, rewritten atomically on every set."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._values: dict[str, str] = {}
        self._load()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> None:
        if not self._path.exists():
            return
        try:
            payload = json.loads(self._path.read_text(encoding="utf-8"))
        except (ValueError, OSError) as e:
            # ValueError covers both JSON and UTF-8 decode failures.
            logger.warning("Could not load preferences from %s: %s", self._path, e)
            return
        if not isinstance(payload, dict):
            return
        self._values = {str(k): v for k, v in payload.items() if isinstance(v, str)}

    def get_string(self, key: str) -> str | None:
        return self._values.get(key)

    def set_string(self, key: str, value: str) -> None:
        self._values[key] = str(value)
        self._save()

    def _save(self) -> None:
        payload = dict(self._values)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self._path.with_suffix(f"{self._path.suffix}.tmp")
            tmp_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
            tmp_path.replace(self._path)
        except OSError as e:
            logger.warning("Could not save preferences to %s: %s", self._path, e)


def open_db(path: Path) -> sqlite3.Connection:
    conn = sqlite3.connect(path)
    conn.execute("PRAGMA journal_mode=WAL;")
    conn.execute("PRAGMA synchronous=NORMAL;")
    _migrate(conn)
    return conn


def _utc_now_iso() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime(time.time()))


def _migrate(conn: sqlite3.Connection) -> None:
    row = conn.execute("PRAGMA user_version;").fetchone()
    ver = int(row[0]) if row else 0
    if ver >= SCHEMA_VERSION:
        return

    with conn:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS preference (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at_utc TEXT NOT NULL
            );
            """
        )
        conn.execute(f"PRAGMA user_version={SCHEMA_VERSION};")


class SqlitePreferenceStore:
    """Preferences in a single SQLite table; each set is its own transaction."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = open_db(path)

    def get_string(self, key: str) -> str | None:
        row = self._conn.execute("SELECT value FROM preference WHERE key = ?", (key,)).fetchone()
        return None if row is None else str(row[0])

    def set_string(self, key: str, value: str) -> None:
        try:
            with self._conn:
                self._conn.execute(
                    """
                    INSERT INTO preference(key, value, updated_at_utc)
                    VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET
                        value = excluded.value,
                        updated_at_utc = excluded.updated_at_utc
                    """,
                    (key, str(value), _utc_now_iso()),
                )
        except sqlite3.Error as e:
            logger.warning("Could not save preference %s to %s: %s", key, self._path, e)

    def close(self) -> None:
        self._conn.close()


def default_prefs_path() -> Path:
    explicit = os.environ.get(PREFS_PATH_ENV, "").strip()
    if explicit:
        return Path(explicit).expanduser()
    return Path.home() / ".airline_quiz_prefs.json"


def open_preference_store(path: Path | None = None) -> PreferenceStore:
    """Open the store for ``path``; SQLite for .db/.sqlite files, JSON otherwise."""

    target = default_prefs_path() if path is None else path
    if target.suffix.lower() in _SQLITE_SUFFIXES:
        try:
            return SqlitePreferenceStore(target)
        except (sqlite3.Error, OSError) as e:
            logger.warning("Falling back to in-memory preferences, %s unusable: %s", target, e)
            return MemoryPreferenceStore()
    return JsonPreferenceStore(target)
