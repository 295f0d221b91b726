"""Completion cache storage for vimman backed by SQLite."""

from __future__ import annotations

import json
import os
import sqlite3
from dataclasses import dataclass
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol

from .index import DocIndex

DEFAULT_CACHE_DIR = Path(os.path.expanduser("~")) / ".vimman"
CACHE_DIR = DEFAULT_CACHE_DIR
_CACHE_DIR_OVERRIDE: ContextVar[Path | None] = ContextVar(
    "vimman_cache_dir_override",
    default=None,
)
CACHE_VERSION = 1
DB_FILENAME = "cache.db"


@dataclass(frozen=True, slots=True)
class CacheRecord:
    key: str
    generated_at: datetime
    index: DocIndex


class CacheStore(Protocol):
    def load(self, key: str) -> CacheRecord | None: ...

    def save(self, record: CacheRecord) -> None: ...

    def delete(self, key: str) -> bool: ...


def _resolve_cache_dir() -> Path:
    override = _CACHE_DIR_OVERRIDE.get()
    return override if override is not None else CACHE_DIR


@contextmanager
def cache_dir_context(path: Path | str | None):
    """Temporarily override the cache directory for the current context."""

    if path is None:
        yield
        return
    dir_path = Path(path).expanduser().resolve()
    if dir_path.exists() and not dir_path.is_dir():
        raise NotADirectoryError(f"Path is not a directory: {dir_path}")
    token = _CACHE_DIR_OVERRIDE.set(dir_path)
    try:
        yield
    finally:
        _CACHE_DIR_OVERRIDE.reset(token)


def ensure_cache_dir() -> Path:
    cache_dir = _resolve_cache_dir()
    cache_dir.mkdir(parents=True, exist_ok=True)
    return cache_dir


def cache_db_path() -> Path:
    """Return the absolute path to the completion cache database."""

    return _resolve_cache_dir() / DB_FILENAME


def _connect(db_path: Path, *, readonly: bool = False) -> sqlite3.Connection:
    if readonly:
        db_uri = f"file:{db_path.as_posix()}?mode=ro"
        conn = sqlite3.connect(db_uri, uri=True)
    else:
        conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA busy_timeout = 5000;")
    if readonly:
        conn.execute("PRAGMA query_only = ON;")
    return conn


def _table_exists(conn: sqlite3.Connection, table: str) -> bool:
    row = conn.execute(
        "SELECT name FROM sqlite_master WHERE type = 'table' AND name = ?",
        (table,),
    ).fetchone()
    return row is not None


def _ensure_schema(conn: sqlite3.Connection) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS cache_record (
            cache_key TEXT PRIMARY KEY,
            version INTEGER NOT NULL,
            generated_at TEXT NOT NULL,
            payload TEXT NOT NULL
        )
        """
    )


def _try_open(db_path: Path) -> sqlite3.Connection | None:
    conn = None
    try:
        conn = _connect(db_path)
        _ensure_schema(conn)
    except sqlite3.DatabaseError:
        if conn is not None:
            conn.close()
        return None
    return conn


def _open_for_write(db_path: Path) -> sqlite3.Connection:
    conn = _try_open(db_path)
    if conn is not None:
        return conn
    # Not a usable database; start over with a fresh file.
    db_path.unlink(missing_ok=True)
    conn = _connect(db_path)
    _ensure_schema(conn)
    return conn


def _serialize_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def _deserialize_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def store_record(record: CacheRecord, *, db_path: Path | None = None) -> Path:
    """Persist *record*, replacing any previous record with the same key."""

    if db_path is None:
        ensure_cache_dir()
        db_path = cache_db_path()
    else:
        db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = _open_for_write(db_path)
    try:
        with conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO cache_record (cache_key, version, generated_at, payload)
                VALUES (?, ?, ?, ?)
                """,
                (
                    record.key,
                    CACHE_VERSION,
                    _serialize_timestamp(record.generated_at),
                    json.dumps(record.index.to_payload(), ensure_ascii=False),
                ),
            )
    finally:
        conn.close()
    return db_path


def load_record(key: str, *, db_path: Path | None = None) -> CacheRecord | None:
    """Return the record stored under *key*, or None when missing or unreadable."""

    db_path = db_path or cache_db_path()
    if not db_path.exists():
        return None
    try:
        conn = _connect(db_path, readonly=True)
    except sqlite3.DatabaseError:
        return None
    try:
        if not _table_exists(conn, "cache_record"):
            return None
        row = conn.execute(
            "SELECT version, generated_at, payload FROM cache_record WHERE cache_key = ?",
            (key,),
        ).fetchone()
    except sqlite3.DatabaseError:
        return None
    finally:
        conn.close()
    if row is None or row["version"] != CACHE_VERSION:
        return None
    try:
        generated_at = _deserialize_timestamp(row["generated_at"])
        index = DocIndex.from_payload(json.loads(row["payload"]))
    except (TypeError, ValueError, AttributeError):
        return None
    return CacheRecord(key=key, generated_at=generated_at, index=index)


def delete_record(key: str, *, db_path: Path | None = None) -> bool:
    """Remove the record stored under *key*, returning True if one existed.

    An unreadable database file counts as a record and is removed.
    """

    db_path = db_path or cache_db_path()
    if not db_path.exists():
        return False
    conn = _try_open(db_path)
    if conn is None:
        db_path.unlink(missing_ok=True)
        return True
    try:
        with conn:
            cursor = conn.execute("DELETE FROM cache_record WHERE cache_key = ?", (key,))
        return cursor.rowcount > 0
    finally:
        conn.close()


class SqliteCacheStore:
    """:class:`CacheStore` writing records into the shared SQLite database."""

    def __init__(self, db_path: Path | None = None) -> None:
        self._db_path = db_path

    @property
    def db_path(self) -> Path:
        return self._db_path or cache_db_path()

    def load(self, key: str) -> CacheRecord | None:
        return load_record(key, db_path=self.db_path)

    def save(self, record: CacheRecord) -> None:
        store_record(record, db_path=self._db_path)

    def delete(self, key: str) -> bool:
        return delete_record(key, db_path=self.db_path)
