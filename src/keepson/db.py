"""Database operations for keepson."""

from __future__ import annotations

import re
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path
from typing import Generator, Optional

from .config import Config, get_config
from .schema import SCHEMA_SQL, SCHEMA_VERSION

# Stored timestamps are naive UTC in this format so they sort lexically.
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S.%f"


@lru_cache(maxsize=256)
def _compile(pattern: str) -> re.Pattern:
    return re.compile(pattern, re.IGNORECASE)


def _regexp(pattern: Optional[str], value: Optional[str]) -> bool:
    """Backs the SQL ``value REGEXP pattern`` operator (case-insensitive)."""
    if pattern is None or value is None:
        return False
    return _compile(pattern).search(value) is not None


def _get_connection(db_path: Path) -> sqlite3.Connection:
    """Create a database connection with the REGEXP function registered."""
    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row
    conn.create_function("REGEXP", 2, _regexp, deterministic=True)
    # Enable WAL mode for better concurrency
    conn.execute("PRAGMA journal_mode=WAL")
    # Enable foreign keys
    conn.execute("PRAGMA foreign_keys=ON")
    return conn


@contextmanager
def get_db(config: Optional[Config] = None) -> Generator[sqlite3.Connection, None, None]:
    """Get a database connection as a context manager."""
    if config is None:
        config = get_config()

    conn = _get_connection(config.db_path)
    try:
        yield conn
    finally:
        conn.close()


def init_db(config: Optional[Config] = None) -> None:
    """Initialize the database with schema.

    Args:
        config: Configuration to use. Defaults to global config.
    """
    if config is None:
        config = get_config()

    # Ensure directory exists
    config.db_path.parent.mkdir(parents=True, exist_ok=True)

    with get_db(config) as conn:
        conn.executescript(SCHEMA_SQL)
        conn.execute(
            "INSERT OR IGNORE INTO meta (key, value) VALUES ('schema_version', ?)",
            (str(SCHEMA_VERSION),),
        )
        conn.commit()


def get_schema_version(config: Optional[Config] = None) -> Optional[int]:
    """Get the current schema version from the database."""
    if config is None:
        config = get_config()

    if not config.db_path.exists():
        return None

    with get_db(config) as conn:
        cursor = conn.execute(
            "SELECT value FROM meta WHERE key = 'schema_version'"
        )
        row = cursor.fetchone()
        return int(row[0]) if row else None


def to_db_timestamp(value: datetime) -> str:
    """Convert a datetime to the stored UTC string form.

    Naive datetimes are taken to already be in UTC.
    """
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.strftime(TIMESTAMP_FORMAT)


def from_db_timestamp(value: str) -> datetime:
    """Parse a stored timestamp back into an aware UTC datetime."""
    return datetime.strptime(value, TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
