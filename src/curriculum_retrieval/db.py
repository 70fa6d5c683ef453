"""Database operations for curriculum-retrieval."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional

from .config import Config, get_config
from .schema import SCHEMA_SQL, SCHEMA_VERSION


def casefold(value: Optional[str]) -> Optional[str]:
    """Canonical case-insensitive form used for every name/grade/subject comparison."""
    if value is None:
        return None
    return str(value).casefold()


def _get_connection(db_path: Path, timeout: float) -> sqlite3.Connection:
    """Create a database connection with the casefold() SQL function registered."""
    conn = sqlite3.connect(str(db_path), timeout=timeout)
    conn.row_factory = sqlite3.Row
    conn.create_function("casefold", 1, casefold, deterministic=True)
    # Enable WAL mode so readers are not blocked by a writer
    conn.execute("PRAGMA journal_mode=WAL")
    # Enable foreign keys
    conn.execute("PRAGMA foreign_keys=ON")
    return conn


@contextmanager
def get_db(config: Optional[Config] = None) -> Generator[sqlite3.Connection, None, None]:
    """Get a database connection as a context manager."""
    if config is None:
        config = get_config()

    conn = _get_connection(config.db_path, config.busy_timeout)
    try:
        yield conn
    finally:
        conn.close()


def init_db(config: Optional[Config] = None) -> None:
    """Initialize the database with schema.

    Safe to call repeatedly; all statements are idempotent.

    Args:
        config: Configuration to use. Defaults to global config.
    """
    if config is None:
        config = get_config()

    # Ensure directory exists
    config.db_path.parent.mkdir(parents=True, exist_ok=True)

    with get_db(config) as conn:
        # Check if already initialized
        cursor = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name='meta'"
        )
        is_new = cursor.fetchone() is None

        # Create schema
        conn.executescript(SCHEMA_SQL)

        if is_new:
            conn.execute(
                "INSERT INTO meta (key, value) VALUES ('schema_version', ?)",
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


def execute_query(
    query: str,
    params: tuple = (),
    config: Optional[Config] = None,
) -> list[sqlite3.Row]:
    """Execute a query and return all results."""
    if config is None:
        config = get_config()

    with get_db(config) as conn:
        cursor = conn.execute(query, params)
        return cursor.fetchall()
