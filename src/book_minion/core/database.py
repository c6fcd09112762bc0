"""
SQLite database operations for Book Minion
"""

import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from loguru import logger

from .config import get_data_dir


# Database schema version for migrations
SCHEMA_VERSION = 2


def get_database_path() -> Path:
    """Get the path to the SQLite database file.

    The BOOK_MINION_DB environment variable overrides the default location.
    """
    override = os.environ.get("BOOK_MINION_DB")
    if override:
        return Path(override).expanduser()
    return get_data_dir() / "book_minion.db"


@contextmanager
def get_db_connection(db_path: Optional[Path] = None) -> Iterator[sqlite3.Connection]:
    """Get a database connection with proper cleanup and concurrency support.

    Args:
        db_path: Database file to open (default: get_database_path())
    """
    path = db_path if db_path is not None else get_database_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(path, timeout=30.0)
    conn.row_factory = sqlite3.Row  # Enable dict-like access

    # WAL mode lets a catalog listing read snapshots while a session writes
    conn.execute("PRAGMA journal_mode=WAL")

    try:
        yield conn
    finally:
        conn.close()


def migrate_database(conn: sqlite3.Connection, current_version: int) -> None:
    """Migrate database from current_version to latest schema."""
    if current_version < 1:
        # v1: one persisted session snapshot per book
        conn.execute("""
            CREATE TABLE IF NOT EXISTS session_snapshots (
                book_identity TEXT PRIMARY KEY,
                payload TEXT NOT NULL, -- JSON snapshot
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)
        conn.commit()

    if current_version < 2:
        # v2: user-chosen display names for books
        conn.execute("""
            CREATE TABLE IF NOT EXISTS book_names (
                book_identity TEXT PRIMARY KEY,
                display_name TEXT NOT NULL,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)
        conn.commit()


def init_database(db_path: Optional[Path] = None) -> None:
    """Initialize the database and bring the schema up to date."""
    with get_db_connection(db_path) as conn:
        conn.execute("""
            CREATE TABLE IF NOT EXISTS schema_version (
                version INTEGER PRIMARY KEY
            )
        """)

        cursor = conn.execute("SELECT MAX(version) AS version FROM schema_version")
        row = cursor.fetchone()
        current_version = row["version"] if row and row["version"] is not None else 0

        if current_version < SCHEMA_VERSION:
            logger.info(
                f"Migrating database from v{current_version} to v{SCHEMA_VERSION}"
            )
            migrate_database(conn, current_version)
            conn.execute(
                "INSERT OR REPLACE INTO schema_version (version) VALUES (?)",
                (SCHEMA_VERSION,),
            )
            conn.commit()
