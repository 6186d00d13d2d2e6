"""Database connection management for the local SQLite store.

One connection per process, reopened when a different database path is
requested. Every new connection gets foreign keys, WAL journaling and the
pending schema migrations.
"""

from __future__ import annotations

import atexit
import sqlite3
from pathlib import Path

from platformdirs import user_data_dir

from planwise.adapters.sqlite.migrations import MIGRATIONS, MigrationRunner
from planwise.utils.logger import get_logger

DEFAULT_DB_NAME = "planwise.db"


def default_db_path() -> Path:
    return Path(user_data_dir("planwise")) / DEFAULT_DB_NAME


def configure_connection(connection: sqlite3.Connection) -> sqlite3.Connection:
    """Apply row factory, pragmas and migrations to a fresh connection."""
    connection.row_factory = sqlite3.Row
    connection.execute("PRAGMA foreign_keys = ON")
    applied = MigrationRunner(connection).run_migrations(MIGRATIONS)
    if applied:
        get_logger("sqlite").info("applied %d schema migration(s)", applied)
    return connection


class DatabaseConnection:
    """Process-wide holder of the SQLite connection."""

    _connection: sqlite3.Connection | None = None
    _db_path: Path | None = None
    _cleanup_registered = False

    @classmethod
    def get_connection(cls, db_path: str | Path | None = None) -> sqlite3.Connection:
        """Get or create the database connection.

        Args:
            db_path: Path to database file. If None, uses the user data dir.
        """
        db_path = Path(db_path) if db_path is not None else default_db_path()

        if cls._connection is not None and cls._db_path == db_path:
            return cls._connection
        if cls._connection is not None:
            cls.close_connection()

        db_path.parent.mkdir(parents=True, exist_ok=True)
        connection = sqlite3.connect(str(db_path), check_same_thread=False, timeout=30.0)
        connection.execute("PRAGMA journal_mode = WAL")
        configure_connection(connection)

        cls._connection = connection
        cls._db_path = db_path
        if not cls._cleanup_registered:
            atexit.register(cls.close_connection)
            cls._cleanup_registered = True
        return connection

    @classmethod
    def close_connection(cls) -> None:
        """Commit and close the connection, if one is open."""
        if cls._connection is None:
            return
        try:
            cls._connection.commit()
            cls._connection.close()
        finally:
            cls._connection = None
            cls._db_path = None

    @classmethod
    def get_db_path(cls) -> Path | None:
        return cls._db_path


def get_connection(db_path: str | Path | None = None) -> sqlite3.Connection:
    """Helper function to get the database connection."""
    return DatabaseConnection.get_connection(db_path)
