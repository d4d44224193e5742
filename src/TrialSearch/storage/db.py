"""SQLite database utilities."""

from __future__ import annotations

import sqlite3
from pathlib import Path

from TrialSearch.storage.migration import run_migrations


class DatabaseManager:
    """Owns the connection to the local database file.

    The schema is migrated to the latest version when the manager is created.
    Supports context manager protocol for automatic connection cleanup.
    """

    def __init__(self, db_path: Path) -> None:
        """Open (and create if needed) the database at ``db_path``.

        Args:
            db_path: Absolute path or project-relative path to database file.
        """
        self.db_path = db_path
        self.conn: sqlite3.Connection | None = ensure_db(db_path)
        run_migrations(self.conn)

    def get_connection(self) -> sqlite3.Connection:
        """Get the shared database connection.

        Raises:
            RuntimeError: If the manager was already closed.
        """
        if self.conn is None:
            raise RuntimeError(f"Database {self.db_path} is closed")
        return self.conn

    def close(self) -> None:
        """Close the database connection."""
        if self.conn is not None:
            self.conn.close()
            self.conn = None

    def __enter__(self) -> DatabaseManager:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def ensure_db(db_path: Path) -> sqlite3.Connection:
    """Ensure database file exists and return connection.

    Args:
        db_path: Absolute path or project-relative path to database file.

    Returns:
        SQLite connection.

    Raises:
        OSError: If directory creation fails.
        sqlite3.Error: If database connection fails.
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    return sqlite3.connect(str(db_path))
