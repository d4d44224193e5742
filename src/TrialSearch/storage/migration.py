"""Schema migration mechanism for the local SQLite database.

Provides versioned, ordered migrations that are applied automatically at
DatabaseManager initialization time. Each migration runs in an explicit
transaction; failures roll back atomically, leaving the database in a safe
state.
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass

from TrialSearch.utils.log import log

_SCHEMA_VERSION_DDL = """
CREATE TABLE IF NOT EXISTS schema_version (
    id      INTEGER PRIMARY KEY CHECK (id = 1),
    version INTEGER NOT NULL
)
"""


@dataclass(frozen=True)
class Migration:
    """A single versioned schema migration.

    Attributes:
        version: Monotonically increasing integer, starting at 1.
        description: Human-readable summary of what this migration does.
        sql: One or more semicolon-separated DDL/DML statements to execute.
    """

    version: int
    description: str
    sql: str


# Append-only; never modify published entries.
MIGRATIONS: list[Migration] = [
    Migration(
        version=1,
        description="Initial schema: local_collections",
        sql="""
            CREATE TABLE IF NOT EXISTS local_collections (
              namespace TEXT PRIMARY KEY,
              payload TEXT NOT NULL,
              updated_at INTEGER NOT NULL DEFAULT (
                CAST(strftime('%s','now') AS INTEGER)
              )
            );
        """,
    ),
]


def run_migrations(conn: sqlite3.Connection) -> None:
    """Apply all pending migrations to the database.

    Steps performed on every call:
      1. Validate that MIGRATIONS version numbers are consecutive from 1.
      2. Ensure the schema_version bookkeeping table exists.
      3. Read the current version from schema_version (0 if not yet written).
      4. Execute each migration whose version exceeds the current version,
         inside an explicit transaction.

    Args:
        conn: Active SQLite connection.

    Raises:
        ValueError: If MIGRATIONS contains a version gap or does not start at 1.
        sqlite3.Error: If a migration statement fails (transaction is rolled back).
    """
    _validate_migration_list(MIGRATIONS)
    _ensure_version_table(conn)

    current_ver = _get_current_version(conn)
    pending = [m for m in MIGRATIONS if m.version > current_ver]

    if not pending:
        log.debug("schema already at version %d, no migrations to run", current_ver)
        return

    for migration in pending:
        _apply_migration(conn, migration)
        log.info("applied migration v%d: %s", migration.version, migration.description)


def _validate_migration_list(migrations: list[Migration]) -> None:
    """Raise ValueError if migration version numbers are not consecutive from 1."""
    for expected, m in enumerate(migrations, start=1):
        if m.version != expected:
            raise ValueError(
                f"MIGRATIONS version gap: expected version {expected}, "
                f"got {m.version} (description: {m.description!r})."
            )


def _ensure_version_table(conn: sqlite3.Connection) -> None:
    conn.execute(_SCHEMA_VERSION_DDL)
    conn.commit()


def _get_current_version(conn: sqlite3.Connection) -> int:
    """Return the highest applied migration version, or 0 for a new database."""
    row = conn.execute("SELECT version FROM schema_version WHERE id = 1").fetchone()
    return row[0] if row else 0


def _apply_migration(conn: sqlite3.Connection, migration: Migration) -> None:
    """Execute a single migration inside an explicit transaction.

    Statements are executed one by one with conn.execute(); executescript()
    would issue an implicit COMMIT and break atomicity.

    Raises:
        sqlite3.Error: If any statement fails; the transaction is rolled back.
    """
    conn.execute("BEGIN")
    try:
        statements = [s.strip() for s in migration.sql.split(";") if s.strip()]
        for stmt in statements:
            conn.execute(stmt)
        conn.execute(
            "INSERT OR REPLACE INTO schema_version (id, version) VALUES (1, ?)",
            (migration.version,),
        )
        conn.execute("COMMIT")
    except Exception:
        conn.execute("ROLLBACK")
        raise
