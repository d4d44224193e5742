"""Local persistence for saved queries and the execution log.

A single SQLite file holds every local collection, one row per namespace.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from TrialSearch.storage.db import DatabaseManager
from TrialSearch.storage.local import LocalStore, SqliteLocalStore
from TrialSearch.storage.migration import run_migrations
from TrialSearch.utils.log import log

if TYPE_CHECKING:
    from TrialSearch.config import AppConfig


def create_local_store(config: AppConfig) -> tuple[DatabaseManager, SqliteLocalStore]:
    """Open the configured database and wrap it in a local store.

    Args:
        config: Application configuration containing storage settings.

    Returns:
        Tuple of (db_manager, local_store). The caller owns closing the manager.
    """
    db_path = Path(config.storage.db_path)
    db_manager = DatabaseManager(db_path)
    log.info("Local store: %s", db_path)
    return db_manager, SqliteLocalStore(db_manager)


__all__ = [
    "DatabaseManager",
    "LocalStore",
    "SqliteLocalStore",
    "run_migrations",
    "create_local_store",
]
