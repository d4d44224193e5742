"""Namespaced whole-collection key-value store."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, Protocol, Sequence

from TrialSearch.core.errors import LocalStoreCorrupt
from TrialSearch.utils.log import log

if TYPE_CHECKING:
    from TrialSearch.storage.db import DatabaseManager


class LocalStore(Protocol):
    """Persistent, synchronous, process-local collection store.

    Collections are read and written whole; there is no per-record API.
    """

    def read(self, namespace: str) -> list[dict[str, Any]]:
        """Return the collection, or an empty list when missing or corrupt."""
        raise NotImplementedError

    def write(self, namespace: str, items: Sequence[dict[str, Any]]) -> None:
        """Replace the collection."""
        raise NotImplementedError


class SqliteLocalStore:
    """SQLite-backed local store keeping one JSON document per namespace."""

    def __init__(self, db_manager: DatabaseManager):
        """Initialize local store.

        Args:
            db_manager: Database manager owning the connection.
        """
        log.debug("Initializing SqliteLocalStore")
        self.conn = db_manager.get_connection()

    def load(self, namespace: str) -> list[dict[str, Any]]:
        """Return the stored collection.

        Raises:
            LocalStoreCorrupt: If the stored document is not a JSON list of objects.
        """
        row = self.conn.execute(
            "SELECT payload FROM local_collections WHERE namespace = ?",
            (namespace,),
        ).fetchone()
        if row is None:
            return []
        try:
            data = json.loads(row[0])
        except (TypeError, ValueError) as error:
            raise LocalStoreCorrupt(namespace, str(error)) from error
        if not isinstance(data, list):
            raise LocalStoreCorrupt(namespace, f"expected a list, got {type(data).__name__}")
        # Skip stray non-object items rather than failing the whole collection.
        return [item for item in data if isinstance(item, dict)]

    def read(self, namespace: str) -> list[dict[str, Any]]:
        """Return the collection, treating a corrupt document as empty."""
        try:
            return self.load(namespace)
        except LocalStoreCorrupt as error:
            log.warning("%s; starting from an empty collection", error)
            return []

    def write(self, namespace: str, items: Sequence[dict[str, Any]]) -> None:
        """Replace the collection for ``namespace``."""
        payload = json.dumps(list(items), ensure_ascii=False)
        self.conn.execute(
            """
            INSERT INTO local_collections (namespace, payload, updated_at)
            VALUES (?, ?, CAST(strftime('%s','now') AS INTEGER))
            ON CONFLICT(namespace) DO UPDATE SET
                payload = excluded.payload,
                updated_at = excluded.updated_at
            """,
            (namespace, payload),
        )
        self.conn.commit()
        log.debug("Wrote %d items to local namespace %s", len(items), namespace)
