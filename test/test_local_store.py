"""Tests for the SQLite-backed namespaced local store."""

from __future__ import annotations

import sys
import tempfile
import unittest
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from TrialSearch.core.errors import LocalStoreCorrupt
from TrialSearch.storage.db import DatabaseManager
from TrialSearch.storage.local import SqliteLocalStore


class TestSqliteLocalStore(unittest.TestCase):
    def setUp(self) -> None:
        self._tmpdir = tempfile.TemporaryDirectory()
        self.db = DatabaseManager(Path(self._tmpdir.name) / "nested" / "trial_search.db")
        self.store = SqliteLocalStore(self.db)

    def tearDown(self) -> None:
        self.db.close()
        self._tmpdir.cleanup()

    def _store_document(self, namespace: str, payload: str) -> None:
        """Write a document verbatim, bypassing JSON encoding."""
        conn = self.db.get_connection()
        conn.execute(
            "INSERT OR REPLACE INTO local_collections (namespace, payload) VALUES (?, ?)",
            (namespace, payload),
        )
        conn.commit()

    def test_missing_namespace_reads_empty(self) -> None:
        self.assertEqual(self.store.read("savedQueries:dashboard"), [])

    def test_write_replaces_collection(self) -> None:
        self.store.write("ns", [{"id": "1"}, {"id": "2"}])
        self.store.write("ns", [{"id": "3"}])
        self.assertEqual(self.store.read("ns"), [{"id": "3"}])

    def test_namespaces_are_isolated(self) -> None:
        self.store.write("savedQueries:dashboard", [{"id": "d"}])
        self.store.write("savedQueries:filter", [{"id": "f"}])
        self.assertEqual(self.store.read("savedQueries:dashboard"), [{"id": "d"}])
        self.assertEqual(self.store.read("savedQueries:filter"), [{"id": "f"}])

    def test_unparsable_document_reads_empty(self) -> None:
        self._store_document("ns", "{not json")
        with self.assertRaises(LocalStoreCorrupt):
            self.store.load("ns")
        with self.assertLogs("TrialSearch", level="WARNING"):
            self.assertEqual(self.store.read("ns"), [])

    def test_non_list_document_is_corrupt(self) -> None:
        self._store_document("ns", '{"id": "1"}')
        with self.assertRaises(LocalStoreCorrupt) as ctx:
            self.store.load("ns")
        self.assertEqual(ctx.exception.namespace, "ns")

    def test_corrupt_collection_can_be_overwritten(self) -> None:
        self._store_document("ns", "garbage")
        self.store.write("ns", [{"id": "fresh"}])
        self.assertEqual(self.store.read("ns"), [{"id": "fresh"}])

    def test_non_object_items_are_skipped(self) -> None:
        self._store_document("ns", '[{"id": "1"}, 5, "x", null]')
        self.assertEqual(self.store.read("ns"), [{"id": "1"}])

    def test_data_survives_reopen(self) -> None:
        self.store.write("ns", [{"id": "1"}])
        db_path = self.db.db_path
        self.db.close()
        self.db = DatabaseManager(db_path)
        self.assertEqual(SqliteLocalStore(self.db).read("ns"), [{"id": "1"}])


if __name__ == "__main__":
    unittest.main()
