"""Tests for the REST saved-query store and the taxonomy client."""

from __future__ import annotations

import sys
import unittest
from pathlib import Path

import requests

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))
sys.path.insert(0, str(Path(__file__).resolve().parent))

from _fakes import FakeResponse, FakeSession
from TrialSearch.core.fields import FieldOption
from TrialSearch.remote import OfflineRemoteStore
from TrialSearch.remote.http import ApiClient
from TrialSearch.remote.queries import HttpRemoteQueryStore
from TrialSearch.remote.taxonomy import HttpTaxonomyClient

_QUERY = {
    "id": "q1",
    "title": "HER2 Phase III",
    "description": None,
    "query_type": "dashboard",
    "criteria_snapshot": [
        {"id": "1", "field": "trial_phase", "operator": "is", "value": "phase_iii", "connective": "AND"}
    ],
    "created_at": "2025-01-01T00:00:00+00:00",
    "updated_at": "2025-01-01T00:00:00+00:00",
}


def _store(*responses) -> tuple[HttpRemoteQueryStore, FakeSession]:
    session = FakeSession(*responses)
    client = ApiClient("http://api.test", max_attempts=1, session=session, sleep=lambda _: None)
    return HttpRemoteQueryStore(client), session


class TestHttpRemoteQueryStore(unittest.TestCase):
    def test_list_uses_query_type_path_and_search(self) -> None:
        store, session = _store(FakeResponse(200, {"success": True, "data": [_QUERY]}))
        result = store.list("dashboard", " her2 ")
        self.assertTrue(result.ok)
        self.assertEqual([q.title for q in result.value], ["HER2 Phase III"])
        self.assertEqual(session.calls[0]["url"], "http://api.test/api/v1/queries/saved/user/dashboard-queries")
        self.assertEqual(session.calls[0]["params"], {"search": "her2"})

    def test_list_skips_malformed_items(self) -> None:
        store, _ = _store(FakeResponse(200, {"success": True, "data": [_QUERY, {"title": "no id"}]}))
        with self.assertLogs("TrialSearch", level="WARNING"):
            result = store.list("dashboard")
        self.assertEqual(len(result.value), 1)

    def test_list_non_array_is_failure(self) -> None:
        store, _ = _store(FakeResponse(200, {"success": True, "data": {"oops": 1}}))
        self.assertFalse(store.list("dashboard").ok)

    def test_list_transport_error_is_failure(self) -> None:
        store, _ = _store(requests.ConnectionError("down"))
        result = store.list("dashboard")
        self.assertFalse(result.ok)

    def test_get_not_found_is_empty_success(self) -> None:
        store, _ = _store(FakeResponse(404))
        result = store.get("missing")
        self.assertTrue(result.ok)
        self.assertIsNone(result.value)

    def test_create_posts_payload(self) -> None:
        store, session = _store(FakeResponse(201, {"success": True, "data": _QUERY}))
        result = store.create(_QUERY)
        self.assertTrue(result.ok)
        self.assertEqual(result.value.id, "q1")
        self.assertEqual(session.calls[0]["method"], "POST")
        self.assertEqual(session.calls[0]["json"]["title"], "HER2 Phase III")

    def test_update_with_empty_body_falls_back_to_payload(self) -> None:
        store, session = _store(FakeResponse(204))
        payload = {key: value for key, value in _QUERY.items() if key != "id"}
        result = store.update("q1", payload)
        self.assertTrue(result.ok)
        self.assertEqual(result.value.id, "q1")
        self.assertEqual(session.calls[0]["method"], "PUT")
        self.assertTrue(session.calls[0]["url"].endswith("/api/v1/queries/saved/q1"))

    def test_delete_tolerates_not_found(self) -> None:
        store, _ = _store(FakeResponse(404))
        self.assertTrue(store.delete("gone").ok)

    def test_delete_server_error_is_failure(self) -> None:
        store, _ = _store(FakeResponse(500))
        self.assertFalse(store.delete("q1").ok)


class TestHttpTaxonomyClient(unittest.TestCase):
    def test_active_options_sorted(self) -> None:
        session = FakeSession(
            FakeResponse(
                200,
                {
                    "success": True,
                    "data": [
                        {"value": "Canada", "label": "Canada", "sort_order": 2},
                        {"value": "Brazil", "label": "Brazil", "sort_order": 1},
                        {"value": "Narnia", "label": "Narnia", "sort_order": 0, "is_active": False},
                        {"value": "", "label": "Blank", "sort_order": 3},
                    ],
                },
            )
        )
        client = HttpTaxonomyClient(ApiClient("http://api.test", max_attempts=1, session=session))
        result = client.get_options("country")
        self.assertEqual(result.value, [FieldOption("Brazil", "Brazil"), FieldOption("Canada", "Canada")])
        self.assertEqual(session.calls[0]["url"], "http://api.test/api/v1/dropdown-management/options/country")


class TestOfflineRemoteStore(unittest.TestCase):
    def test_every_call_fails_without_io(self) -> None:
        store = OfflineRemoteStore()
        self.assertFalse(store.list("dashboard").ok)
        self.assertFalse(store.get("q1").ok)
        self.assertFalse(store.create({}).ok)
        self.assertFalse(store.update("q1", {}).ok)
        self.assertFalse(store.delete("q1").ok)
        self.assertFalse(store.get_options("country").ok)


if __name__ == "__main__":
    unittest.main()
