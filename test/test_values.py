"""Tests for dropdown option lookup with static fallbacks."""

from __future__ import annotations

import sys
import unittest
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from TrialSearch.core.errors import ValidationError
from TrialSearch.core.fields import FieldOption, require_field
from TrialSearch.core.result import Result
from TrialSearch.remote import OfflineRemoteStore
from TrialSearch.services.values import DynamicValueSource

_FALLBACK = (FieldOption("Static", "Static"),)


class _StubTaxonomy:
    def __init__(self, result=None, *, raises: bool = False) -> None:
        self.result = result
        self.raises = raises
        self.calls: list[str] = []

    def get_options(self, category: str):
        self.calls.append(category)
        if self.raises:
            raise ConnectionError("taxonomy down")
        return self.result


class TestGetOptions(unittest.TestCase):
    def test_remote_options_are_used_and_cached(self) -> None:
        taxonomy = _StubTaxonomy(Result.success([FieldOption("Remote", "Remote")]))
        source = DynamicValueSource(taxonomy)
        self.assertEqual(source.get_options("country", _FALLBACK), [FieldOption("Remote", "Remote")])
        source.get_options("country", _FALLBACK)
        self.assertEqual(taxonomy.calls, ["country"])

        source.refresh("country")
        source.get_options("country", _FALLBACK)
        self.assertEqual(taxonomy.calls, ["country", "country"])

    def test_failure_uses_fallback(self) -> None:
        source = DynamicValueSource(_StubTaxonomy(Result.failure("HTTP 500")))
        with self.assertLogs("TrialSearch", level="WARNING"):
            self.assertEqual(source.get_options("country", _FALLBACK), list(_FALLBACK))

    def test_empty_success_uses_fallback(self) -> None:
        source = DynamicValueSource(_StubTaxonomy(Result.success([])))
        self.assertEqual(source.get_options("country", _FALLBACK), list(_FALLBACK))

    def test_exception_uses_fallback(self) -> None:
        source = DynamicValueSource(_StubTaxonomy(raises=True))
        with self.assertLogs("TrialSearch", level="WARNING"):
            self.assertEqual(source.get_options("country", _FALLBACK), list(_FALLBACK))

    def test_fallback_results_are_not_cached(self) -> None:
        taxonomy = _StubTaxonomy(Result.success([]))
        source = DynamicValueSource(taxonomy)
        source.get_options("region")
        source.get_options("region")
        self.assertEqual(taxonomy.calls, ["region", "region"])


class TestOptionsForField(unittest.TestCase):
    def test_offline_returns_static_options(self) -> None:
        source = DynamicValueSource(OfflineRemoteStore())
        with self.assertLogs("TrialSearch", level="WARNING"):
            options = source.options_for_field("trial_phase")
        self.assertEqual(options, list(require_field("trial_phase").options))

    def test_field_without_category_skips_remote(self) -> None:
        taxonomy = _StubTaxonomy(Result.success([FieldOption("x", "x")]))
        source = DynamicValueSource(taxonomy)
        self.assertEqual([o.value for o in source.options_for_field("results_available")], ["Yes", "No"])
        self.assertEqual(taxonomy.calls, [])

    def test_unknown_field_raises(self) -> None:
        with self.assertRaises(ValidationError):
            DynamicValueSource(OfflineRemoteStore()).options_for_field("bogus")


if __name__ == "__main__":
    unittest.main()
