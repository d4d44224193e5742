"""Tests for field-driven operator resolution."""

from __future__ import annotations

import sys
import unittest
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from TrialSearch.core.errors import ValidationError
from TrialSearch.core.fields import SemanticType, get_field, list_fields, require_field
from TrialSearch.core.operators import (
    DEFAULT_OPERATORS,
    Operator,
    coerce_operator,
    default_operator,
    is_valid_operator,
    operator_label,
    resolve,
)


class TestResolve(unittest.TestCase):
    def test_every_binary_field_gets_is_and_is_not(self) -> None:
        binary = [f for f in list_fields() if f.semantic_type is SemanticType.BINARY]
        self.assertTrue(binary)
        for descriptor in binary:
            with self.subTest(field=descriptor.id):
                self.assertEqual(resolve(descriptor.id), (Operator.IS, Operator.IS_NOT))

    def test_contains_only_fields(self) -> None:
        for field_id in ("inclusion_criteria", "summary", "purpose_of_trial"):
            with self.subTest(field=field_id):
                self.assertEqual(resolve(field_id), (Operator.CONTAINS, Operator.NOT_CONTAINS))

    def test_identifier_field(self) -> None:
        self.assertEqual(resolve("trial_id"), (Operator.IS, Operator.IS_NOT, Operator.CONTAINS))

    def test_numeric_field(self) -> None:
        self.assertEqual(
            [op.value for op in resolve("enrollment")],
            ["=", "!=", ">", ">=", "<", "<="],
        )

    def test_date_field(self) -> None:
        self.assertEqual(
            [op.value for op in resolve("actual_start_date")],
            ["is", "is-not", ">", ">=", "<", "<="],
        )

    def test_remaining_fields_get_default_set_in_order(self) -> None:
        special = {SemanticType.BINARY, SemanticType.NUMBER, SemanticType.DATE, SemanticType.IDENTIFIER}
        for descriptor in list_fields():
            if descriptor.semantic_type in special or descriptor.contains_only:
                continue
            with self.subTest(field=descriptor.id):
                self.assertEqual(resolve(descriptor.id), (Operator.CONTAINS, Operator.IS, Operator.IS_NOT))

    def test_unknown_field_gets_default_set(self) -> None:
        self.assertEqual(resolve("no_such_field"), DEFAULT_OPERATORS)

    def test_default_operator_is_first_resolved(self) -> None:
        self.assertIs(default_operator("enrollment"), Operator.EQ)
        self.assertIs(default_operator("title"), Operator.CONTAINS)
        self.assertIs(default_operator("results_available"), Operator.IS)


class TestOperatorTokens(unittest.TestCase):
    def test_coerce_current_and_legacy_tokens(self) -> None:
        self.assertIs(coerce_operator("is-not"), Operator.IS_NOT)
        self.assertIs(coerce_operator("not_contains"), Operator.NOT_CONTAINS)
        self.assertIs(coerce_operator("greater_than_equal"), Operator.GE)
        self.assertIsNone(coerce_operator("between"))
        self.assertIsNone(coerce_operator(""))

    def test_is_valid_operator(self) -> None:
        self.assertTrue(is_valid_operator("enrollment", ">="))
        self.assertFalse(is_valid_operator("results_available", "contains"))
        self.assertFalse(is_valid_operator("summary", "is"))

    def test_labels(self) -> None:
        self.assertEqual(operator_label(Operator.NOT_CONTAINS), "not contains")
        self.assertEqual(operator_label("weird"), "weird")


class TestFieldRegistry(unittest.TestCase):
    def test_field_ids_are_unique(self) -> None:
        ids = [f.id for f in list_fields()]
        self.assertEqual(len(ids), len(set(ids)))

    def test_require_field_rejects_unknown(self) -> None:
        with self.assertRaises(ValidationError):
            require_field("bogus")
        self.assertIsNone(get_field("bogus"))

    def test_trial_phase_options_use_stored_values(self) -> None:
        phase = require_field("trial_phase")
        self.assertIn("phase_iii", [option.value for option in phase.options])
        self.assertTrue(phase.multi_select)


if __name__ == "__main__":
    unittest.main()
