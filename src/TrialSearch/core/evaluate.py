"""Evaluate a criteria expression against flat trial records.

Rows are folded left to right with no precedence grouping: each row's
connective joins the running result with the next row's result, so
``A AND B OR C`` is ``(A AND B) OR C``.
"""

from __future__ import annotations

import re
from datetime import date
from typing import Any, Callable, Iterable, Mapping

from dateutil import parser as dt_parser

from TrialSearch.core.criteria import Connective, CriteriaModel, SearchCriterion
from TrialSearch.core.fields import SemanticType, get_field
from TrialSearch.core.operators import Operator, coerce_operator

_WS_RE = re.compile(r"\s+")

_PHASE_ALIASES: Mapping[str, str] = {
    "phase i": "phase i",
    "phase 1": "phase i",
    "phase_i": "phase i",
    "phase_1": "phase i",
    "phase i/ii": "phase i/ii",
    "phase 1/2": "phase i/ii",
    "phase_i_ii": "phase i/ii",
    "phase_1_2": "phase i/ii",
    "phase ii": "phase ii",
    "phase 2": "phase ii",
    "phase_ii": "phase ii",
    "phase_2": "phase ii",
    "phase ii/iii": "phase ii/iii",
    "phase 2/3": "phase ii/iii",
    "phase_ii_iii": "phase ii/iii",
    "phase_2_3": "phase ii/iii",
    "phase iii": "phase iii",
    "phase 3": "phase iii",
    "phase_iii": "phase iii",
    "phase_3": "phase iii",
    "phase iii/iv": "phase iii/iv",
    "phase 3/4": "phase iii/iv",
    "phase_iii_iv": "phase iii/iv",
    "phase_3_4": "phase iii/iv",
    "phase iv": "phase iv",
    "phase 4": "phase iv",
    "phase_iv": "phase iv",
    "phase_4": "phase iv",
    "pre-clinical": "pre-clinical",
    "not applicable": "not applicable",
    "n/a": "not applicable",
}


def evaluate(criteria: CriteriaModel, record: Mapping[str, Any]) -> bool:
    """Return whether ``record`` satisfies the normalized criteria.

    An expression with no usable rows matches every record.
    """
    rows = criteria.normalize().rows
    if not rows:
        return True

    result = match_row(rows[0], record)
    for previous, row in zip(rows, rows[1:]):
        current = match_row(row, record)
        if previous.connective is Connective.OR:
            result = result or current
        else:
            result = result and current
    return result


def filter_records(criteria: CriteriaModel, records: Iterable[Mapping[str, Any]]) -> list[Mapping[str, Any]]:
    """Return records matching ``criteria`` in input order."""
    normalized = criteria.normalize()
    return [record for record in records if evaluate(normalized, record)]


def match_row(row: SearchCriterion, record: Mapping[str, Any]) -> bool:
    """Evaluate a single criterion row against a record."""
    op = coerce_operator(row.operator)
    if op is None:
        return False

    descriptor = get_field(row.field)
    semantic_type = descriptor.semantic_type if descriptor else SemanticType.TEXT
    field_value = _record_text(record.get(row.field))
    search_values = row.value if isinstance(row.value, tuple) else (row.value,)
    search_values = tuple(v for v in search_values if v.strip())
    if not search_values:
        return False

    if semantic_type is SemanticType.DATE:
        return _match_any(op, search_values, lambda v: _compare_dates(op, field_value, v))
    if semantic_type is SemanticType.NUMBER:
        return _match_any(op, search_values, lambda v: _compare_numbers(op, field_value, v))
    if row.field == "trial_phase":
        field_value = normalize_phase(field_value)
        search_values = tuple(normalize_phase(v) for v in search_values)
    return _match_any(op, search_values, lambda v: _compare_text(op, field_value, v))


def normalize_phase(value: str) -> str:
    """Return a canonical, lower-cased spelling of a trial phase."""
    key = _WS_RE.sub(" ", value.strip().lower())
    return _PHASE_ALIASES.get(key, key)


def _match_any(op: Operator, values: tuple[str, ...], check: Callable[[str], bool]) -> bool:
    # Negative operators must hold for every value, positive ones for any.
    if op in (Operator.IS_NOT, Operator.NOT_CONTAINS, Operator.NE):
        return all(check(value) for value in values)
    return any(check(value) for value in values)


def _compare_text(op: Operator, field_value: str, search_value: str) -> bool:
    target = _WS_RE.sub(" ", field_value).strip().casefold()
    needle = _WS_RE.sub(" ", search_value).strip().casefold()
    if op is Operator.CONTAINS:
        return needle in target
    if op is Operator.NOT_CONTAINS:
        return needle not in target
    if op is Operator.IS:
        return target == needle
    if op is Operator.IS_NOT:
        return target != needle
    return False


def _compare_numbers(op: Operator, field_value: str, search_value: str) -> bool:
    left = _to_float(field_value)
    right = _to_float(search_value)
    if left is None or right is None:
        return False
    if op in (Operator.EQ, Operator.IS):
        return left == right
    if op in (Operator.NE, Operator.IS_NOT):
        return left != right
    if op is Operator.GT:
        return left > right
    if op is Operator.GE:
        return left >= right
    if op is Operator.LT:
        return left < right
    if op is Operator.LE:
        return left <= right
    return False


def _compare_dates(op: Operator, field_value: str, search_value: str) -> bool:
    search_date = _to_date(search_value)
    if search_date is None:
        return False
    field_date = _to_date(field_value)
    if field_date is None:
        return op is Operator.IS_NOT
    if op is Operator.IS:
        return field_date == search_date
    if op is Operator.IS_NOT:
        return field_date != search_date
    if op is Operator.GT:
        return field_date > search_date
    if op is Operator.GE:
        return field_date >= search_date
    if op is Operator.LT:
        return field_date < search_date
    if op is Operator.LE:
        return field_date <= search_date
    return False


def _record_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple, set)):
        return ", ".join(str(item) for item in value if item is not None)
    return str(value)


def _to_float(value: str) -> float | None:
    text = value.strip().replace(",", "")
    if not text:
        return None
    try:
        return float(text)
    except ValueError:
        return None


def _to_date(value: str) -> date | None:
    text = value.strip()
    if not text:
        return None
    try:
        return dt_parser.parse(text).date()
    except (ValueError, OverflowError):
        return None
