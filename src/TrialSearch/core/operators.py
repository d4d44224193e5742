"""Operator resolution from field metadata."""

from __future__ import annotations

from enum import Enum
from typing import Mapping

from TrialSearch.core.fields import SemanticType, get_field


class Operator(str, Enum):
    """Comparison operators available to criterion rows."""

    IS = "is"
    IS_NOT = "is-not"
    CONTAINS = "contains"
    NOT_CONTAINS = "not-contains"
    EQ = "="
    NE = "!="
    GT = ">"
    GE = ">="
    LT = "<"
    LE = "<="


BINARY_OPERATORS: tuple[Operator, ...] = (Operator.IS, Operator.IS_NOT)
CONTAINS_ONLY_OPERATORS: tuple[Operator, ...] = (Operator.CONTAINS, Operator.NOT_CONTAINS)
IDENTIFIER_OPERATORS: tuple[Operator, ...] = (Operator.IS, Operator.IS_NOT, Operator.CONTAINS)
NUMERIC_OPERATORS: tuple[Operator, ...] = (
    Operator.EQ,
    Operator.NE,
    Operator.GT,
    Operator.GE,
    Operator.LT,
    Operator.LE,
)
DATE_OPERATORS: tuple[Operator, ...] = (
    Operator.IS,
    Operator.IS_NOT,
    Operator.GT,
    Operator.GE,
    Operator.LT,
    Operator.LE,
)
DEFAULT_OPERATORS: tuple[Operator, ...] = (Operator.CONTAINS, Operator.IS, Operator.IS_NOT)

_LABELS: Mapping[Operator, str] = {
    Operator.IS: "is",
    Operator.IS_NOT: "is not",
    Operator.CONTAINS: "contains",
    Operator.NOT_CONTAINS: "not contains",
    Operator.EQ: "=",
    Operator.NE: "!=",
    Operator.GT: ">",
    Operator.GE: ">=",
    Operator.LT: "<",
    Operator.LE: "<=",
}

# Tokens written by earlier releases of the saved-query screens.
_LEGACY_TOKENS: Mapping[str, Operator] = {
    "is_not": Operator.IS_NOT,
    "not_contains": Operator.NOT_CONTAINS,
    "equals": Operator.EQ,
    "not_equals": Operator.NE,
    "greater_than": Operator.GT,
    "greater_than_equal": Operator.GE,
    "less_than": Operator.LT,
    "less_than_equal": Operator.LE,
}


def resolve(field_id: str) -> tuple[Operator, ...]:
    """Return the ordered operators valid for a field.

    Rules are checked in precedence order; the first match wins:
    binary, contains-only text, identifier, number, date, then the default
    short-text/dropdown set. Unknown fields get the default set.

    Args:
        field_id: Registered field identifier.

    Returns:
        Ordered tuple of operators; the first element is the row default.
    """
    descriptor = get_field(field_id)
    if descriptor is None:
        return DEFAULT_OPERATORS
    if descriptor.semantic_type is SemanticType.BINARY:
        return BINARY_OPERATORS
    if descriptor.contains_only:
        return CONTAINS_ONLY_OPERATORS
    if descriptor.semantic_type is SemanticType.IDENTIFIER:
        return IDENTIFIER_OPERATORS
    if descriptor.semantic_type is SemanticType.NUMBER:
        return NUMERIC_OPERATORS
    if descriptor.semantic_type is SemanticType.DATE:
        return DATE_OPERATORS
    return DEFAULT_OPERATORS


def default_operator(field_id: str) -> Operator:
    """Return the operator a row takes when its field is selected."""
    return resolve(field_id)[0]


def is_valid_operator(field_id: str, operator: str) -> bool:
    """Return whether ``operator`` is offered for ``field_id``."""
    op = coerce_operator(operator)
    return op is not None and op in resolve(field_id)


def coerce_operator(token: str) -> Operator | None:
    """Map a raw token (current or legacy spelling) to an Operator."""
    if isinstance(token, Operator):
        return token
    raw = str(token or "").strip()
    if not raw:
        return None
    try:
        return Operator(raw)
    except ValueError:
        return _LEGACY_TOKENS.get(raw.lower())


def operator_label(operator: Operator | str) -> str:
    """Return the display label for an operator token."""
    op = coerce_operator(operator)
    if op is None:
        return str(operator)
    return _LABELS[op]
