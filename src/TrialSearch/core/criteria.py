"""In-memory criteria expression edited by the advanced search surface.

The model is immutable: each operation returns a new `CriteriaModel`, and
`reduce()` maps an action onto the matching operation so callers can drive
the model as a pure state-transition function.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Iterable, Mapping, Sequence, Union

from TrialSearch.core.errors import InvalidOperator, ValidationError
from TrialSearch.core.fields import require_field
from TrialSearch.core.operators import coerce_operator, default_operator, is_valid_operator, resolve

CriterionValue = Union[str, tuple[str, ...]]


class Connective(str, Enum):
    """Boolean joiner between a row and the next one."""

    AND = "AND"
    OR = "OR"


@dataclass(frozen=True, slots=True)
class SearchCriterion:
    """One field/operator/value/connective row.

    Attributes:
        id: Row identifier, unique within its model.
        field: Field id, or empty string when no field is selected yet.
        operator: Operator token; empty until a field is selected.
        value: Scalar string, or a tuple of strings for multi-select fields.
        connective: How this row combines with the next row.
    """

    id: str
    field: str = ""
    operator: str = ""
    value: CriterionValue = ""
    connective: Connective = Connective.AND

    def has_value(self) -> bool:
        """Return whether the value holds at least one non-blank string."""
        if isinstance(self.value, tuple):
            return any(item.strip() for item in self.value)
        return bool(self.value.strip())

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "field": self.field,
            "operator": self.operator,
            "value": list(self.value) if isinstance(self.value, tuple) else self.value,
            "connective": self.connective.value,
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> SearchCriterion:
        """Build a row from its stored mapping.

        Accepts the legacy ``logic`` key and legacy operator spellings.
        """
        operator_token = str(raw.get("operator") or "")
        operator = coerce_operator(operator_token)
        connective_raw = str(raw.get("connective") or raw.get("logic") or "AND").upper()
        return cls(
            id=str(raw.get("id") or ""),
            field=str(raw.get("field") or ""),
            operator=operator.value if operator is not None else operator_token,
            value=_coerce_value(raw.get("value")),
            connective=Connective.OR if connective_raw == "OR" else Connective.AND,
        )


@dataclass(frozen=True, slots=True)
class CriteriaModel:
    """Ordered list of criterion rows."""

    rows: tuple[SearchCriterion, ...] = ()

    @classmethod
    def empty(cls) -> CriteriaModel:
        """Return the initial state: a single row with nothing selected."""
        return cls(rows=(SearchCriterion(id="1"),))

    @classmethod
    def from_list(cls, raw_rows: Iterable[Mapping[str, Any]] | None) -> CriteriaModel:
        # Stray non-object rows in stored data are skipped.
        return cls(
            rows=tuple(
                SearchCriterion.from_dict(row) for row in (raw_rows or ()) if isinstance(row, Mapping)
            )
        )

    def to_list(self) -> list[dict[str, Any]]:
        return [row.to_dict() for row in self.rows]

    def __len__(self) -> int:
        return len(self.rows)

    def get(self, row_id: str) -> SearchCriterion:
        """Return the row with ``row_id``.

        Raises:
            KeyError: If no row has that id.
        """
        for row in self.rows:
            if row.id == row_id:
                return row
        raise KeyError(row_id)

    def add_row(self) -> CriteriaModel:
        """Append an empty row with connective AND."""
        return CriteriaModel(rows=self.rows + (SearchCriterion(id=_next_row_id(self.rows)),))

    def remove_row(self, row_id: str) -> CriteriaModel:
        """Remove a row; removing the last row leaves the model empty."""
        self.get(row_id)
        return CriteriaModel(rows=tuple(row for row in self.rows if row.id != row_id))

    def update_field(self, row_id: str, field_id: str) -> CriteriaModel:
        """Select a field, resetting operator to its default and clearing value.

        Raises:
            ValidationError: If ``field_id`` is not registered.
        """
        if not field_id:
            return self._replace(row_id, field="", operator="", value="")
        require_field(field_id)
        return self._replace(
            row_id,
            field=field_id,
            operator=default_operator(field_id).value,
            value="",
        )

    def update_operator(self, row_id: str, operator: str) -> CriteriaModel:
        """Set a row's operator.

        Raises:
            InvalidOperator: If the operator is not resolved for the row's field.
        """
        row = self.get(row_id)
        op = coerce_operator(operator)
        if not row.field or op is None or op not in resolve(row.field):
            raise InvalidOperator(row.field, str(operator))
        return self._replace(row_id, operator=op.value)

    def update_value(self, row_id: str, value: str | Sequence[str]) -> CriteriaModel:
        """Set a row's value.

        Lists are accepted only for multi-select dropdown fields.

        Raises:
            ValidationError: If a list is given for a scalar field.
        """
        row = self.get(row_id)
        if isinstance(value, str):
            return self._replace(row_id, value=value)
        descriptor = require_field(row.field) if row.field else None
        if descriptor is None or not descriptor.multi_select:
            raise ValidationError(f"Field {row.field or '<unset>'!r} accepts a single value only")
        return self._replace(row_id, value=tuple(str(item) for item in value))

    def update_connective(self, row_id: str, connective: Connective | str) -> CriteriaModel:
        """Set how a row combines with the next row.

        Raises:
            ValidationError: If ``connective`` is neither AND nor OR.
        """
        if not isinstance(connective, Connective):
            try:
                connective = Connective(str(connective).strip().upper())
            except ValueError as error:
                raise ValidationError(f"Unknown connective: {connective!r}") from error
        return self._replace(row_id, connective=connective)

    def normalize(self) -> CriteriaModel:
        """Drop rows without a field or without a non-blank value."""
        return CriteriaModel(rows=tuple(row for row in self.rows if row.field and row.has_value()))

    def is_runnable(self) -> bool:
        """Return whether at least one row survives normalization."""
        return bool(self.normalize().rows)

    def validate(self) -> CriteriaModel:
        """Return the normalized model after checking every surviving row.

        Rows read from stored or hand-written JSON bypass the update
        operations, so each one is checked against the field registry and
        the operators resolved for its field.

        Raises:
            ValidationError: If no row is runnable or a field is unknown.
            InvalidOperator: If a row's operator is not offered for its field.
        """
        normalized = self.normalize()
        if not normalized.rows:
            raise ValidationError("At least one criterion needs a field and a value")
        for row in normalized.rows:
            require_field(row.field)
            if not is_valid_operator(row.field, row.operator):
                raise InvalidOperator(row.field, row.operator)
        return normalized

    def _replace(self, row_id: str, **changes: Any) -> CriteriaModel:
        self.get(row_id)
        return CriteriaModel(
            rows=tuple(replace(row, **changes) if row.id == row_id else row for row in self.rows)
        )


@dataclass(frozen=True, slots=True)
class AddRow:
    pass


@dataclass(frozen=True, slots=True)
class RemoveRow:
    row_id: str


@dataclass(frozen=True, slots=True)
class UpdateField:
    row_id: str
    field: str


@dataclass(frozen=True, slots=True)
class UpdateOperator:
    row_id: str
    operator: str


@dataclass(frozen=True, slots=True)
class UpdateValue:
    row_id: str
    value: str | Sequence[str]


@dataclass(frozen=True, slots=True)
class UpdateConnective:
    row_id: str
    connective: Connective | str


@dataclass(frozen=True, slots=True)
class Reset:
    pass


CriteriaAction = Union[AddRow, RemoveRow, UpdateField, UpdateOperator, UpdateValue, UpdateConnective, Reset]


def reduce(model: CriteriaModel, action: CriteriaAction) -> CriteriaModel:
    """Apply one action to a model and return the new model.

    Raises:
        TypeError: For an unknown action type.
    """
    if isinstance(action, AddRow):
        return model.add_row()
    if isinstance(action, RemoveRow):
        return model.remove_row(action.row_id)
    if isinstance(action, UpdateField):
        return model.update_field(action.row_id, action.field)
    if isinstance(action, UpdateOperator):
        return model.update_operator(action.row_id, action.operator)
    if isinstance(action, UpdateValue):
        return model.update_value(action.row_id, action.value)
    if isinstance(action, UpdateConnective):
        return model.update_connective(action.row_id, action.connective)
    if isinstance(action, Reset):
        return CriteriaModel.empty()
    raise TypeError(f"Unsupported criteria action: {type(action).__name__}")


def _next_row_id(rows: Sequence[SearchCriterion]) -> str:
    """Return a row id not used by ``rows``."""
    numeric = [int(row.id) for row in rows if row.id.isdigit()]
    candidate = max(numeric, default=0) + 1
    taken = {row.id for row in rows}
    while str(candidate) in taken:
        candidate += 1
    return str(candidate)


def _coerce_value(raw: Any) -> CriterionValue:
    if raw is None:
        return ""
    if isinstance(raw, (list, tuple)):
        return tuple("" if item is None else str(item) for item in raw)
    return str(raw)
