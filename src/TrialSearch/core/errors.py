"""Error taxonomy for the search and saved-query subsystem."""

from __future__ import annotations


class TrialSearchError(Exception):
    """Base class for all TrialSearch errors."""


class ValidationError(TrialSearchError):
    """User input cannot be saved or run (empty title, no usable criteria)."""


class InvalidOperator(ValidationError):
    """Operator is not in the resolved operator list of the row's field."""

    def __init__(self, field_id: str, operator: str) -> None:
        super().__init__(f"Operator {operator!r} is not valid for field {field_id or '<unset>'!r}")
        self.field_id = field_id
        self.operator = operator


class RemoteUnavailable(TrialSearchError):
    """Remote store failed: transport error, non-success status or bad payload."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class LocalStoreCorrupt(TrialSearchError):
    """A local collection could not be decoded."""

    def __init__(self, namespace: str, reason: str) -> None:
        super().__init__(f"Local collection {namespace!r} is corrupt: {reason}")
        self.namespace = namespace
