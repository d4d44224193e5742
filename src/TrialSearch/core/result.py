"""Success/failure envelope returned by remote capability clients."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

from TrialSearch.core.errors import RemoteUnavailable

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Result(Generic[T]):
    """Outcome of one remote call.

    Attributes:
        ok: Whether the call succeeded.
        value: Payload on success.
        error: Failure reason; set only when ``ok`` is false.
    """

    ok: bool
    value: T | None = None
    error: RemoteUnavailable | None = None

    @classmethod
    def success(cls, value: T) -> Result[T]:
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: RemoteUnavailable | str) -> Result[T]:
        if isinstance(error, str):
            error = RemoteUnavailable(error)
        return cls(ok=False, error=error)
