"""Remote-first read and local-first write policy.

Kept separate from the stores so the fallback rules can be exercised with
stub callables.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, Sequence, TypeVar

from TrialSearch.core.errors import RemoteUnavailable
from TrialSearch.core.result import Result
from TrialSearch.utils.log import log

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class WriteOutcome(Generic[T]):
    """Result of a dual write.

    Attributes:
        value: What the local step produced; always present.
        remote_ok: Whether the remote step succeeded.
        remote_value: Remote payload on success.
    """

    value: T
    remote_ok: bool
    remote_value: Any = None


@dataclass(frozen=True, slots=True)
class RemoteThenLocal:
    """Two-step strategy: remote is preferred for reads, local is written first.

    Remote failures are logged and never raised.
    """

    name: str = "remote"

    def read(
        self,
        remote: Callable[[], Result[Sequence[T]]],
        local: Callable[[], Sequence[T]],
    ) -> list[T]:
        """Return the remote collection when it is non-empty, else the local one.

        An empty successful remote read also falls back to local so that
        records saved while offline stay visible.
        """
        result = self._call_remote(remote, "read")
        if result.ok and result.value:
            return list(result.value)
        if result.ok:
            log.info("%s returned no records; using local store", self.name)
        return list(local())

    def read_one(
        self,
        remote: Callable[[], Result[T | None]],
        local: Callable[[], T | None],
    ) -> T | None:
        """Return the remote record when found, else the local one."""
        result = self._call_remote(remote, "read")
        if result.ok and result.value is not None:
            return result.value
        return local()

    def write(
        self,
        local: Callable[[], T],
        remote: Callable[[], Result[Any]],
    ) -> WriteOutcome[T]:
        """Run the local step, then attempt the remote step.

        Local errors propagate before the remote is contacted; remote failures
        are only logged.
        """
        value = local()
        result = self._call_remote(remote, "write")
        return WriteOutcome(value=value, remote_ok=result.ok, remote_value=result.value)

    def _call_remote(self, call: Callable[[], Result[Any]], action: str) -> Result[Any]:
        try:
            result = call()
        except Exception as error:  # noqa: BLE001 - remote failure must be isolated
            log.warning("%s %s raised: %s", self.name, action, error)
            return Result.failure(RemoteUnavailable(str(error)))
        if not result.ok:
            log.warning("%s %s failed: %s", self.name, action, result.error)
        return result
