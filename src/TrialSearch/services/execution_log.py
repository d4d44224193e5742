"""Local execution history with a retention sweep."""

from __future__ import annotations

import math
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from TrialSearch.core.criteria import CriteriaModel
from TrialSearch.core.models import QueryLogEntry, QueryLogType, utc_now
from TrialSearch.storage.local import LocalStore
from TrialSearch.utils.log import log

LOG_NAMESPACE = "queryExecutionLogs"
DEFAULT_RETENTION_DAYS = 30
DEFAULT_WARN_DAYS = 7
DEFAULT_MAX_ENTRIES = 50

EXPIRY_OK = "ok"
EXPIRY_EXPIRING = "expiring"

_SECONDS_PER_DAY = 86400


@dataclass(frozen=True, slots=True)
class LogReadResult:
    """Surviving entries (newest first) and how many the sweep removed."""

    entries: tuple[QueryLogEntry, ...]
    pruned: int = 0


class ExecutionLog:
    """Append-only record of executed searches kept in the local store.

    Every read removes entries older than the retention window and writes
    the survivors back, so repeated reads prune nothing further.
    """

    def __init__(
        self,
        local_store: LocalStore,
        *,
        retention_days: int = DEFAULT_RETENTION_DAYS,
        warn_days: int = DEFAULT_WARN_DAYS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        if retention_days <= 0:
            raise ValueError("retention_days must be positive")
        self.local_store = local_store
        self.retention_days = retention_days
        self.warn_days = warn_days
        self.max_entries = max_entries
        self.clock = clock

    def append(self, entry: QueryLogEntry) -> None:
        """Store ``entry`` as the newest record."""
        items = self.local_store.read(LOG_NAMESPACE)
        items.insert(0, entry.to_payload())
        if self.max_entries > 0 and len(items) > self.max_entries:
            log.debug("Execution log over capacity; dropping %d oldest", len(items) - self.max_entries)
            del items[self.max_entries:]
        self.local_store.write(LOG_NAMESPACE, items)

    def record(
        self,
        title: str,
        query_type: QueryLogType = QueryLogType.ADVANCED_SEARCH,
        *,
        criteria: Optional[CriteriaModel] = None,
        query_id: Optional[str] = None,
        description: Optional[str] = None,
        result_count: Optional[int] = None,
        execution_ms: Optional[int] = None,
    ) -> QueryLogEntry:
        """Build an entry stamped with the current time and append it."""
        entry = QueryLogEntry(
            id=uuid.uuid4().hex,
            query_id=query_id,
            query_title=title,
            executed_at=self.clock(),
            query_type=query_type,
            criteria_snapshot=criteria,
            result_count=result_count,
            query_description=description,
            execution_ms=execution_ms,
        )
        self.append(entry)
        log.info("Recorded execution: title=%s type=%s", title, query_type.value)
        return entry

    def read_all(self) -> LogReadResult:
        """Return live entries, persisting the sweep when anything was removed."""
        now = self.clock()
        cutoff = timedelta(days=self.retention_days)
        raw_items = self.local_store.read(LOG_NAMESPACE)

        kept_raw = []
        entries: list[QueryLogEntry] = []
        pruned = 0
        for raw in raw_items:
            try:
                entry = QueryLogEntry.from_payload(raw)
            except (TypeError, ValueError, AttributeError) as error:
                log.warning("Dropping malformed execution log entry: %s", error)
                continue
            if now - entry.executed_at >= cutoff:
                pruned += 1
                continue
            kept_raw.append(raw)
            entries.append(entry)

        if len(kept_raw) != len(raw_items):
            self.local_store.write(LOG_NAMESPACE, kept_raw)
        if pruned:
            log.info("Pruned %d expired execution log entries", pruned)
        return LogReadResult(entries=tuple(entries), pruned=pruned)

    def search(self, text: Optional[str] = None, query_type: QueryLogType | str | None = None) -> LogReadResult:
        """Sweep, then filter by title/description substring and log type."""
        result = self.read_all()
        needle = (text or "").strip().casefold()
        wanted = QueryLogType(query_type) if query_type else None
        entries = tuple(
            entry
            for entry in result.entries
            if (wanted is None or entry.query_type is wanted)
            and (
                not needle
                or needle in entry.query_title.casefold()
                or needle in (entry.query_description or "").casefold()
            )
        )
        return LogReadResult(entries=entries, pruned=result.pruned)

    def days_remaining(self, entry: QueryLogEntry) -> int:
        """Whole days left before ``entry`` is swept; never negative."""
        elapsed = (self.clock() - entry.executed_at).total_seconds()
        days_elapsed = max(0, math.floor(elapsed / _SECONDS_PER_DAY))
        return max(0, self.retention_days - days_elapsed)

    def expiry_band(self, entry: QueryLogEntry) -> str:
        """Return ``"expiring"`` inside the warning window, else ``"ok"``."""
        if self.days_remaining(entry) <= self.warn_days:
            return EXPIRY_EXPIRING
        return EXPIRY_OK
