from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping, Optional

from dateutil import parser as dt_parser

from TrialSearch.core.criteria import CriteriaModel


class QueryLogType(str, Enum):
    """Origin of an execution log entry."""

    ADVANCED_SEARCH = "advanced_search"
    FILTER = "filter"
    SAVED_QUERY = "saved_query"


@dataclass(frozen=True, slots=True)
class SavedQuery:
    """A named criteria snapshot owned by the persistence layer.

    Attributes:
        id: Stable identifier used for later edit/replace/delete.
        title: Non-empty display title.
        description: Optional free text.
        query_type: Namespace tag (e.g. "dashboard").
        criteria_snapshot: Criteria as passed to save.
        created_at: Creation time; never changes after create.
        updated_at: Time of the last edit-save.
    """

    id: str
    title: str
    description: Optional[str]
    query_type: str
    criteria_snapshot: CriteriaModel
    created_at: datetime
    updated_at: datetime

    def to_payload(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "query_type": self.query_type,
            "criteria_snapshot": self.criteria_snapshot.to_list(),
            "created_at": format_timestamp(self.created_at),
            "updated_at": format_timestamp(self.updated_at),
        }

    @classmethod
    def from_payload(cls, raw: Mapping[str, Any], *, default_query_type: str = "") -> SavedQuery:
        """Build a saved query from a stored or remote mapping.

        Also reads the older ``query_data.searchCriteria`` layout.

        Raises:
            ValueError: If ``id`` is missing.
        """
        query_id = raw.get("id")
        if query_id is None or str(query_id).strip() == "":
            raise ValueError("Saved query payload has no id")

        rows = raw.get("criteria_snapshot")
        if rows is None:
            query_data = raw.get("query_data")
            if isinstance(query_data, Mapping):
                rows = query_data.get("searchCriteria")
        created_at = parse_timestamp(raw.get("created_at")) or _EPOCH
        return cls(
            id=str(query_id),
            title=str(raw.get("title") or ""),
            description=raw.get("description") or None,
            query_type=str(raw.get("query_type") or default_query_type),
            criteria_snapshot=CriteriaModel.from_list(rows if isinstance(rows, list) else None),
            created_at=created_at,
            updated_at=parse_timestamp(raw.get("updated_at")) or created_at,
        )


@dataclass(frozen=True, slots=True)
class QueryLogEntry:
    """One recorded execution of a search."""

    id: str
    query_id: Optional[str]
    query_title: str
    executed_at: datetime
    query_type: QueryLogType
    criteria_snapshot: Optional[CriteriaModel] = None
    result_count: Optional[int] = None
    query_description: Optional[str] = None
    execution_ms: Optional[int] = None

    def to_payload(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "query_id": self.query_id,
            "query_title": self.query_title,
            "query_description": self.query_description,
            "executed_at": format_timestamp(self.executed_at),
            "query_type": self.query_type.value,
            "criteria_snapshot": self.criteria_snapshot.to_list() if self.criteria_snapshot is not None else None,
            "result_count": self.result_count,
            "execution_ms": self.execution_ms,
        }

    @classmethod
    def from_payload(cls, raw: Mapping[str, Any]) -> QueryLogEntry:
        """Build a log entry from a stored mapping.

        Raises:
            ValueError: If a required member is missing or malformed.
        """
        executed_at = parse_timestamp(raw.get("executed_at"))
        if executed_at is None:
            raise ValueError("Query log entry has no executed_at")
        rows = raw.get("criteria_snapshot")
        if isinstance(rows, list) and not all(isinstance(row, Mapping) for row in rows):
            raise ValueError("Query log entry has a malformed criteria_snapshot")
        return cls(
            id=str(raw.get("id") or ""),
            query_id=None if raw.get("query_id") is None else str(raw["query_id"]),
            query_title=str(raw.get("query_title") or ""),
            executed_at=executed_at,
            query_type=QueryLogType(raw.get("query_type") or QueryLogType.ADVANCED_SEARCH.value),
            criteria_snapshot=CriteriaModel.from_list(rows) if isinstance(rows, list) else None,
            result_count=_optional_int(raw.get("result_count")),
            query_description=raw.get("query_description") or None,
            execution_ms=_optional_int(raw.get("execution_ms")),
        )


_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Format a datetime as ISO-8601 in UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 string into an aware UTC datetime.

    Naive values are taken as UTC. Returns None for empty or unparsable input.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        try:
            parsed = dt_parser.isoparse(value.strip())
        except (ValueError, OverflowError):
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _optional_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
