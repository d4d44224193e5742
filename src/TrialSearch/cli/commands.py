"""Command implementations for the TrialSearch CLI.

Each command holds the services it needs and returns the text to print,
separated from click parameter handling.
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from TrialSearch.core.criteria import CriteriaModel
from TrialSearch.core.errors import ValidationError
from TrialSearch.core.evaluate import filter_records
from TrialSearch.core.models import QueryLogType
from TrialSearch.renderers import (
    dumps,
    render_log,
    render_log_json,
    render_queries,
    render_queries_json,
    render_records,
)
from TrialSearch.services.execution_log import ExecutionLog
from TrialSearch.services.persistence import QueryPersistenceService
from TrialSearch.services.values import DynamicValueSource
from TrialSearch.utils.log import log


def parse_criteria(text: str) -> CriteriaModel:
    """Parse criteria from JSON: a list of rows or ``{"criteria": [...]}``.

    Raises:
        ValidationError: If the text is not valid criteria JSON.
    """
    data = _load_json(text, "criteria")
    if isinstance(data, Mapping):
        data = data.get("criteria", data.get("searchCriteria"))
    if not isinstance(data, list) or not all(isinstance(row, Mapping) for row in data):
        raise ValidationError("Criteria JSON must be a list of row objects")
    return CriteriaModel.from_list(data)


def parse_records(text: str) -> list[Mapping[str, Any]]:
    """Parse records from JSON: a list of objects or ``{"records": [...]}``.

    Raises:
        ValidationError: If the text is not a list of objects.
    """
    data = _load_json(text, "records")
    if isinstance(data, Mapping):
        data = data.get("records")
    if not isinstance(data, list):
        raise ValidationError("Records JSON must be a list of objects")
    return [record for record in data if isinstance(record, Mapping)]


def _load_json(text: str, what: str) -> Any:
    try:
        return json.loads(text)
    except ValueError as error:
        raise ValidationError(f"Invalid {what} JSON: {error}") from error


@dataclass(slots=True)
class SaveCommand:
    persistence: QueryPersistenceService
    criteria: CriteriaModel
    title: str
    description: Optional[str]
    query_type: str
    editing_id: Optional[str] = None

    def execute(self) -> str:
        query = self.persistence.save(
            self.criteria,
            self.title,
            description=self.description,
            query_type=self.query_type,
            editing_id=self.editing_id,
        )
        verb = "Updated" if self.editing_id else "Saved"
        return f"{verb} query {query.id}: {query.title}\n"


@dataclass(slots=True)
class ListCommand:
    persistence: QueryPersistenceService
    query_type: str
    search_text: Optional[str] = None
    as_json: bool = False

    def execute(self) -> str:
        queries = self.persistence.list(self.query_type, self.search_text)
        log.debug("Listed %d saved queries for %s", len(queries), self.query_type)
        if self.as_json:
            return dumps(render_queries_json(queries))
        return render_queries(queries)


@dataclass(slots=True)
class DeleteCommand:
    persistence: QueryPersistenceService
    query_id: str
    query_type: str

    def execute(self) -> str:
        self.persistence.delete(self.query_id, self.query_type)
        return f"Deleted query {self.query_id}\n"


@dataclass(slots=True)
class RunCommand:
    """Filter records with criteria and record the execution."""

    execution_log: ExecutionLog
    criteria: CriteriaModel
    records: list[Mapping[str, Any]]
    title: Optional[str] = None
    query_id: Optional[str] = None
    description: Optional[str] = None

    def execute(self) -> str:
        normalized = self.criteria.validate()

        started = time.perf_counter()
        matches = filter_records(normalized, self.records)
        elapsed_ms = int((time.perf_counter() - started) * 1000)
        log.info("Matched %d of %d records in %d ms", len(matches), len(self.records), elapsed_ms)

        self.execution_log.record(
            self.title or "Advanced search",
            QueryLogType.SAVED_QUERY if self.query_id else QueryLogType.ADVANCED_SEARCH,
            criteria=normalized,
            query_id=self.query_id,
            description=self.description,
            result_count=len(matches),
            execution_ms=elapsed_ms,
        )
        return render_records(matches)


@dataclass(slots=True)
class LogsCommand:
    execution_log: ExecutionLog
    search_text: Optional[str] = None
    query_type: Optional[str] = None
    as_json: bool = False

    def execute(self) -> str:
        result = self.execution_log.search(self.search_text, self.query_type)
        if self.as_json:
            return dumps(render_log_json(result.entries, days_remaining=self.execution_log.days_remaining))
        text = render_log(
            result.entries,
            days_remaining=self.execution_log.days_remaining,
            expiry_band=self.execution_log.expiry_band,
        )
        if result.pruned:
            text = f"Removed {result.pruned} expired entr{'y' if result.pruned == 1 else 'ies'}.\n" + text
        return text


@dataclass(slots=True)
class OptionsCommand:
    values: DynamicValueSource
    field_id: str

    def execute(self) -> str:
        options = self.values.options_for_field(self.field_id)
        if not options:
            return f"No options for {self.field_id}.\n"
        return "\n".join(
            option.value if option.label == option.value else f"{option.value}\t{option.label}"
            for option in options
        ) + "\n"
