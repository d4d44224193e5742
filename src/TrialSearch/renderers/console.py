"""Console text renderers.

Render saved queries, execution log entries and matching records into
human-friendly text blocks.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Iterable, Mapping, Sequence

from TrialSearch.core.criteria import CriteriaModel
from TrialSearch.core.fields import FieldDescriptor, get_field
from TrialSearch.core.models import QueryLogEntry, SavedQuery
from TrialSearch.core.operators import Operator, operator_label

_RECORD_HEADLINE_KEYS = ("trial_id", "title", "status", "trial_phase", "country")


def _fmt_dt(dt: datetime | None) -> str:
    """Format a datetime as ``YYYY-mm-dd HH:MM`` UTC, or "-" when missing."""
    if not dt:
        return "-"
    return dt.strftime("%Y-%m-%d %H:%M")


def render_criteria(criteria: CriteriaModel) -> str:
    """Render criteria as a single readable expression, e.g. ``Status is Active AND ...``."""
    parts: list[str] = []
    rows = criteria.normalize().rows
    for index, row in enumerate(rows):
        descriptor = get_field(row.field)
        label = descriptor.label if descriptor else row.field
        value = ", ".join(row.value) if isinstance(row.value, tuple) else row.value
        parts.append(f"{label} {operator_label(row.operator)} {value}")
        if index < len(rows) - 1:
            parts.append(row.connective.value)
    return " ".join(parts) if parts else "(no criteria)"


def render_fields(fields: Iterable[FieldDescriptor]) -> str:
    lines: list[str] = []
    for descriptor in fields:
        flags = []
        if descriptor.multi_select:
            flags.append("multi")
        if descriptor.contains_only:
            flags.append("contains-only")
        suffix = f" [{', '.join(flags)}]" if flags else ""
        lines.append(f"{descriptor.id:<28} {descriptor.semantic_type.value:<11} {descriptor.label}{suffix}")
    return "\n".join(lines) + "\n"


def render_operators(operators: Sequence[Operator]) -> str:
    return "\n".join(f"{op.value:<13} {operator_label(op)}" for op in operators) + "\n"


def render_queries(queries: Iterable[SavedQuery]) -> str:
    """Render saved queries as a numbered list.

    Args:
        queries: Saved queries in display order.

    Returns:
        A formatted string ready to be printed.
    """
    lines: list[str] = []
    for idx, query in enumerate(queries, start=1):
        lines.append(f"{idx}. {query.title}  (id: {query.id})")
        if query.description:
            lines.append(f"   {query.description}")
        lines.append(f"   Criteria: {render_criteria(query.criteria_snapshot)}")
        lines.append(f"   Created: {_fmt_dt(query.created_at)}  Updated: {_fmt_dt(query.updated_at)}")
        lines.append("")
    if not lines:
        return "No saved queries.\n"
    return "\n".join(lines).rstrip() + "\n"


def render_log(
    entries: Iterable[QueryLogEntry],
    *,
    days_remaining: Callable[[QueryLogEntry], int],
    expiry_band: Callable[[QueryLogEntry], str],
) -> str:
    """Render execution log entries with their remaining retention."""
    lines: list[str] = []
    for idx, entry in enumerate(entries, start=1):
        remaining = days_remaining(entry)
        marker = " !" if expiry_band(entry) == "expiring" else ""
        lines.append(f"{idx}. {entry.query_title or '(untitled)'}  [{entry.query_type.value}]")
        lines.append(f"   Executed: {_fmt_dt(entry.executed_at)}  Expires in: {remaining} day(s){marker}")
        if entry.result_count is not None:
            lines.append(f"   Results: {entry.result_count}")
        if entry.criteria_snapshot is not None:
            lines.append(f"   Criteria: {render_criteria(entry.criteria_snapshot)}")
        lines.append("")
    if not lines:
        return "No executed queries.\n"
    return "\n".join(lines).rstrip() + "\n"


def render_records(records: Sequence[Mapping[str, Any]]) -> str:
    lines = [f"{len(records)} matching record(s)"]
    for record in records:
        headline = "  ".join(
            f"{key}={record[key]}" for key in _RECORD_HEADLINE_KEYS if record.get(key) not in (None, "")
        )
        lines.append(f"- {headline or '(record)'}")
    return "\n".join(lines) + "\n"
