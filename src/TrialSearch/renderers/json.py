"""JSON renderers.

Render saved queries and execution log entries into JSON-serializable
objects using their wire payloads.
"""

from __future__ import annotations

import json
from typing import Any, Callable, Iterable

from TrialSearch.core.models import QueryLogEntry, SavedQuery


def render_queries_json(queries: Iterable[SavedQuery]) -> list[dict[str, Any]]:
    return [query.to_payload() for query in queries]


def render_log_json(
    entries: Iterable[QueryLogEntry],
    *,
    days_remaining: Callable[[QueryLogEntry], int],
) -> list[dict[str, Any]]:
    """Render log entries, adding the computed ``days_remaining`` to each."""
    out: list[dict[str, Any]] = []
    for entry in entries:
        payload = entry.to_payload()
        payload["days_remaining"] = days_remaining(entry)
        out.append(payload)
    return out


def dumps(data: Any) -> str:
    return json.dumps(data, ensure_ascii=False, indent=2) + "\n"
