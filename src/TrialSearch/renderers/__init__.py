"""Output renderers for command results (console text and JSON)."""

from __future__ import annotations

from TrialSearch.renderers.console import (
    render_criteria,
    render_fields,
    render_log,
    render_operators,
    render_queries,
    render_records,
)
from TrialSearch.renderers.json import dumps, render_log_json, render_queries_json

__all__ = [
    "dumps",
    "render_criteria",
    "render_fields",
    "render_log",
    "render_log_json",
    "render_operators",
    "render_queries",
    "render_queries_json",
    "render_records",
]
