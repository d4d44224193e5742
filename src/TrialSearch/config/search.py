"""Search surface defaults."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Mapping

from TrialSearch.config.common import expect_str, get_optional_value, get_section

_QUERY_TYPE_RE = re.compile(r"^[A-Za-z0-9_-]+$")


@dataclass(frozen=True, slots=True)
class SearchConfig:
    default_query_type: str


def load_search(raw: Mapping[str, Any]) -> SearchConfig:
    section = get_section(raw, "search", required=False)
    return SearchConfig(
        default_query_type=expect_str(
            get_optional_value(section, "default_query_type", "dashboard"),
            "search.default_query_type",
        ).strip(),
    )


def check_search(config: SearchConfig) -> None:
    """Query types become URL path segments and store namespaces."""
    if not _QUERY_TYPE_RE.match(config.default_query_type):
        raise ValueError("search.default_query_type must contain only letters, digits, '_' or '-'")
