"""Execution log retention configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from TrialSearch.config.common import expect_int, get_optional_value, get_section


@dataclass(frozen=True, slots=True)
class HistoryConfig:
    """Retention settings for the execution log."""

    retention_days: int
    warn_days: int
    max_entries: int


def load_history(raw: Mapping[str, Any]) -> HistoryConfig:
    section = get_section(raw, "history", required=False)
    return HistoryConfig(
        retention_days=expect_int(get_optional_value(section, "retention_days", 30), "history.retention_days"),
        warn_days=expect_int(get_optional_value(section, "warn_days", 7), "history.warn_days"),
        max_entries=expect_int(get_optional_value(section, "max_entries", 50), "history.max_entries"),
    )


def check_history(config: HistoryConfig) -> None:
    if config.retention_days < 1:
        raise ValueError("history.retention_days must be >= 1")
    if config.warn_days < 0:
        raise ValueError("history.warn_days must be >= 0")
    if config.warn_days >= config.retention_days:
        raise ValueError("history.warn_days must be smaller than history.retention_days")
    if config.max_entries < 0:
        raise ValueError("history.max_entries must be >= 0 (0 disables the cap)")
