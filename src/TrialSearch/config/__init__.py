from __future__ import annotations

"""Public configuration API for TrialSearch."""

from TrialSearch.config.app import (
    AppConfig,
    load_config,
    load_config_with_defaults,
    merge_config_dicts,
    parse_config_dict,
    parse_yaml,
)
from TrialSearch.config.history import HistoryConfig
from TrialSearch.config.remote import RemoteConfig
from TrialSearch.config.runtime import RuntimeConfig
from TrialSearch.config.search import SearchConfig
from TrialSearch.config.storage import StorageConfig

__all__ = [
    "RuntimeConfig",
    "StorageConfig",
    "RemoteConfig",
    "HistoryConfig",
    "SearchConfig",
    "AppConfig",
    "load_config",
    "load_config_with_defaults",
    "merge_config_dicts",
    "parse_config_dict",
    "parse_yaml",
]
