from __future__ import annotations

"""Application config orchestration and YAML loading entrypoints."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

from TrialSearch.config.history import HistoryConfig, check_history, load_history
from TrialSearch.config.remote import RemoteConfig, check_remote, load_remote
from TrialSearch.config.runtime import RuntimeConfig, check_runtime, load_runtime
from TrialSearch.config.search import SearchConfig, check_search, load_search
from TrialSearch.config.storage import StorageConfig, check_storage, load_storage

DEFAULT_CONFIG_PATH = Path("config/default.yml")


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application root configuration."""

    runtime: RuntimeConfig
    storage: StorageConfig
    remote: RemoteConfig
    history: HistoryConfig
    search: SearchConfig


def parse_config_dict(raw: Mapping[str, Any]) -> AppConfig:
    """Parse a merged mapping into AppConfig, validating every domain."""
    runtime = load_runtime(raw)
    storage = load_storage(raw)
    remote = load_remote(raw)
    history = load_history(raw)
    search = load_search(raw)

    check_runtime(runtime)
    check_storage(storage)
    check_remote(remote)
    check_history(history)
    check_search(search)

    return AppConfig(
        runtime=runtime,
        storage=storage,
        remote=remote,
        history=history,
        search=search,
    )


def load_config(path: Path) -> AppConfig:
    """Load a YAML config file without default merge."""
    return load_config_with_defaults(path, default_path=path)


def load_config_with_defaults(config_path: Path, default_path: Path = DEFAULT_CONFIG_PATH) -> AppConfig:
    """Load config by merging an override file over the defaults."""
    base = parse_yaml(default_path.read_text(encoding="utf-8"))
    if config_path == default_path:
        return parse_config_dict(base)
    override = parse_yaml(config_path.read_text(encoding="utf-8"))
    return parse_config_dict(merge_config_dicts(base, override))


def parse_yaml(text: str) -> dict[str, Any]:
    data = yaml.safe_load(text) or {}
    if not isinstance(data, Mapping):
        raise ValueError("Config root must be a mapping/object")
    return dict(data)


def merge_config_dicts(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Deep-merge two config mappings; override wins on scalar conflicts."""
    merged: dict[str, Any] = dict(base)
    for key, value in override.items():
        if key in merged and isinstance(merged[key], Mapping) and isinstance(value, Mapping):
            merged[key] = merge_config_dicts(merged[key], value)
        else:
            merged[key] = value
    return merged
