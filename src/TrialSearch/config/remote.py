"""Remote backend configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Mapping

from TrialSearch.config.common import (
    expect_bool,
    expect_float,
    expect_int,
    expect_str,
    get_optional_value,
    get_required_value,
    get_section,
)


@dataclass(frozen=True, slots=True)
class RemoteConfig:
    """Saved-query backend and taxonomy service settings.

    Attributes:
        enabled: When false, every remote call fails without I/O.
        base_url: Backend root URL.
        timeout: Per-request timeout in seconds.
        max_attempts: Attempts per request, including the first.
        token_env: Name of the environment variable holding the bearer token.
        token: Token value read from ``token_env``; empty when unset.
    """

    enabled: bool
    base_url: str
    timeout: float
    max_attempts: int
    token_env: str
    token: str


def load_remote(raw: Mapping[str, Any]) -> RemoteConfig:
    """Load the ``remote`` section and resolve the token from the environment.

    Raises:
        TypeError: If config types are invalid.
        ValueError: If required keys are missing.
    """
    section = get_section(raw, "remote", required=True)
    token_env = expect_str(
        get_optional_value(section, "token_env", "TRIAL_SEARCH_API_TOKEN"),
        "remote.token_env",
    )
    return RemoteConfig(
        enabled=expect_bool(get_required_value(section, "enabled", "remote.enabled"), "remote.enabled"),
        base_url=expect_str(get_required_value(section, "base_url", "remote.base_url"), "remote.base_url").rstrip("/"),
        timeout=expect_float(get_optional_value(section, "timeout", 15), "remote.timeout"),
        max_attempts=expect_int(get_optional_value(section, "max_attempts", 3), "remote.max_attempts"),
        token_env=token_env,
        token=_load_token_from_env(token_env),
    )


def check_remote(config: RemoteConfig) -> None:
    if config.timeout <= 0:
        raise ValueError("remote.timeout must be positive")
    if config.max_attempts < 1:
        raise ValueError("remote.max_attempts must be >= 1")
    if not config.enabled:
        return
    if not config.base_url.strip():
        raise ValueError("remote.base_url must not be empty when remote.enabled=true")
    if not config.base_url.startswith(("http://", "https://")):
        raise ValueError("remote.base_url must start with http:// or https://")


def _load_token_from_env(token_env: str) -> str:
    if not token_env.strip():
        return ""
    return os.getenv(token_env, "").strip()
