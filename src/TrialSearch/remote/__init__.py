"""HTTP clients for the portal backend."""

from __future__ import annotations

from typing import TYPE_CHECKING

from TrialSearch.core.result import Result
from TrialSearch.remote.http import ApiClient
from TrialSearch.remote.queries import HttpRemoteQueryStore, RemoteQueryStore
from TrialSearch.remote.taxonomy import HttpTaxonomyClient, TaxonomySource

if TYPE_CHECKING:
    from TrialSearch.config import AppConfig


class OfflineRemoteStore:
    """Remote store used when the backend is disabled; every call fails."""

    def list(self, query_type, search_text=None):
        return Result.failure("remote store disabled")

    def get(self, query_id):
        return Result.failure("remote store disabled")

    def create(self, payload):
        return Result.failure("remote store disabled")

    def update(self, query_id, payload):
        return Result.failure("remote store disabled")

    def delete(self, query_id):
        return Result.failure("remote store disabled")

    def get_options(self, category):
        return Result.failure("remote store disabled")

    def close(self) -> None:
        return


def create_api_client(config: AppConfig) -> ApiClient | None:
    """Create the shared API client, or None when the remote is disabled."""
    if not config.remote.enabled:
        return None
    return ApiClient(
        config.remote.base_url,
        token=config.remote.token,
        timeout=config.remote.timeout,
        max_attempts=config.remote.max_attempts,
    )


__all__ = [
    "ApiClient",
    "HttpRemoteQueryStore",
    "HttpTaxonomyClient",
    "OfflineRemoteStore",
    "RemoteQueryStore",
    "TaxonomySource",
    "create_api_client",
]
