"""Application services for saved queries, execution history and dropdown values.

Factory functions wire services from an AppConfig and already-open stores.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from TrialSearch.services.execution_log import ExecutionLog, LogReadResult
from TrialSearch.services.fallback import RemoteThenLocal, WriteOutcome
from TrialSearch.services.persistence import QueryPersistenceService
from TrialSearch.services.values import DynamicValueSource

if TYPE_CHECKING:
    from TrialSearch.config import AppConfig
    from TrialSearch.remote.http import ApiClient
    from TrialSearch.storage.local import LocalStore


def create_persistence_service(
    config: AppConfig,
    local_store: LocalStore,
    client: ApiClient | None,
) -> QueryPersistenceService:
    """Create the saved-query service.

    Args:
        config: Application configuration.
        local_store: Open local store.
        client: Shared API client, or None when the remote is disabled.

    Returns:
        Configured QueryPersistenceService.
    """
    if client is None:
        from TrialSearch.remote import OfflineRemoteStore

        return QueryPersistenceService(local_store=local_store, remote_store=OfflineRemoteStore())

    from TrialSearch.remote.queries import HttpRemoteQueryStore

    return QueryPersistenceService(local_store=local_store, remote_store=HttpRemoteQueryStore(client))


def create_execution_log(config: AppConfig, local_store: LocalStore) -> ExecutionLog:
    """Create the execution log with configured retention."""
    return ExecutionLog(
        local_store,
        retention_days=config.history.retention_days,
        warn_days=config.history.warn_days,
        max_entries=config.history.max_entries,
    )


def create_value_source(client: ApiClient | None) -> DynamicValueSource:
    """Create the dropdown value source; static options only when offline."""
    if client is None:
        from TrialSearch.remote import OfflineRemoteStore

        return DynamicValueSource(OfflineRemoteStore())

    from TrialSearch.remote.taxonomy import HttpTaxonomyClient

    return DynamicValueSource(HttpTaxonomyClient(client))


__all__ = [
    "DynamicValueSource",
    "ExecutionLog",
    "LogReadResult",
    "QueryPersistenceService",
    "RemoteThenLocal",
    "WriteOutcome",
    "create_execution_log",
    "create_persistence_service",
    "create_value_source",
]
