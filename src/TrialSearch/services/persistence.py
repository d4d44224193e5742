"""Saved-query persistence across the remote backend and the local store."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Callable, Optional

from TrialSearch.core.criteria import CriteriaModel
from TrialSearch.core.errors import ValidationError
from TrialSearch.core.models import SavedQuery, utc_now
from TrialSearch.remote.queries import RemoteQueryStore
from TrialSearch.services.fallback import RemoteThenLocal
from TrialSearch.storage.local import LocalStore
from TrialSearch.utils.log import log

SAVED_QUERIES_NAMESPACE = "savedQueries"


def saved_queries_namespace(query_type: str) -> str:
    """Return the local namespace holding saved queries of ``query_type``."""
    return f"{SAVED_QUERIES_NAMESPACE}:{query_type}"


def _new_query_id() -> str:
    return uuid.uuid4().hex


@dataclass(slots=True)
class QueryPersistenceService:
    """Save, list, load and delete saved queries.

    Writes go to the local store first and are then attempted remotely;
    reads prefer the remote and fall back to local when it fails or has
    nothing.
    """

    local_store: LocalStore
    remote_store: RemoteQueryStore
    strategy: RemoteThenLocal = field(default_factory=lambda: RemoteThenLocal(name="saved-query backend"))
    clock: Callable[[], datetime] = utc_now
    id_factory: Callable[[], str] = _new_query_id

    def save(
        self,
        criteria: CriteriaModel,
        title: str,
        description: Optional[str] = None,
        query_type: str = "dashboard",
        editing_id: Optional[str] = None,
    ) -> SavedQuery:
        """Persist a query, creating it or replacing the one at ``editing_id``.

        Args:
            criteria: Criteria as edited; stored unchanged.
            title: Display title; must not be blank.
            description: Optional free text; blank becomes None.
            query_type: Namespace tag.
            editing_id: Id of an existing query to replace.

        Returns:
            The locally stored query.

        Raises:
            ValidationError: If the title is blank or the criteria do not validate.
            InvalidOperator: If a row's operator is not offered for its field.
        """
        title = (title or "").strip()
        if not title:
            raise ValidationError("Query title must not be empty")
        criteria.validate()
        description = (description or "").strip() or None
        query_type = (query_type or "").strip() or "dashboard"

        now = self.clock()
        if editing_id:
            return self.strategy.write(
                lambda: self._update_local(editing_id, criteria, title, description, query_type, now),
                lambda: self.remote_store.update(
                    editing_id,
                    _remote_payload(criteria, title, description, query_type),
                ),
            ).value

        query = SavedQuery(
            id=self.id_factory(),
            title=title,
            description=description,
            query_type=query_type,
            criteria_snapshot=criteria,
            created_at=now,
            updated_at=now,
        )
        return self.strategy.write(
            lambda: self._insert_local(query),
            lambda: self.remote_store.create(
                {"id": query.id, **_remote_payload(criteria, title, description, query_type)}
            ),
        ).value

    def list(self, query_type: str, search_text: Optional[str] = None) -> list[SavedQuery]:
        """Return saved queries of ``query_type``, remote first."""
        return self.strategy.read(
            lambda: self.remote_store.list(query_type, search_text),
            lambda: _filter_queries(self._local_queries(query_type), search_text),
        )

    def get(self, query_id: str, query_type: str) -> SavedQuery | None:
        """Return one saved query, or None when neither store has it."""
        return self.strategy.read_one(
            lambda: self.remote_store.get(query_id),
            lambda: next((q for q in self._local_queries(query_type) if q.id == query_id), None),
        )

    def delete(self, query_id: str, query_type: str) -> None:
        """Remove a saved query from both stores."""
        outcome = self.strategy.write(
            lambda: self._delete_local(query_id, query_type),
            lambda: self.remote_store.delete(query_id),
        )
        if not outcome.value:
            log.debug("Saved query %s was not in the local store", query_id)

    def _local_queries(self, query_type: str) -> list[SavedQuery]:
        queries: list[SavedQuery] = []
        for raw in self.local_store.read(saved_queries_namespace(query_type)):
            try:
                queries.append(SavedQuery.from_payload(raw, default_query_type=query_type))
            except (TypeError, ValueError, AttributeError) as error:
                log.warning("Skipping malformed local saved query: %s", error)
        return queries

    def _insert_local(self, query: SavedQuery) -> SavedQuery:
        namespace = saved_queries_namespace(query.query_type)
        items = self.local_store.read(namespace)
        items.append(query.to_payload())
        self.local_store.write(namespace, items)
        log.info("Saved query locally: id=%s title=%s", query.id, query.title)
        return query

    def _update_local(
        self,
        query_id: str,
        criteria: CriteriaModel,
        title: str,
        description: Optional[str],
        query_type: str,
        now: datetime,
    ) -> SavedQuery:
        namespace = saved_queries_namespace(query_type)
        items = self.local_store.read(namespace)
        for index, raw in enumerate(items):
            if str(raw.get("id")) != query_id:
                continue
            existing = SavedQuery.from_payload(raw, default_query_type=query_type)
            updated = replace(
                existing,
                title=title,
                description=description,
                criteria_snapshot=criteria,
                updated_at=now,
            )
            items[index] = updated.to_payload()
            self.local_store.write(namespace, items)
            log.info("Updated saved query locally: id=%s", query_id)
            return updated

        log.info("Saved query %s not found locally; creating it", query_id)
        return self._insert_local(
            SavedQuery(
                id=query_id,
                title=title,
                description=description,
                query_type=query_type,
                criteria_snapshot=criteria,
                created_at=now,
                updated_at=now,
            )
        )

    def _delete_local(self, query_id: str, query_type: str) -> bool:
        namespace = saved_queries_namespace(query_type)
        items = self.local_store.read(namespace)
        kept = [raw for raw in items if str(raw.get("id")) != query_id]
        if len(kept) == len(items):
            return False
        self.local_store.write(namespace, kept)
        log.info("Deleted saved query locally: id=%s", query_id)
        return True


def _remote_payload(
    criteria: CriteriaModel,
    title: str,
    description: Optional[str],
    query_type: str,
) -> dict[str, Any]:
    return {
        "title": title,
        "description": description,
        "query_type": query_type,
        "criteria_snapshot": criteria.to_list(),
    }


def _filter_queries(queries: list[SavedQuery], search_text: Optional[str]) -> list[SavedQuery]:
    needle = (search_text or "").strip().casefold()
    if not needle:
        return queries
    return [
        query
        for query in queries
        if needle in query.title.casefold() or needle in (query.description or "").casefold()
    ]
