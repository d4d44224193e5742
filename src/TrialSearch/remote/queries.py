"""Remote saved-query store."""

from __future__ import annotations

from typing import Any, Mapping, Protocol
from urllib.parse import quote

from TrialSearch.core.errors import RemoteUnavailable
from TrialSearch.core.models import SavedQuery
from TrialSearch.core.result import Result
from TrialSearch.remote.http import ApiClient
from TrialSearch.utils.log import log

SAVED_QUERIES_PATH = "/api/v1/queries/saved"


class RemoteQueryStore(Protocol):
    """Capability interface of the saved-query backend.

    Implementations report every failure as ``Result.failure``.
    """

    def list(self, query_type: str, search_text: str | None = None) -> Result[list[SavedQuery]]:
        raise NotImplementedError

    def get(self, query_id: str) -> Result[SavedQuery | None]:
        raise NotImplementedError

    def create(self, payload: Mapping[str, Any]) -> Result[SavedQuery]:
        raise NotImplementedError

    def update(self, query_id: str, payload: Mapping[str, Any]) -> Result[SavedQuery]:
        raise NotImplementedError

    def delete(self, query_id: str) -> Result[None]:
        raise NotImplementedError


class HttpRemoteQueryStore:
    """REST-backed saved-query store."""

    def __init__(self, client: ApiClient) -> None:
        self.client = client

    def close(self) -> None:
        self.client.close()

    def list(self, query_type: str, search_text: str | None = None) -> Result[list[SavedQuery]]:
        params = {"search": search_text.strip()} if search_text and search_text.strip() else None
        result = self.client.request(
            "GET",
            f"{SAVED_QUERIES_PATH}/user/{quote(query_type, safe='')}-queries",
            params=params,
        )
        if not result.ok:
            return Result.failure(result.error)
        data = result.value if result.value is not None else []
        if not isinstance(data, list):
            return Result.failure(RemoteUnavailable("Saved query list is not an array"))

        queries: list[SavedQuery] = []
        for item in data:
            try:
                queries.append(SavedQuery.from_payload(item, default_query_type=query_type))
            except (TypeError, ValueError, AttributeError) as error:
                log.warning("Skipping malformed remote saved query: %s", error)
        return Result.success(queries)

    def get(self, query_id: str) -> Result[SavedQuery | None]:
        result = self.client.request(
            "GET",
            f"{SAVED_QUERIES_PATH}/{quote(query_id, safe='')}",
            allow_not_found=True,
        )
        if not result.ok:
            return Result.failure(result.error)
        if result.value is None:
            return Result.success(None)
        return self._parse_one(result.value)

    def create(self, payload: Mapping[str, Any]) -> Result[SavedQuery]:
        result = self.client.request("POST", SAVED_QUERIES_PATH, json_body=dict(payload))
        if not result.ok:
            return Result.failure(result.error)
        return self._parse_one(result.value, fallback=payload)

    def update(self, query_id: str, payload: Mapping[str, Any]) -> Result[SavedQuery]:
        result = self.client.request(
            "PUT",
            f"{SAVED_QUERIES_PATH}/{quote(query_id, safe='')}",
            json_body=dict(payload),
        )
        if not result.ok:
            return Result.failure(result.error)
        return self._parse_one(result.value, fallback={**payload, "id": query_id})

    def delete(self, query_id: str) -> Result[None]:
        result = self.client.request(
            "DELETE",
            f"{SAVED_QUERIES_PATH}/{quote(query_id, safe='')}",
            allow_not_found=True,
        )
        if not result.ok:
            return Result.failure(result.error)
        return Result.success(None)

    @staticmethod
    def _parse_one(data: Any, *, fallback: Mapping[str, Any] | None = None) -> Result[SavedQuery]:
        """Parse a single saved query, using the request payload for empty bodies."""
        raw = data if isinstance(data, Mapping) else fallback
        if raw is None:
            return Result.failure(RemoteUnavailable("Saved query response has no body"))
        try:
            return Result.success(SavedQuery.from_payload(raw))
        except (TypeError, ValueError, AttributeError) as error:
            return Result.failure(RemoteUnavailable(f"Malformed saved query: {error}"))
