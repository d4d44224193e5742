"""Shared HTTP plumbing for the portal REST API.

Every call returns a `Result`; transport errors, non-2xx statuses and
malformed bodies all become `Result.failure` so callers never see a
`requests` exception.
"""

from __future__ import annotations

import random
import time
from typing import Any, Callable, Mapping

import requests

from TrialSearch.core.errors import RemoteUnavailable
from TrialSearch.core.result import Result
from TrialSearch.utils.log import log

DEFAULT_TIMEOUT = 15.0
DEFAULT_MAX_ATTEMPTS = 3
BASE_PAUSE = 0.5
MAX_SLEEP = 4.0
RETRYABLE_STATUS = {429, 500, 502, 503, 504}

HEADERS = {
    "User-Agent": "trial-search/0.1",
    "Accept": "application/json",
}


class ApiClient:
    """Low-level JSON client for the portal backend."""

    def __init__(
        self,
        base_url: str,
        *,
        token: str = "",
        timeout: float = DEFAULT_TIMEOUT,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        session: requests.Session | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the client with a reusable HTTP session.

        Args:
            base_url: API root, e.g. ``http://localhost:8000``.
            token: Optional bearer token.
            timeout: Per-request timeout in seconds.
            max_attempts: Attempts per call, including the first.
            session: Session to use instead of a new one.
            sleep: Backoff sleep function.
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_attempts = max(1, max_attempts)
        self._session = session or requests.Session()
        self._sleep = sleep
        self._headers = dict(HEADERS)
        if token:
            self._headers["Authorization"] = f"Bearer {token}"

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self._session.close()

    def __enter__(self) -> ApiClient:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, str] | None = None,
        json_body: Any = None,
        allow_not_found: bool = False,
    ) -> Result[Any]:
        """Issue a request and unwrap the ``{success, data, error}`` envelope.

        Args:
            method: HTTP method.
            path: Path below ``base_url``.
            params: Query string parameters.
            json_body: JSON request body.
            allow_not_found: Treat 404 as success with no data.

        Returns:
            ``Result.success(data)`` or ``Result.failure(RemoteUnavailable)``.
        """
        url = f"{self.base_url}{path}"
        try:
            response = self._send_with_retry(method, url, params=params, json_body=json_body)
        except (requests.RequestException, RemoteUnavailable) as error:
            log.warning("Remote %s %s failed: %s", method, path, error)
            status = getattr(getattr(error, "response", None), "status_code", None)
            if isinstance(error, RemoteUnavailable):
                return Result.failure(error)
            return Result.failure(RemoteUnavailable(str(error), status_code=status))

        if allow_not_found and response.status_code == 404:
            return Result.success(None)
        if not 200 <= response.status_code < 300:
            log.warning("Remote %s %s returned HTTP %d", method, path, response.status_code)
            return Result.failure(
                RemoteUnavailable(f"HTTP {response.status_code}", status_code=response.status_code)
            )
        if response.status_code == 204 or not response.content:
            return Result.success(None)

        try:
            payload = response.json()
        except ValueError as error:
            log.warning("Remote %s %s returned malformed JSON: %s", method, path, error)
            return Result.failure(RemoteUnavailable("Malformed JSON response"))
        return unwrap_envelope(payload)

    def _send_with_retry(
        self,
        method: str,
        url: str,
        *,
        params: Mapping[str, str] | None,
        json_body: Any,
    ) -> requests.Response:
        """Send with retries for transient failures."""
        last_error: Exception | None = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                response = self._session.request(
                    method,
                    url,
                    params=params,
                    json=json_body,
                    headers=self._headers,
                    timeout=self.timeout,
                )
                if response.status_code not in RETRYABLE_STATUS:
                    return response
                last_error = RemoteUnavailable(f"HTTP {response.status_code}", status_code=response.status_code)
            except (requests.Timeout, requests.ConnectionError) as error:
                last_error = error
            if attempt < self.max_attempts:
                delay = min(BASE_PAUSE * (2 ** (attempt - 1)) + random.uniform(0, 0.2), MAX_SLEEP)
                log.debug("Remote retry attempt=%d/%d delay=%.2fs error=%s", attempt, self.max_attempts, delay, last_error)
                self._sleep(delay)

        assert last_error is not None
        raise last_error


def unwrap_envelope(payload: Any) -> Result[Any]:
    """Return the ``data`` member of an API envelope.

    Bodies without an envelope are returned as-is.
    """
    if not isinstance(payload, Mapping):
        return Result.success(payload)
    if payload.get("success") is False:
        message = payload.get("error") or payload.get("message") or "Remote reported failure"
        return Result.failure(RemoteUnavailable(str(message)))
    if "data" in payload:
        return Result.success(payload.get("data"))
    return Result.success(payload)
