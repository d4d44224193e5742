"""Shared fakes for HTTP and store tests."""

from __future__ import annotations

import json
from typing import Any


class FakeResponse:
    def __init__(self, status_code: int = 200, body: Any = None, *, raw: bytes | None = None) -> None:
        self.status_code = status_code
        if raw is not None:
            self.content = raw
        elif body is None:
            self.content = b""
        else:
            self.content = json.dumps(body).encode("utf-8")

    def json(self) -> Any:
        return json.loads(self.content.decode("utf-8"))


class FakeSession:
    """Replays queued responses or exceptions and records each request."""

    def __init__(self, *responses: Any) -> None:
        self._responses = list(responses)
        self.calls: list[dict[str, Any]] = []
        self.closed = False

    def request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append({"method": method, "url": url, **kwargs})
        if not self._responses:
            raise AssertionError(f"Unexpected request: {method} {url}")
        item = self._responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def close(self) -> None:
        self.closed = True


class MemoryLocalStore:
    def __init__(self) -> None:
        self.collections: dict[str, list[dict[str, Any]]] = {}
        self.writes = 0

    def read(self, namespace: str) -> list[dict[str, Any]]:
        return [dict(item) for item in self.collections.get(namespace, [])]

    def write(self, namespace: str, items) -> None:
        self.writes += 1
        self.collections[namespace] = [dict(item) for item in items]
