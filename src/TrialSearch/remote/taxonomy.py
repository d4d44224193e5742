"""Dropdown taxonomy client."""

from __future__ import annotations

from typing import Protocol
from urllib.parse import quote

from TrialSearch.core.errors import RemoteUnavailable
from TrialSearch.core.fields import FieldOption
from TrialSearch.core.result import Result
from TrialSearch.remote.http import ApiClient

OPTIONS_PATH = "/api/v1/dropdown-management/options"


class TaxonomySource(Protocol):
    """Remote source of dropdown options by category."""

    def get_options(self, category: str) -> Result[list[FieldOption]]:
        raise NotImplementedError


class HttpTaxonomyClient:
    """Reads active dropdown options from the dropdown-management API."""

    def __init__(self, client: ApiClient) -> None:
        self.client = client

    def get_options(self, category: str) -> Result[list[FieldOption]]:
        result = self.client.request("GET", f"{OPTIONS_PATH}/{quote(category, safe='')}")
        if not result.ok:
            return Result.failure(result.error)
        data = result.value if result.value is not None else []
        if not isinstance(data, list):
            return Result.failure(RemoteUnavailable(f"Options for {category!r} are not an array"))

        options: list[FieldOption] = []
        for item in sorted(
            (i for i in data if isinstance(i, dict)),
            key=lambda i: i.get("sort_order") if isinstance(i.get("sort_order"), int) else 0,
        ):
            if item.get("is_active") is False:
                continue
            value = str(item.get("value") or "").strip()
            if not value:
                continue
            options.append(FieldOption(value=value, label=str(item.get("label") or value)))
        return Result.success(options)
