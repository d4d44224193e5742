"""Dropdown option lookup with static fallbacks."""

from __future__ import annotations

from typing import Sequence

from TrialSearch.core.fields import FieldOption, require_field
from TrialSearch.remote.taxonomy import TaxonomySource
from TrialSearch.utils.log import log


class DynamicValueSource:
    """Resolves dropdown options from the taxonomy service.

    Results are cached per category for the lifetime of the instance.
    """

    def __init__(self, taxonomy: TaxonomySource) -> None:
        self.taxonomy = taxonomy
        self._cache: dict[str, tuple[FieldOption, ...]] = {}

    def get_options(self, category: str, fallback: Sequence[FieldOption] = ()) -> list[FieldOption]:
        """Return remote options for ``category``, or ``fallback`` when none arrive."""
        cached = self._cache.get(category)
        if cached is not None:
            return list(cached)

        try:
            result = self.taxonomy.get_options(category)
        except Exception as error:  # noqa: BLE001 - taxonomy failure must be isolated
            log.warning("Option lookup raised: category=%s error=%s", category, error)
            return list(fallback)

        if not result.ok:
            log.warning("Option lookup failed: category=%s error=%s", category, result.error)
            return list(fallback)
        if not result.value:
            log.debug("No remote options for category=%s; using fallback", category)
            return list(fallback)

        self._cache[category] = tuple(result.value)
        return list(result.value)

    def options_for_field(self, field_id: str) -> list[FieldOption]:
        """Return options for a registered field.

        Fields without a taxonomy category return their static options.

        Raises:
            ValidationError: If ``field_id`` is not registered.
        """
        descriptor = require_field(field_id)
        if not descriptor.category:
            return list(descriptor.options)
        return self.get_options(descriptor.category, descriptor.options)

    def refresh(self, category: str | None = None) -> None:
        """Forget cached options for one category, or all of them."""
        if category is None:
            self._cache.clear()
        else:
            self._cache.pop(category, None)
