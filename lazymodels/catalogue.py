"""Catalogue records, normalization, and the one-shot fetch.

The remote document is keyed by provider id; each provider carries a display
name and a nested ``models`` mapping. Everything here flattens that shape into
immutable ``CatalogueEntry`` rows. Malformed optional fields degrade to
``None``/``False``/empty instead of raising.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from functools import cached_property
from typing import TYPE_CHECKING

import httpx

from .errors import SourceUnavailable

if TYPE_CHECKING:
    from .search.fuzzy import SearchIndex

logger = logging.getLogger(__name__)

API_URL = "https://models.dev/api.json"
DEFAULT_FETCH_TIMEOUT_SECONDS = 20.0

EntryIdentity = tuple[str, str]


@dataclass(frozen=True)
class CatalogueEntry:
    """One model offered by one provider."""

    provider_id: str
    provider_name: str
    model_id: str
    model_name: str
    tool_call: bool = False
    reasoning: bool = False
    attachment: bool = False
    temperature: bool = False
    open_weights: bool = False
    modalities_input: tuple[str, ...] = ()
    modalities_output: tuple[str, ...] = ()
    input_cost: float | None = None
    output_cost: float | None = None
    cache_read_cost: float | None = None
    cache_write_cost: float | None = None
    context_length: int | None = None
    output_length: int | None = None
    knowledge: str | None = None
    release_date: str | None = None
    last_updated: str | None = None

    @property
    def identity(self) -> EntryIdentity:
        """Selection identity that survives view recomputation."""
        return (self.provider_id, self.model_id)

    def to_record(self) -> dict[str, object]:
        """Return the flat JSON record used by ``--json`` output."""
        return {
            "providerId": self.provider_id,
            "provider": self.provider_name,
            "id": self.model_id,
            "name": self.model_name,
            "tool": self.tool_call,
            "reasoning": self.reasoning,
            "attachment": self.attachment,
            "temperature": self.temperature,
            "openWeights": self.open_weights,
            "modalitiesInput": list(self.modalities_input),
            "modalitiesOutput": list(self.modalities_output),
            "inputCost": self.input_cost,
            "outputCost": self.output_cost,
            "cacheReadCost": self.cache_read_cost,
            "cacheWriteCost": self.cache_write_cost,
            "contextLimit": self.context_length,
            "outputLimit": self.output_length,
            "knowledge": self.knowledge,
            "releaseDate": self.release_date,
            "lastUpdated": self.last_updated,
        }


@dataclass(frozen=True)
class CatalogueStore:
    """Immutable, loaded-once sequence of catalogue entries."""

    entries: tuple[CatalogueEntry, ...]

    @classmethod
    def from_entries(cls, entries: Iterable[CatalogueEntry]) -> CatalogueStore:
        return cls(tuple(entries))

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[CatalogueEntry]:
        return iter(self.entries)

    def __getitem__(self, index: int) -> CatalogueEntry:
        return self.entries[index]

    @cached_property
    def providers(self) -> tuple[str, ...]:
        """Distinct provider display names, sorted."""
        return tuple(sorted({entry.provider_name for entry in self.entries}))

    @cached_property
    def modalities(self) -> tuple[str, ...]:
        """Every modality tag seen on either side, sorted."""
        tags: set[str] = set()
        for entry in self.entries:
            tags.update(entry.modalities_input)
            tags.update(entry.modalities_output)
        return tuple(sorted(tags))

    @cached_property
    def search_index(self) -> SearchIndex:
        """Fuzzy ranking index over model names and ids, built on first use."""
        from .search.fuzzy import SearchIndex

        return SearchIndex(self.entries)


def _flag(value: object) -> bool:
    return value is True


def _text(value: object) -> str | None:
    if isinstance(value, str) and value:
        return value
    return None


def _cost(value: object) -> float | None:
    """Accept finite non-negative numbers; booleans are not costs."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value) or value < 0:
        return None
    return value


def _limit(value: object) -> int | None:
    """Accept positive integers, including integral floats such as ``8192.0``."""
    if isinstance(value, bool):
        return None
    if isinstance(value, float):
        if not value.is_integer():
            return None
        value = int(value)
    if not isinstance(value, int) or value <= 0:
        return None
    return value


def _tags(value: object) -> tuple[str, ...]:
    if not isinstance(value, (list, tuple)):
        return ()
    return tuple(tag for tag in value if isinstance(tag, str) and tag)


def _mapping(value: object) -> Mapping[str, object]:
    return value if isinstance(value, Mapping) else {}


def normalize_model(
    provider_id: str,
    provider_name: str,
    model_key: str,
    raw: Mapping[str, object],
) -> CatalogueEntry:
    """Flatten one model object into a ``CatalogueEntry``."""
    model_id = _text(raw.get("id")) or model_key
    modalities = _mapping(raw.get("modalities"))
    cost = _mapping(raw.get("cost"))
    limit = _mapping(raw.get("limit"))
    return CatalogueEntry(
        provider_id=provider_id,
        provider_name=provider_name,
        model_id=model_id,
        model_name=_text(raw.get("name")) or model_id,
        tool_call=_flag(raw.get("tool_call")),
        reasoning=_flag(raw.get("reasoning")),
        attachment=_flag(raw.get("attachment")),
        temperature=_flag(raw.get("temperature")),
        open_weights=_flag(raw.get("open_weights")),
        modalities_input=_tags(modalities.get("input")),
        modalities_output=_tags(modalities.get("output")),
        input_cost=_cost(cost.get("input")),
        output_cost=_cost(cost.get("output")),
        cache_read_cost=_cost(cost.get("cache_read")),
        cache_write_cost=_cost(cost.get("cache_write")),
        context_length=_limit(limit.get("context")),
        output_length=_limit(limit.get("output")),
        knowledge=_text(raw.get("knowledge")),
        release_date=_text(raw.get("release_date")),
        last_updated=_text(raw.get("last_updated")),
    )


def normalize_catalogue(raw: object) -> CatalogueStore:
    """Flatten the provider-keyed document into a store.

    Providers without a ``models`` object and non-object models are skipped.
    Duplicate model ids within one provider keep the first occurrence so the
    ``(provider_id, model_id)`` identity stays unique.
    """
    if not isinstance(raw, Mapping):
        raise SourceUnavailable("catalogue document is not a JSON object")

    entries: list[CatalogueEntry] = []
    for provider_id, provider in raw.items():
        if not isinstance(provider_id, str) or not isinstance(provider, Mapping):
            continue
        models = provider.get("models")
        if not isinstance(models, Mapping):
            continue
        provider_name = _text(provider.get("name")) or provider_id
        seen: set[str] = set()
        for model_key, model in models.items():
            if not isinstance(model_key, str) or not isinstance(model, Mapping):
                continue
            entry = normalize_model(provider_id, provider_name, model_key, model)
            if entry.model_id in seen:
                logger.debug("skipping duplicate model %s/%s", provider_id, entry.model_id)
                continue
            seen.add(entry.model_id)
            entries.append(entry)
    return CatalogueStore.from_entries(entries)


def fetch_catalogue(
    url: str = API_URL,
    *,
    timeout: float = DEFAULT_FETCH_TIMEOUT_SECONDS,
) -> CatalogueStore:
    """Fetch and normalize the catalogue in one blocking request.

    Any transport error, non-success status, or undecodable body is reported
    as ``SourceUnavailable``. There is no retry.
    """
    logger.debug("fetching catalogue from %s", url)
    try:
        response = httpx.get(url, timeout=httpx.Timeout(timeout), follow_redirects=True)
    except httpx.TimeoutException as exc:
        raise SourceUnavailable(f"request to {url} timed out") from exc
    except httpx.HTTPError as exc:
        raise SourceUnavailable(f"network error: {exc}") from exc

    if not response.is_success:
        raise SourceUnavailable(f"Failed to fetch catalogue: {response.status_code}")

    try:
        payload = response.json()
    except ValueError as exc:
        raise SourceUnavailable("catalogue response is not valid JSON") from exc

    store = normalize_catalogue(payload)
    logger.debug("loaded %d catalogue entries", len(store))
    return store


__all__ = [
    "API_URL",
    "DEFAULT_FETCH_TIMEOUT_SECONDS",
    "CatalogueEntry",
    "CatalogueStore",
    "EntryIdentity",
    "fetch_catalogue",
    "normalize_catalogue",
    "normalize_model",
]
