"""Pure derivation of the visible view from the store and query state.

Pipeline order is fixed: fuzzy search ranking, structural predicates, sort,
then the row cap. Search runs first because it reorders candidates by match
quality; the ``Default`` sort keeps that order.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass

from ..catalogue import CatalogueEntry, CatalogueStore, EntryIdentity
from .sorting import sort_entries
from .state import FilterSet, QueryState, TriState

VIEW_ROW_CAP = 500

EntryPredicate = Callable[[CatalogueEntry], bool]


@dataclass(frozen=True)
class DerivedView:
    """Immutable result of one derivation."""

    entries: tuple[CatalogueEntry, ...]
    matched: int

    @property
    def truncated(self) -> bool:
        return self.matched > len(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[CatalogueEntry]:
        return iter(self.entries)

    def __getitem__(self, index: int) -> CatalogueEntry:
        return self.entries[index]

    def __bool__(self) -> bool:
        return bool(self.entries)

    def index_of(self, identity: EntryIdentity | None) -> int | None:
        if identity is None:
            return None
        for idx, entry in enumerate(self.entries):
            if entry.identity == identity:
                return idx
        return None


EMPTY_VIEW = DerivedView(entries=(), matched=0)


def _tri_state(attribute: str, wanted: TriState) -> EntryPredicate:
    return lambda entry: wanted.admits(getattr(entry, attribute))


def _at_least(attribute: str, minimum: float) -> EntryPredicate:
    # Missing values are treated as negative infinity, so they never pass.
    def predicate(entry: CatalogueEntry) -> bool:
        value = getattr(entry, attribute)
        return value is not None and value >= minimum

    return predicate


def _at_most(attribute: str, maximum: float) -> EntryPredicate:
    # Missing values are treated as positive infinity, so they never pass.
    def predicate(entry: CatalogueEntry) -> bool:
        value = getattr(entry, attribute)
        return value is not None and value <= maximum

    return predicate


def _has_tags(attribute: str, required: frozenset[str]) -> EntryPredicate:
    wanted = {tag.casefold() for tag in required}

    def predicate(entry: CatalogueEntry) -> bool:
        present = {tag.casefold() for tag in getattr(entry, attribute)}
        return wanted <= present

    return predicate


def _provider_is(provider: str) -> EntryPredicate:
    wanted = provider.casefold()
    return lambda entry: entry.provider_name.casefold() == wanted or entry.provider_id.casefold() == wanted


def structural_predicates(filters: FilterSet) -> list[EntryPredicate]:
    """Return the conjunctive predicates for every constrained slot.

    Each predicate is independent, so applying them in any order selects the
    same rows.
    """
    predicates: list[EntryPredicate] = []
    if filters.provider:
        predicates.append(_provider_is(filters.provider))
    if filters.tool is not TriState.ANY:
        predicates.append(_tri_state("tool_call", filters.tool))
    if filters.reasoning is not TriState.ANY:
        predicates.append(_tri_state("reasoning", filters.reasoning))
    if filters.weights is not TriState.ANY:
        predicates.append(_tri_state("open_weights", filters.weights))
    if filters.temperature is not TriState.ANY:
        predicates.append(_tri_state("temperature", filters.temperature))
    if filters.min_context is not None:
        predicates.append(_at_least("context_length", filters.min_context))
    if filters.max_input_cost is not None:
        predicates.append(_at_most("input_cost", filters.max_input_cost))
    if filters.max_output_cost is not None:
        predicates.append(_at_most("output_cost", filters.max_output_cost))
    if filters.modalities_in:
        predicates.append(_has_tags("modalities_input", filters.modalities_in))
    if filters.modalities_out:
        predicates.append(_has_tags("modalities_output", filters.modalities_out))
    return predicates


def apply_predicates(entries: list[CatalogueEntry], predicates: list[EntryPredicate]) -> list[CatalogueEntry]:
    for predicate in predicates:
        entries = [entry for entry in entries if predicate(entry)]
    return entries


def derive(store: CatalogueStore, state: QueryState, *, limit: int | None = VIEW_ROW_CAP) -> DerivedView:
    """Compute the ordered, filtered, capped view for ``state``.

    ``limit=None`` disables the row cap; only the non-interactive listing uses
    that.
    """
    term = state.search_term.strip()
    if term:
        candidates = store.search_index.rank(term)
    else:
        candidates = list(store.entries)

    candidates = apply_predicates(candidates, structural_predicates(state.filters))
    candidates = sort_entries(candidates, state.sort_mode)

    matched = len(candidates)
    if limit is not None:
        candidates = candidates[: max(0, limit)]
    return DerivedView(entries=tuple(candidates), matched=matched)


__all__ = [
    "DerivedView",
    "EMPTY_VIEW",
    "EntryPredicate",
    "VIEW_ROW_CAP",
    "apply_predicates",
    "derive",
    "structural_predicates",
]
