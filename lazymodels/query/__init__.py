"""Query state, sort modes, and the pure view derivation."""

from __future__ import annotations

from .engine import EMPTY_VIEW, VIEW_ROW_CAP, DerivedView, derive, structural_predicates
from .sorting import (
    CLI_SORT_FIELDS,
    EXTENDED_SORT_MODES,
    MINIMAL_SORT_CYCLE,
    SortMode,
    next_sort_mode,
    sort_entries,
)
from .state import DEFAULT_PAGE_SIZE, FilterSet, QueryState, TriState, parse_bound

__all__ = [
    "CLI_SORT_FIELDS",
    "DEFAULT_PAGE_SIZE",
    "DerivedView",
    "EMPTY_VIEW",
    "EXTENDED_SORT_MODES",
    "FilterSet",
    "MINIMAL_SORT_CYCLE",
    "QueryState",
    "SortMode",
    "TriState",
    "VIEW_ROW_CAP",
    "derive",
    "next_sort_mode",
    "parse_bound",
    "sort_entries",
    "structural_predicates",
]
