"""Fuzzy matching used for catalogue search and choice resolution."""

from __future__ import annotations

from .fuzzy import SearchIndex, fuzzy_match_labels, fuzzy_score, substring_index

__all__ = [
    "SearchIndex",
    "fuzzy_match_labels",
    "fuzzy_score",
    "substring_index",
]
