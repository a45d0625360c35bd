from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..catalogue import CatalogueEntry

SUBSTRING_BASE_SCORE = 10_000
WORD_BOUNDARY_CHARS = "/_- .:"


def fuzzy_score(query: str, candidate: str) -> int | None:
    """Score an in-order subsequence match, or ``None`` when ``query`` does not fit."""
    if not query:
        return 0
    query_folded = query.casefold()
    candidate_folded = candidate.casefold()

    score = 0
    prev_idx = -1
    run = 0
    for needle in query_folded:
        idx = candidate_folded.find(needle, prev_idx + 1)
        if idx < 0:
            return None
        if idx == prev_idx + 1:
            run += 1
            score += 20 + min(16, run * 4)
        else:
            gap = idx - prev_idx - 1
            run = 0
            score -= min(40, gap * 2)
        if idx == 0 or candidate_folded[idx - 1] in WORD_BOUNDARY_CHARS:
            score += 35
        prev_idx = idx

    score -= len(candidate_folded) // 5
    return score


def substring_index(query: str, candidate: str) -> int | None:
    if not query:
        return 0
    idx = candidate.casefold().find(query.casefold())
    if idx < 0:
        return None
    return idx


def substring_score(match_idx: int, label_len: int) -> int:
    return SUBSTRING_BASE_SCORE - (match_idx * 50) - label_len


def fuzzy_match_labels(query: str, labels: list[str], limit: int = 200) -> list[tuple[int, str, int]]:
    substring_scored: list[tuple[int, int, str, int]] = []
    for idx, label in enumerate(labels):
        substr_idx = substring_index(query, label)
        if substr_idx is None:
            continue
        substring_scored.append((substr_idx, len(label), label, idx))
    if substring_scored:
        substring_scored.sort(key=lambda item: (item[0], item[1], item[2]))
        return [
            (label_idx, label, substring_score(substr_idx, label_len))
            for substr_idx, label_len, label, label_idx in substring_scored[: max(1, limit)]
        ]

    scored: list[tuple[int, int, str, int]] = []
    for idx, label in enumerate(labels):
        score = fuzzy_score(query, label)
        if score is None:
            continue
        scored.append((score, len(label), label, idx))
    scored.sort(key=lambda item: (-item[0], item[1], item[2]))
    return [(idx, label, score) for score, _, label, idx in scored[: max(1, limit)]]


class SearchIndex:
    """Rank catalogue entries by affinity to a query over name and id.

    Folded keys are computed once per store. Literal substring hits outrank
    every subsequence match: when any entry contains the query verbatim in
    either key, only substring hits are returned. Otherwise entries whose keys
    contain the query as an in-order subsequence are returned best first.
    Ties keep catalogue order.
    """

    def __init__(self, entries: Sequence[CatalogueEntry]) -> None:
        self._entries = tuple(entries)
        self._keys: list[tuple[str, ...]] = [
            (entry.model_name.casefold(), entry.model_id.casefold()) for entry in self._entries
        ]

    def __len__(self) -> int:
        return len(self._entries)

    def score_positions(self, query: str) -> list[tuple[int, int]]:
        """Return ``(position, score)`` pairs for matching entries, best first."""
        query_folded = query.strip().casefold()
        if not query_folded:
            return [(pos, 0) for pos in range(len(self._entries))]

        substring_hits: list[tuple[int, int]] = []
        for pos, keys in enumerate(self._keys):
            best: int | None = None
            for key in keys:
                match_idx = key.find(query_folded)
                if match_idx < 0:
                    continue
                score = substring_score(match_idx, len(key))
                if best is None or score > best:
                    best = score
            if best is not None:
                substring_hits.append((pos, best))
        if substring_hits:
            substring_hits.sort(key=lambda item: -item[1])
            return substring_hits

        fuzzy_hits: list[tuple[int, int]] = []
        for pos, keys in enumerate(self._keys):
            scores = [score for score in (fuzzy_score(query_folded, key) for key in keys) if score is not None]
            if scores:
                fuzzy_hits.append((pos, max(scores)))
        fuzzy_hits.sort(key=lambda item: -item[1])
        return fuzzy_hits

    def rank(self, query: str) -> list[CatalogueEntry]:
        """Return matching entries ordered by match quality."""
        return [self._entries[pos] for pos, _score in self.score_positions(query)]
