"""Mutable query state owned by the session controller."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from enum import Enum

from ..catalogue import EntryIdentity
from ..errors import InvalidUserInput
from .sorting import SortMode

DEFAULT_PAGE_SIZE = 30

TRI_STATE_SLOTS: tuple[str, ...] = ("tool", "reasoning", "weights", "temperature")
BOUND_SLOTS: tuple[str, ...] = ("min_context", "max_input_cost", "max_output_cost")


class TriState(Enum):
    ANY = "any"
    YES = "yes"
    NO = "no"

    def cycle(self) -> TriState:
        """Any -> Yes -> No -> Any."""
        if self is TriState.ANY:
            return TriState.YES
        if self is TriState.YES:
            return TriState.NO
        return TriState.ANY

    def admits(self, flag: bool) -> bool:
        if self is TriState.ANY:
            return True
        return flag is (self is TriState.YES)

    def label(self, yes: str = "Y", no: str = "N", any_label: str = "*") -> str:
        if self is TriState.YES:
            return yes
        if self is TriState.NO:
            return no
        return any_label


def parse_tri_state(text: str) -> TriState:
    """Read ``any``/``y``/``n`` style answers; weights also accept ``open``/``closed``."""
    folded = text.strip().casefold()
    if folded in {"", "*", "any", "a"}:
        return TriState.ANY
    if folded in {"y", "yes", "true", "1", "open"}:
        return TriState.YES
    if folded in {"n", "no", "false", "0", "closed"}:
        return TriState.NO
    raise InvalidUserInput(f"expected any/y/n, got {text!r}")


def parse_bound(raw: str | float | int | None) -> float | None:
    """Parse a numeric bound; blank clears it.

    Non-numeric and non-finite input raises ``InvalidUserInput`` so callers
    can clear the slot and report it.
    """
    if raw is None:
        return None
    if isinstance(raw, bool):
        raise InvalidUserInput(f"not a number: {raw!r}")
    if isinstance(raw, (int, float)):
        value = float(raw)
    else:
        text = raw.strip().replace("_", "").lstrip("$")
        if not text:
            return None
        try:
            value = float(text)
        except ValueError as exc:
            raise InvalidUserInput(f"not a number: {raw!r}") from exc
    if not math.isfinite(value):
        raise InvalidUserInput(f"not a finite number: {raw!r}")
    return value


def parse_tags(text: str) -> frozenset[str]:
    return frozenset(part.strip().casefold() for part in text.replace(" ", ",").split(",") if part.strip())


@dataclass(frozen=True)
class FilterSet:
    """Named predicate slots; every default means unconstrained."""

    provider: str | None = None
    tool: TriState = TriState.ANY
    reasoning: TriState = TriState.ANY
    weights: TriState = TriState.ANY
    temperature: TriState = TriState.ANY
    min_context: float | None = None
    max_input_cost: float | None = None
    max_output_cost: float | None = None
    modalities_in: frozenset[str] = frozenset()
    modalities_out: frozenset[str] = frozenset()

    def with_slot(self, slot: str, value: object) -> FilterSet:
        return replace(self, **{slot: value})


@dataclass
class QueryState:
    """Search term, filters, sort, selection identity, and page window."""

    search_term: str = ""
    filters: FilterSet = field(default_factory=FilterSet)
    sort_mode: SortMode = SortMode.DEFAULT
    selection_id: EntryIdentity | None = None
    page_index: int = 0
    page_size: int = DEFAULT_PAGE_SIZE

    def page_count(self, view_size: int) -> int:
        return max(1, math.ceil(view_size / max(1, self.page_size)))

    def clamp_page(self, view_size: int) -> None:
        """Keep ``page_index`` inside ``[0, page_count - 1]``."""
        self.page_index = max(0, min(self.page_index, self.page_count(view_size) - 1))

    def page_bounds(self, view_size: int) -> tuple[int, int]:
        start = self.page_index * self.page_size
        return start, min(view_size, start + self.page_size)


def summarize_filters(state: QueryState) -> list[tuple[str, str]]:
    """Label/value pairs for status lines; unconstrained slots render as ``*``."""
    filters = state.filters

    def bound(value: float | None) -> str:
        if value is None:
            return "*"
        return f"{value:g}"

    def tags(values: frozenset[str]) -> str:
        return ",".join(sorted(values)) if values else "*"

    return [
        ("Search", state.search_term or "*"),
        ("Prov", filters.provider or "*"),
        ("Tool", filters.tool.label()),
        ("Reason", filters.reasoning.label()),
        ("Wgts", filters.weights.label("OPEN", "CLOSED")),
        ("Temp", filters.temperature.label()),
        ("Ctx>=", bound(filters.min_context)),
        ("In$<=", bound(filters.max_input_cost)),
        ("Out$<=", bound(filters.max_output_cost)),
        ("InMod", tags(filters.modalities_in)),
        ("OutMod", tags(filters.modalities_out)),
        ("Sort", state.sort_mode.label),
    ]


__all__ = [
    "BOUND_SLOTS",
    "DEFAULT_PAGE_SIZE",
    "FilterSet",
    "QueryState",
    "TRI_STATE_SLOTS",
    "TriState",
    "parse_bound",
    "parse_tags",
    "parse_tri_state",
    "summarize_filters",
]
