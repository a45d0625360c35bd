"""Command values accepted by ``SessionController.dispatch``.

Presentation adapters translate key presses or typed lines into exactly one
of these values. Commands carry raw user text where parsing can fail, so the
controller owns the recovery policy.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Union

from .query.sorting import MINIMAL_SORT_CYCLE, SortMode
from .query.state import TriState


@dataclass(frozen=True)
class SetSearch:
    term: str


@dataclass(frozen=True)
class SetProvider:
    provider: str | None


@dataclass(frozen=True)
class CycleTriState:
    slot: str


@dataclass(frozen=True)
class SetTriState:
    slot: str
    value: TriState


@dataclass(frozen=True)
class SetBound:
    """Set ``min_context``/``max_input_cost``/``max_output_cost``; blank clears."""

    slot: str
    raw: str | float | None


@dataclass(frozen=True)
class SetModalities:
    """Replace both modality requirements at once."""

    inputs: frozenset[str]
    outputs: frozenset[str]


@dataclass(frozen=True)
class CycleSort:
    modes: Sequence[SortMode] = MINIMAL_SORT_CYCLE
    step: int = 1


@dataclass(frozen=True)
class SetSort:
    mode: SortMode


@dataclass(frozen=True)
class MoveSelection:
    delta: int


@dataclass(frozen=True)
class SelectIndex:
    index: int


@dataclass(frozen=True)
class CopySelected:
    pass


@dataclass(frozen=True)
class ToggleHelp:
    pass


@dataclass(frozen=True)
class ClearFilters:
    pass


@dataclass(frozen=True)
class NextPage:
    pass


@dataclass(frozen=True)
class PrevPage:
    pass


@dataclass(frozen=True)
class GotoPage:
    """Jump to a 1-based page number; out-of-range values clamp."""

    raw: str | int


@dataclass(frozen=True)
class SetPageSize:
    raw: str | int


@dataclass(frozen=True)
class Quit:
    pass


Command = Union[
    SetSearch,
    SetProvider,
    CycleTriState,
    SetTriState,
    SetBound,
    SetModalities,
    CycleSort,
    SetSort,
    MoveSelection,
    SelectIndex,
    CopySelected,
    ToggleHelp,
    ClearFilters,
    NextPage,
    PrevPage,
    GotoPage,
    SetPageSize,
    Quit,
]

__all__ = [
    "ClearFilters",
    "Command",
    "CopySelected",
    "CycleSort",
    "CycleTriState",
    "GotoPage",
    "MoveSelection",
    "NextPage",
    "PrevPage",
    "Quit",
    "SelectIndex",
    "SetBound",
    "SetModalities",
    "SetPageSize",
    "SetProvider",
    "SetSearch",
    "SetSort",
    "SetTriState",
    "ToggleHelp",
]
