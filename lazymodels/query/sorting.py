"""Sort modes and the stable, null-last comparator.

Rows whose sort field is ``None`` always sink below rows with a value, in
both directions. Descending order is produced with ``reverse=True`` on a
stable sort, so rows that compare equal keep their incoming order.
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..catalogue import CatalogueEntry


class SortMode(Enum):
    """Enumerated sort modes as ``(label, entry attribute, descending)``."""

    DEFAULT = ("Default", None, False)
    PROVIDER_ASC = ("Provider A-Z", "provider_name", False)
    PROVIDER_DESC = ("Provider Z-A", "provider_name", True)
    INPUT_COST_ASC = ("Input cost asc", "input_cost", False)
    INPUT_COST_DESC = ("Input cost desc", "input_cost", True)
    OUTPUT_COST_ASC = ("Output cost asc", "output_cost", False)
    OUTPUT_COST_DESC = ("Output cost desc", "output_cost", True)
    CACHE_READ_ASC = ("Cache read asc", "cache_read_cost", False)
    CACHE_READ_DESC = ("Cache read desc", "cache_read_cost", True)
    CONTEXT_ASC = ("Context asc", "context_length", False)
    CONTEXT_DESC = ("Context desc", "context_length", True)
    OUTPUT_LIMIT_ASC = ("Output limit asc", "output_length", False)
    OUTPUT_LIMIT_DESC = ("Output limit desc", "output_length", True)
    RELEASE_NEWEST = ("Release date new", "release_date", True)
    RELEASE_OLDEST = ("Release date old", "release_date", False)
    UPDATED_NEWEST = ("Updated new", "last_updated", True)
    UPDATED_OLDEST = ("Updated old", "last_updated", False)

    @property
    def label(self) -> str:
        return self.value[0]

    @property
    def field(self) -> str | None:
        return self.value[1]

    @property
    def descending(self) -> bool:
        return self.value[2]


# Cycled by the rich pane's single sort key.
MINIMAL_SORT_CYCLE: tuple[SortMode, ...] = (
    SortMode.DEFAULT,
    SortMode.PROVIDER_ASC,
    SortMode.INPUT_COST_ASC,
    SortMode.OUTPUT_COST_ASC,
    SortMode.CONTEXT_DESC,
)

# Offered as a full list by the prompt loop.
EXTENDED_SORT_MODES: tuple[SortMode, ...] = (
    SortMode.DEFAULT,
    SortMode.INPUT_COST_ASC,
    SortMode.INPUT_COST_DESC,
    SortMode.OUTPUT_COST_ASC,
    SortMode.OUTPUT_COST_DESC,
    SortMode.CACHE_READ_ASC,
    SortMode.CACHE_READ_DESC,
    SortMode.CONTEXT_ASC,
    SortMode.CONTEXT_DESC,
    SortMode.OUTPUT_LIMIT_ASC,
    SortMode.OUTPUT_LIMIT_DESC,
    SortMode.RELEASE_NEWEST,
    SortMode.RELEASE_OLDEST,
    SortMode.UPDATED_NEWEST,
    SortMode.UPDATED_OLDEST,
    SortMode.PROVIDER_ASC,
    SortMode.PROVIDER_DESC,
)

# Accepted by ``--sort`` on the non-interactive path.
CLI_SORT_FIELDS: dict[str, SortMode] = {
    "input-cost": SortMode.INPUT_COST_ASC,
    "output-cost": SortMode.OUTPUT_COST_ASC,
    "provider": SortMode.PROVIDER_ASC,
}


def next_sort_mode(current: SortMode, modes: Sequence[SortMode] = MINIMAL_SORT_CYCLE, step: int = 1) -> SortMode:
    """Advance through ``modes``; a mode outside the cycle restarts at its head."""
    if not modes:
        return current
    try:
        idx = modes.index(current)
    except ValueError:
        return modes[0]
    return modes[(idx + step) % len(modes)]


def sort_mode_from_label(label: str) -> SortMode | None:
    folded = label.strip().casefold()
    for mode in SortMode:
        if mode.label.casefold() == folded:
            return mode
    return None


def _sort_key(field: str):
    if field == "provider_name":
        return lambda entry: getattr(entry, field).casefold()
    return lambda entry: getattr(entry, field)


def sort_entries(entries: Sequence[CatalogueEntry], mode: SortMode) -> list[CatalogueEntry]:
    """Return ``entries`` ordered by ``mode`` with unknown values last."""
    field = mode.field
    if field is None:
        return list(entries)
    known = [entry for entry in entries if getattr(entry, field) is not None]
    unknown = [entry for entry in entries if getattr(entry, field) is None]
    known.sort(key=_sort_key(field), reverse=mode.descending)
    return known + unknown


__all__ = [
    "CLI_SORT_FIELDS",
    "EXTENDED_SORT_MODES",
    "MINIMAL_SORT_CYCLE",
    "SortMode",
    "next_sort_mode",
    "sort_entries",
    "sort_mode_from_label",
]
