"""Session controller: the single mutation entry point for a browsing session.

The controller owns the ``QueryState`` and the current ``DerivedView``.
Every user action arrives as one command value through ``dispatch``, which
applies it, re-derives the view, re-locates the selection by identity, and
asks the attached presentation adapter to redraw.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum

from .catalogue import CatalogueEntry, CatalogueStore
from .commands import (
    ClearFilters,
    Command,
    CopySelected,
    CycleSort,
    CycleTriState,
    GotoPage,
    MoveSelection,
    NextPage,
    PrevPage,
    Quit,
    SelectIndex,
    SetBound,
    SetModalities,
    SetPageSize,
    SetProvider,
    SetSearch,
    SetSort,
    SetTriState,
    ToggleHelp,
)
from .errors import InvalidUserInput, LazyModelsError, SourceUnavailable, TransientActionFailure
from .query.engine import EMPTY_VIEW, DerivedView, derive
from .query.sorting import next_sort_mode
from .query.state import (
    BOUND_SLOTS,
    TRI_STATE_SLOTS,
    FilterSet,
    QueryState,
    parse_bound,
)
from .runtime.clipboard import copy_text_to_clipboard

logger = logging.getLogger(__name__)

SLOT_LABELS: dict[str, str] = {
    "tool": "Tool filter",
    "reasoning": "Reason filter",
    "weights": "Weights filter",
    "temperature": "Temp filter",
    "min_context": "Min context",
    "max_input_cost": "Max input $",
    "max_output_cost": "Max output $",
}

Renderer = Callable[["SessionController"], None]


class SessionPhase(Enum):
    LOADING = "loading"
    READY = "ready"
    MUTATING = "mutating"
    TERMINATED = "terminated"


class SessionController:
    """Own query state and apply one command at a time."""

    def __init__(
        self,
        state: QueryState | None = None,
        *,
        clipboard: Callable[[str], bool] = copy_text_to_clipboard,
    ) -> None:
        self.state = state if state is not None else QueryState()
        self.phase = SessionPhase.LOADING
        self.store: CatalogueStore | None = None
        self.view: DerivedView = EMPTY_VIEW
        self.selected_index: int | None = None
        self.status_message = ""
        self.show_help = True
        self.error: SourceUnavailable | None = None
        self._clipboard = clipboard
        self._renderer: Renderer | None = None
        self._handlers: dict[type, Callable[..., str]] = {
            SetSearch: self._set_search,
            SetProvider: self._set_provider,
            CycleTriState: self._cycle_tri_state,
            SetTriState: self._set_tri_state,
            SetBound: self._set_bound,
            SetModalities: self._set_modalities,
            CycleSort: self._cycle_sort,
            SetSort: self._set_sort,
            MoveSelection: self._move_selection,
            SelectIndex: self._select_index,
            CopySelected: self._copy_selected,
            ToggleHelp: self._toggle_help,
            ClearFilters: self._clear_filters,
            NextPage: self._next_page,
            PrevPage: self._prev_page,
            GotoPage: self._goto_page,
            SetPageSize: self._set_page_size,
        }

    # Lifecycle -------------------------------------------------------------

    def start(self, loader: Callable[[], CatalogueStore]) -> None:
        """Block on ``loader`` and enter ``READY`` with the first view.

        On ``SourceUnavailable`` the session terminates, records the error,
        and re-raises it.
        """
        self.phase = SessionPhase.LOADING
        try:
            store = loader()
        except SourceUnavailable as exc:
            self.phase = SessionPhase.TERMINATED
            self.error = exc
            raise
        self.store = store
        self._recompute()
        self.status_message = "Loaded"
        self.phase = SessionPhase.READY

    @property
    def running(self) -> bool:
        return self.phase is not SessionPhase.TERMINATED

    def attach_renderer(self, renderer: Renderer | None) -> None:
        self._renderer = renderer

    def render(self) -> None:
        if self._renderer is not None:
            self._renderer(self)

    def terminate(self) -> None:
        self.phase = SessionPhase.TERMINATED

    # Derived accessors -----------------------------------------------------

    @property
    def selected_entry(self) -> CatalogueEntry | None:
        if self.selected_index is None:
            return None
        return self.view[self.selected_index]

    @property
    def total_entries(self) -> int:
        return len(self.store) if self.store is not None else 0

    @property
    def providers(self) -> tuple[str, ...]:
        return self.store.providers if self.store is not None else ()

    @property
    def modalities(self) -> tuple[str, ...]:
        return self.store.modalities if self.store is not None else ()

    def page_entries(self) -> list[tuple[int, CatalogueEntry]]:
        """Return ``(view index, entry)`` pairs on the current page."""
        start, end = self.state.page_bounds(len(self.view))
        return [(idx, self.view[idx]) for idx in range(start, end)]

    # Dispatch --------------------------------------------------------------

    def dispatch(self, command: Command) -> bool:
        """Apply one command, re-derive, re-render; return whether still running."""
        if self.phase is SessionPhase.TERMINATED:
            return False
        if self.phase is not SessionPhase.READY:
            raise RuntimeError(f"cannot dispatch while session is {self.phase.value}")
        if isinstance(command, Quit):
            self.terminate()
            return False

        handler = self._handlers.get(type(command))
        if handler is None:
            raise TypeError(f"unsupported command: {command!r}")

        self.phase = SessionPhase.MUTATING
        try:
            message = handler(command)
        except LazyModelsError as exc:
            message = str(exc)
        except Exception as exc:
            # One failed command must not end the session.
            logger.warning("command %r failed: %s", command, exc, exc_info=True)
            message = f"Command failed: {exc}"
        try:
            self._recompute()
        finally:
            self.phase = SessionPhase.READY
        self.status_message = message
        self.render()
        return True

    def _recompute(self) -> None:
        """Re-derive the view and move the selection with its identity."""
        if self.store is None:
            self.view = EMPTY_VIEW
            self.selected_index = None
            return
        self.view = derive(self.store, self.state)
        idx = self.view.index_of(self.state.selection_id)
        if idx is None and self.view:
            idx = 0
        self._select(idx)
        self.state.clamp_page(len(self.view))

    def _select(self, idx: int | None) -> None:
        self.selected_index = idx
        self.state.selection_id = self.view[idx].identity if idx is not None else None

    # Handlers --------------------------------------------------------------

    def _set_search(self, command: SetSearch) -> str:
        self.state.search_term = command.term.strip()
        self.state.page_index = 0
        return "Search updated"

    def _set_provider(self, command: SetProvider) -> str:
        provider = (command.provider or "").strip()
        if provider.casefold() == "any":
            provider = ""
        self._update_filters(self.state.filters.with_slot("provider", provider or None))
        return "Provider updated"

    def _cycle_tri_state(self, command: CycleTriState) -> str:
        slot = self._tri_state_slot(command.slot)
        current = getattr(self.state.filters, slot)
        self._update_filters(self.state.filters.with_slot(slot, current.cycle()))
        return SLOT_LABELS[slot]

    def _set_tri_state(self, command: SetTriState) -> str:
        slot = self._tri_state_slot(command.slot)
        self._update_filters(self.state.filters.with_slot(slot, command.value))
        return SLOT_LABELS[slot]

    def _set_bound(self, command: SetBound) -> str:
        if command.slot not in BOUND_SLOTS:
            raise ValueError(f"unknown bound slot: {command.slot}")
        label = SLOT_LABELS[command.slot]
        try:
            value = parse_bound(command.raw)
        except InvalidUserInput:
            self._update_filters(self.state.filters.with_slot(command.slot, None))
            return f"{label}: invalid number {command.raw!r}, filter cleared"
        self._update_filters(self.state.filters.with_slot(command.slot, value))
        return f"{label} updated"

    def _set_modalities(self, command: SetModalities) -> str:
        filters = self.state.filters.with_slot("modalities_in", frozenset(command.inputs))
        self._update_filters(filters.with_slot("modalities_out", frozenset(command.outputs)))
        return "Modalities updated"

    def _cycle_sort(self, command: CycleSort) -> str:
        self.state.sort_mode = next_sort_mode(self.state.sort_mode, command.modes, command.step)
        return f"Sort: {self.state.sort_mode.label}"

    def _set_sort(self, command: SetSort) -> str:
        self.state.sort_mode = command.mode
        return f"Sort: {self.state.sort_mode.label}"

    def _move_selection(self, command: MoveSelection) -> str:
        if not self.view:
            return ""
        current = self.selected_index if self.selected_index is not None else 0
        self._select(max(0, min(len(self.view) - 1, current + command.delta)))
        return ""

    def _select_index(self, command: SelectIndex) -> str:
        if not 0 <= command.index < len(self.view):
            raise InvalidUserInput(f"No row {command.index + 1}")
        self._select(command.index)
        return ""

    def _copy_selected(self, command: CopySelected) -> str:
        entry = self.selected_entry
        if entry is None:
            return "Nothing to copy"
        try:
            copied = self._clipboard(entry.model_id)
        except Exception as exc:
            logger.warning("clipboard write failed: %s", exc)
            copied = False
        if not copied:
            raise TransientActionFailure("Copy failed")
        return f"Copied {entry.model_id}"

    def _toggle_help(self, command: ToggleHelp) -> str:
        self.show_help = not self.show_help
        return ""

    def _clear_filters(self, command: ClearFilters) -> str:
        self.state.search_term = ""
        self._update_filters(FilterSet())
        return "Filters cleared"

    def _next_page(self, command: NextPage) -> str:
        return self._show_page(self.state.page_index + 1)

    def _prev_page(self, command: PrevPage) -> str:
        return self._show_page(self.state.page_index - 1)

    def _goto_page(self, command: GotoPage) -> str:
        try:
            page = int(str(command.raw).strip())
        except ValueError:
            page = 1
        return self._show_page(page - 1)

    def _set_page_size(self, command: SetPageSize) -> str:
        try:
            size = int(str(command.raw).strip())
        except ValueError:
            size = self.state.page_size
        self.state.page_size = max(1, size)
        self.state.page_index = 0
        return f"Page size {self.state.page_size}"

    # Helpers ---------------------------------------------------------------

    @staticmethod
    def _tri_state_slot(slot: str) -> str:
        if slot not in TRI_STATE_SLOTS:
            raise ValueError(f"unknown tri-state slot: {slot}")
        return slot

    def _update_filters(self, filters: FilterSet) -> None:
        self.state.filters = filters
        self.state.page_index = 0

    def _show_page(self, page_index: int) -> str:
        self.state.page_index = page_index
        self.state.clamp_page(len(self.view))
        start, end = self.state.page_bounds(len(self.view))
        if self.selected_index is None or not start <= self.selected_index < end:
            self._select(start if start < end else None)
        return ""


__all__ = ["SLOT_LABELS", "SessionController", "SessionPhase"]
