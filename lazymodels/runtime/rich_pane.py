"""Full-screen list/detail browser driven by single keypresses.

Each decoded key becomes one command for the session controller, which
re-renders synchronously through the renderer attached in ``open``. The only
state kept here is in-progress input: the bottom-line text prompt and the
provider/modality picker overlay.
"""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Callable
from dataclasses import dataclass, field

from ..ansi import clip_ansi_line, fit_ansi_cell, selected_with_ansi
from ..commands import (
    ClearFilters,
    Command,
    CopySelected,
    CycleSort,
    CycleTriState,
    MoveSelection,
    Quit,
    SelectIndex,
    SetBound,
    SetModalities,
    SetProvider,
    SetSearch,
    ToggleHelp,
)
from ..errors import PresentationUnavailable
from ..render.cells import fmt_number, paint
from ..render.detail import detail_lines
from ..render.help import RICH_PANE_KEYS, filter_summary, key_legend
from ..session import SessionController
from ..ui_theme import GlyphSet, UITheme, resolve_glyphs, resolve_theme
from .config import SessionConfig
from .features import FULL_FEATURES, RenderFeatures
from .keys import KeyComboBinding, KeyComboRegistry, read_key
from .terminal import TerminalController

logger = logging.getLogger(__name__)

LIST_PANE_PERCENT = 0.35
MIN_LIST_WIDTH = 20
WHEEL_STEP = 3
ANY_PROVIDER = "Any"

BOUND_PROMPTS: dict[str, tuple[str, str]] = {
    "x": ("min_context", "Min context"),
    "i": ("max_input_cost", "Max input $"),
    "o": ("max_output_cost", "Max output $"),
}


@dataclass
class TextPrompt:
    """Bottom-line editor for a search term or numeric bound."""

    label: str
    slot: str
    text: str = ""

    def command(self) -> Command:
        if self.slot == "search":
            return SetSearch(self.text)
        return SetBound(self.slot, self.text)


@dataclass
class PickerColumn:
    title: str
    options: tuple[str, ...]
    cursor: int = 0
    checked: set[str] = field(default_factory=set)


@dataclass
class Picker:
    """Overlay with one single-choice column or two checklist columns."""

    kind: str
    columns: list[PickerColumn]
    focus: int = 0

    @property
    def active_column(self) -> PickerColumn:
        return self.columns[self.focus]


class RichPane:
    """Raw-mode alternate-screen adapter."""

    def __init__(
        self,
        controller: SessionController,
        features: RenderFeatures = FULL_FEATURES,
        config: SessionConfig | None = None,
        *,
        stdin_fd: int | None = None,
        stdout_fd: int | None = None,
        terminal_factory: Callable[..., TerminalController] = TerminalController,
        read_key: Callable[[int], str] = read_key,
        get_terminal_size: Callable[[tuple[int, int]], os.terminal_size] = shutil.get_terminal_size,
    ) -> None:
        self.controller = controller
        self.features = features
        self.config = config if config is not None else SessionConfig()
        self.theme: UITheme = resolve_theme(
            self.config.theme,
            no_color=self.config.no_color,
            extended_colors=features.extended_colors,
        )
        self.glyphs: GlyphSet = resolve_glyphs(features.unicode_glyphs)
        self.prompt: TextPrompt | None = None
        self.picker: Picker | None = None
        self.list_start = 0
        self._stdin_fd = stdin_fd
        self._stdout_fd = stdout_fd
        self._terminal_factory = terminal_factory
        self._read_key = read_key
        self._get_terminal_size = get_terminal_size
        self._terminal: TerminalController | None = None
        self._keys = self._build_key_registry()

    # Adapter protocol ------------------------------------------------------

    def open(self) -> None:
        """Switch the terminal to raw alternate-screen mode and draw once."""
        stdin_fd = self._stdin_fd if self._stdin_fd is not None else 0
        stdout_fd = self._stdout_fd if self._stdout_fd is not None else 1
        try:
            self._terminal = self._terminal_factory(stdin_fd, stdout_fd, mouse=self.features.mouse)
            self._terminal.enable_tui_mode()
            self.controller.attach_renderer(self.render)
            self.render(self.controller)
        except Exception as exc:
            # Drawing failures surface as anything from termios.error to RuntimeError.
            self.close()
            raise PresentationUnavailable(f"rich pane unavailable: {exc}") from exc

    def run(self) -> None:
        stdin_fd = self._stdin_fd if self._stdin_fd is not None else 0
        while self.controller.running:
            key = self._read_key(stdin_fd)
            if not key:
                # EOF on stdin
                self.controller.dispatch(Quit())
                break
            self.handle_key(key)

    def close(self) -> None:
        self.controller.attach_renderer(None)
        if self._terminal is not None:
            self._terminal.disable_tui_mode()
            self._terminal = None

    # Key handling ----------------------------------------------------------

    def _build_key_registry(self) -> KeyComboRegistry:
        def send(command: Command) -> Callable[[], bool]:
            return lambda: self._dispatch(command)

        return KeyComboRegistry().register_bindings(
            KeyComboBinding(("q", "CTRL_C"), send(Quit())),
            KeyComboBinding(("/",), lambda: self._open_prompt("Search", "search", self.controller.state.search_term)),
            KeyComboBinding(("p",), self._open_provider_picker),
            KeyComboBinding(("m",), self._open_modality_picker),
            KeyComboBinding(("t",), send(CycleTriState("tool"))),
            KeyComboBinding(("r",), send(CycleTriState("reasoning"))),
            KeyComboBinding(("w",), send(CycleTriState("weights"))),
            KeyComboBinding(("y",), send(CycleTriState("temperature"))),
            KeyComboBinding(("x",), lambda: self._open_bound_prompt("x")),
            KeyComboBinding(("i",), lambda: self._open_bound_prompt("i")),
            KeyComboBinding(("o",), lambda: self._open_bound_prompt("o")),
            KeyComboBinding(("s",), send(CycleSort())),
            KeyComboBinding(("c",), send(CopySelected())),
            KeyComboBinding(("C",), send(ClearFilters())),
            KeyComboBinding(("h", "?"), send(ToggleHelp())),
            KeyComboBinding(("j", "DOWN"), send(MoveSelection(1))),
            KeyComboBinding(("k", "UP"), send(MoveSelection(-1))),
            KeyComboBinding(("g", "HOME"), send(SelectIndex(0))),
            KeyComboBinding(("G", "END"), self._select_last),
            KeyComboBinding((" ", "PAGE_DOWN"), lambda: self._dispatch(MoveSelection(self._list_rows()))),
            KeyComboBinding(("b", "PAGE_UP"), lambda: self._dispatch(MoveSelection(-self._list_rows()))),
        )

    def handle_key(self, key: str) -> bool:
        """Route one key token; return whether it changed anything."""
        if self.prompt is not None:
            return self._handle_prompt_key(key)
        if self.picker is not None:
            return self._handle_picker_key(key)
        if key.startswith("MOUSE_WHEEL_"):
            delta = -WHEEL_STEP if key.startswith("MOUSE_WHEEL_UP") else WHEEL_STEP
            return self._dispatch(MoveSelection(delta))
        handled = self._keys.dispatch(key)
        return bool(handled)

    def _dispatch(self, command: Command) -> bool:
        self.controller.dispatch(command)
        return True

    def _select_last(self) -> bool:
        if not self.controller.view:
            return False
        return self._dispatch(SelectIndex(len(self.controller.view) - 1))

    def _open_prompt(self, label: str, slot: str, text: str) -> bool:
        self.prompt = TextPrompt(label, slot, text)
        self.render(self.controller)
        return True

    def _open_bound_prompt(self, key: str) -> bool:
        slot, label = BOUND_PROMPTS[key]
        current = getattr(self.controller.state.filters, slot)
        return self._open_prompt(label, slot, "" if current is None else fmt_number(current))

    def _handle_prompt_key(self, key: str) -> bool:
        prompt = self.prompt
        assert prompt is not None
        if key in {"ESC", "CTRL_C"}:
            self.prompt = None
        elif key == "ENTER":
            self.prompt = None
            self.controller.dispatch(prompt.command())
            return True
        elif key == "BACKSPACE":
            prompt.text = prompt.text[:-1]
        elif key == "CTRL_U":
            prompt.text = ""
        elif len(key) == 1 and key.isprintable():
            prompt.text += key
        else:
            return False
        self.render(self.controller)
        return True

    def _open_provider_picker(self) -> bool:
        options = (ANY_PROVIDER, *self.controller.providers)
        current = self.controller.state.filters.provider
        cursor = 0
        if current:
            for idx, name in enumerate(options):
                if name.casefold() == current.casefold():
                    cursor = idx
                    break
        self.picker = Picker("provider", [PickerColumn("Provider", options, cursor=cursor)])
        self.render(self.controller)
        return True

    def _open_modality_picker(self) -> bool:
        tags = self.controller.modalities
        filters = self.controller.state.filters
        self.picker = Picker(
            "modalities",
            [
                PickerColumn("Input", tags, checked=set(filters.modalities_in)),
                PickerColumn("Output", tags, checked=set(filters.modalities_out)),
            ],
        )
        self.render(self.controller)
        return True

    def _handle_picker_key(self, key: str) -> bool:
        picker = self.picker
        assert picker is not None
        column = picker.active_column
        if key in {"ESC", "q", "CTRL_C"}:
            self.picker = None
        elif key == "ENTER":
            self.picker = None
            self._apply_picker(picker)
            return True
        elif key in {"DOWN", "j"} and column.options:
            column.cursor = min(len(column.options) - 1, column.cursor + 1)
        elif key in {"UP", "k"}:
            column.cursor = max(0, column.cursor - 1)
        elif key == "TAB" and len(picker.columns) > 1:
            picker.focus = (picker.focus + 1) % len(picker.columns)
        elif key == " " and picker.kind == "modalities" and column.options:
            tag = column.options[column.cursor]
            if tag in column.checked:
                column.checked.discard(tag)
            else:
                column.checked.add(tag)
        else:
            return False
        self.render(self.controller)
        return True

    def _apply_picker(self, picker: Picker) -> None:
        if picker.kind == "provider":
            column = picker.columns[0]
            choice = column.options[column.cursor] if column.options else ANY_PROVIDER
            self.controller.dispatch(SetProvider(None if choice == ANY_PROVIDER else choice))
            return
        inputs, outputs = picker.columns
        self.controller.dispatch(SetModalities(frozenset(inputs.checked), frozenset(outputs.checked)))

    # Rendering -------------------------------------------------------------

    def _size(self) -> tuple[int, int]:
        term = self._get_terminal_size((80, 24))
        return max(20, term.columns), max(4, term.lines)

    def _footer_rows(self) -> int:
        rows = 1
        if self.controller.show_help:
            rows += 1
        if self.prompt is not None:
            rows += 1
        return rows

    def _list_rows(self) -> int:
        _, height = self._size()
        return max(1, height - self._footer_rows())

    def _scroll_to_selection(self, rows: int) -> None:
        selected = self.controller.selected_index
        if selected is None:
            self.list_start = 0
            return
        if selected < self.list_start:
            self.list_start = selected
        elif selected >= self.list_start + rows:
            self.list_start = selected - rows + 1
        self.list_start = max(0, min(self.list_start, max(0, len(self.controller.view) - rows)))

    def _list_line(self, index: int, width: int) -> str:
        entry = self.controller.view[index]
        theme = self.theme
        selected = index == self.controller.selected_index
        text = (
            f"{self.glyphs.arrow if selected else ' '} "
            f"{paint(entry.provider_name, theme.list_provider, theme)}"
            f"{paint(f' {self.glyphs.arrow} ', theme.list_separator, theme)}"
            f"{paint(entry.model_name, theme.list_model, theme)}"
        )
        cell = fit_ansi_cell(text, width)
        if selected:
            return selected_with_ansi(cell, theme.reverse)
        return cell

    def _picker_lines(self, picker: Picker, width: int, rows: int) -> list[str]:
        theme = self.theme
        lines: list[str] = []
        if picker.kind == "provider":
            lines.append(paint("Provider (Enter select, Esc cancel)", theme.label, theme))
        else:
            lines.append(paint("Modalities (Space toggle, Tab column, Enter apply, Esc cancel)", theme.label, theme))
        col_width = max(8, (width - 2) // len(picker.columns))
        body_rows = max(1, rows - 2)
        columns_text: list[list[str]] = []
        for col_idx, column in enumerate(picker.columns):
            focused = col_idx == picker.focus
            title = paint(column.title, theme.table_header if focused else theme.help_dim, theme)
            cells = [fit_ansi_cell(title, col_width)]
            start = max(0, column.cursor - body_rows + 1)
            for opt_idx in range(start, min(len(column.options), start + body_rows)):
                option = column.options[opt_idx]
                if picker.kind == "modalities":
                    mark = self.glyphs.checked if option in column.checked else self.glyphs.unchecked
                    option = f"{mark} {option}"
                pointer = self.glyphs.arrow if focused and opt_idx == column.cursor else " "
                cell = fit_ansi_cell(f"{pointer} {option}", col_width)
                if focused and opt_idx == column.cursor:
                    cell = selected_with_ansi(cell, theme.reverse)
                cells.append(cell)
            columns_text.append(cells)
        depth = max(len(cells) for cells in columns_text)
        for row in range(depth):
            parts = [cells[row] if row < len(cells) else " " * col_width for cells in columns_text]
            lines.append("  ".join(parts))
        return lines

    def build_frame(self, width: int, height: int) -> list[str]:
        """Compose every screen row for a ``width`` x ``height`` terminal."""
        controller = self.controller
        theme = self.theme
        footer_rows = self._footer_rows()
        content_rows = max(1, height - footer_rows)
        list_width = min(width - 2, max(MIN_LIST_WIDTH, int(width * LIST_PANE_PERCENT)))
        detail_width = max(1, width - list_width - 1)
        self._scroll_to_selection(content_rows)

        if self.picker is not None:
            right = self._picker_lines(self.picker, detail_width, content_rows)
        else:
            right = detail_lines(controller.selected_entry, detail_width, theme=theme, glyphs=self.glyphs)

        divider = paint(self.glyphs.vertical, theme.divider, theme)
        lines: list[str] = []
        for row in range(content_rows):
            idx = self.list_start + row
            if idx < len(controller.view):
                left = self._list_line(idx, list_width)
            elif row == 0 and not controller.view:
                left = fit_ansi_cell("No matches", list_width)
            else:
                left = " " * list_width
            detail = clip_ansi_line(right[row], detail_width) if row < len(right) else ""
            lines.append(f"{left}{divider}{detail}")

        summary = filter_summary(
            controller.state,
            len(controller.view),
            controller.total_entries,
            theme,
            controller.status_message,
        )
        lines.append(clip_ansi_line(summary, width))
        if controller.show_help:
            lines.append(clip_ansi_line(key_legend(RICH_PANE_KEYS, theme), width))
        if self.prompt is not None:
            prompt = f"{paint(self.prompt.label + ':', theme.prompt, theme)} {self.prompt.text}_"
            lines.append(clip_ansi_line(prompt, width))
        return lines

    def render(self, controller: SessionController | None = None) -> None:
        if self._terminal is None:
            return
        width, height = self._size()
        lines = self.build_frame(width, height)
        self._terminal.write("\033[H\033[J" + "\033[0m\r\n".join(lines) + "\033[0m")


__all__ = ["Picker", "PickerColumn", "RichPane", "TextPrompt"]
