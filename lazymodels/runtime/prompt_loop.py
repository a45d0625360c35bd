"""Turn-based table browser on prompt_toolkit.

Each turn clears the screen, prints the filter summary, one page of the view
and the action legend, then reads one command line. Lines are parsed into
command values for the session controller; missing arguments are asked for
with a follow-up prompt.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from prompt_toolkit import PromptSession, print_formatted_text
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.formatted_text import ANSI
from prompt_toolkit.shortcuts import clear

from ..commands import (
    ClearFilters,
    Command,
    CopySelected,
    GotoPage,
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
from ..errors import InvalidUserInput, PresentationUnavailable
from ..query.sorting import EXTENDED_SORT_MODES, SortMode, sort_mode_from_label
from ..query.state import parse_tags, parse_tri_state
from ..render.cells import fmt_number, paint
from ..render.detail import detail_lines
from ..render.help import PROMPT_LOOP_ACTIONS, filter_summary, key_legend
from ..render.table import render_table
from ..search.fuzzy import fuzzy_match_labels
from ..session import SessionController
from ..ui_theme import resolve_glyphs, resolve_theme
from .config import SessionConfig
from .features import FULL_FEATURES, RenderFeatures

logger = logging.getLogger(__name__)

DETAIL_WIDTH = 100
TRI_STATE_CHOICES = ["any", "y", "n"]
WEIGHTS_CHOICES = ["any", "open", "closed"]

TRI_STATE_COMMANDS: dict[str, tuple[str, str]] = {
    "t": ("tool", "Tool calling"),
    "tool": ("tool", "Tool calling"),
    "r": ("reasoning", "Reasoning"),
    "reason": ("reasoning", "Reasoning"),
    "w": ("weights", "Open weights"),
    "weights": ("weights", "Open weights"),
    "temp": ("temperature", "Temperature"),
}

BOUND_COMMANDS: dict[str, tuple[str, str]] = {
    "ctx": ("min_context", "Min context"),
    "x": ("min_context", "Min context"),
    "in": ("max_input_cost", "Max input $ per 1M"),
    "out": ("max_output_cost", "Max output $ per 1M"),
}

QUIT_WORDS = {"q", "quit", "exit"}


class PromptLoop:
    """Line-oriented adapter; one typed command per turn."""

    def __init__(
        self,
        controller: SessionController,
        features: RenderFeatures = FULL_FEATURES,
        config: SessionConfig | None = None,
        *,
        session_factory: Callable[[], PromptSession] = PromptSession,
        output: Callable[..., None] = print_formatted_text,
        clear_screen: Callable[[], None] = clear,
    ) -> None:
        self.controller = controller
        self.features = features
        self.config = config if config is not None else SessionConfig()
        self.theme = resolve_theme(
            self.config.theme,
            no_color=self.config.no_color,
            extended_colors=features.extended_colors,
        )
        self.glyphs = resolve_glyphs(features.unicode_glyphs)
        self.notice = ""
        self._session_factory = session_factory
        self._output = output
        self._clear_screen = clear_screen
        self._session: PromptSession | None = None

    # Adapter protocol ------------------------------------------------------

    def open(self) -> None:
        try:
            self._session = self._session_factory()
        except Exception as exc:
            # prompt_toolkit reports missing consoles with platform-specific errors.
            raise PresentationUnavailable(f"prompt loop unavailable: {exc}") from exc

    def run(self) -> None:
        while self.controller.running:
            self.draw()
            try:
                line = self.ask("> ")
            except (EOFError, KeyboardInterrupt):
                self.controller.dispatch(Quit())
                break
            self.execute(line)

    def close(self) -> None:
        self._session = None

    # Output ----------------------------------------------------------------

    def _print(self, text: str = "") -> None:
        self._output(ANSI(text))

    def ask(self, message: str, default: str = "", choices: list[str] | None = None) -> str:
        if self._session is None:
            raise PresentationUnavailable("prompt loop is not open")
        completer = WordCompleter(choices, ignore_case=True) if choices else None
        return self._session.prompt(message, default=default, completer=completer)

    def draw(self) -> None:
        """Print one full turn: summary, current page, legend, status."""
        controller = self.controller
        theme = self.theme
        view_size = len(controller.view)
        self._clear_screen()
        self._print(filter_summary(controller.state, view_size, controller.total_entries, theme))
        self._print()

        page = controller.page_entries()
        if page:
            start = page[0][0]
            marked = None
            if controller.selected_index is not None and controller.selected_index >= start:
                marked = controller.selected_index - start
            for line in render_table(
                [entry for _, entry in page],
                theme=theme,
                glyphs=self.glyphs,
                row_numbers=start,
                marked_index=marked,
            ):
                self._print(line)
        else:
            self._print("No matches")

        page_no = controller.state.page_index + 1
        page_count = controller.state.page_count(view_size)
        footer = f"Page {page_no}/{page_count}  ({view_size} rows"
        if controller.view.truncated:
            footer += f" of {controller.view.matched} matched"
        self._print(footer + ")")
        if controller.show_help:
            self._print(key_legend(PROMPT_LOOP_ACTIONS, theme))
        message = self.notice or controller.status_message
        if message:
            self._print(paint(message, theme.status_value, theme))
        self.notice = ""

    # Commands --------------------------------------------------------------

    def execute(self, line: str) -> bool:
        """Run one typed command; return whether the session keeps going."""
        word, _, arg = line.strip().partition(" ")
        word = word.casefold()
        arg = arg.strip()
        if not word:
            return True
        if word in QUIT_WORDS:
            return self.controller.dispatch(Quit())
        try:
            command = self._parse(word, arg)
        except InvalidUserInput as exc:
            self.notice = str(exc)
            return True
        except (EOFError, KeyboardInterrupt):
            self.notice = "Cancelled"
            return True
        if command is None:
            return True
        if isinstance(command, list):
            for item in command:
                self.controller.dispatch(item)
            return self.controller.running
        return self.controller.dispatch(command)

    def _parse(self, word: str, arg: str) -> Command | list[Command] | None:
        state = self.controller.state
        if word in {"s", "search"}:
            term = arg if arg else self.ask("Search: ", default=state.search_term)
            return SetSearch(term)
        if word in {"p", "provider"}:
            return self._provider_command(arg)
        if word in TRI_STATE_COMMANDS:
            slot, label = TRI_STATE_COMMANDS[word]
            choices = WEIGHTS_CHOICES if slot == "weights" else TRI_STATE_CHOICES
            answer = arg if arg else self.ask(f"{label} ({'/'.join(choices)}): ", choices=choices)
            return SetTriState(slot, parse_tri_state(answer))
        if word in BOUND_COMMANDS:
            slot, label = BOUND_COMMANDS[word]
            if arg:
                return SetBound(slot, arg)
            current = getattr(state.filters, slot)
            default = "" if current is None else fmt_number(current)
            return SetBound(slot, self.ask(f"{label} (blank clears): ", default=default))
        if word in {"m", "mod", "modalities"}:
            return self._modality_command()
        if word in {"o", "sort"}:
            return self._sort_command(arg)
        if word == "ps":
            return SetPageSize(arg if arg else self.ask("Page size: ", default=str(state.page_size)))
        if word in {"n", "next"}:
            return NextPage()
        if word in {"b", "back", "prev"}:
            return PrevPage()
        if word in {"g", "go"}:
            return GotoPage(arg if arg else self.ask("Page: "))
        if word in {"d", "detail"}:
            self._show_detail(arg)
            return None
        if word in {"c", "copy"}:
            if not arg:
                return CopySelected()
            return [SelectIndex(self._row_index(arg)), CopySelected()]
        if word == "clear":
            return ClearFilters()
        if word in {"h", "help"}:
            return ToggleHelp()
        raise InvalidUserInput(f"Unknown command: {word}")

    def _row_index(self, raw: str) -> int:
        try:
            number = int(raw)
        except ValueError:
            raise InvalidUserInput(f"Not a row number: {raw!r}") from None
        if not 1 <= number <= len(self.controller.view):
            raise InvalidUserInput(f"No row {number}")
        return number - 1

    def resolve_provider(self, text: str) -> str | None:
        """Map typed text to a provider display name (``None`` means any)."""
        text = text.strip()
        if not text or text.casefold() == "any":
            return None
        providers = list(self.controller.providers)
        for name in providers:
            if name.casefold() == text.casefold():
                return name
        matches = fuzzy_match_labels(text, providers, limit=1)
        if not matches:
            raise InvalidUserInput(f"No provider matches {text!r}")
        return matches[0][1]

    def _provider_command(self, arg: str) -> Command:
        current = self.controller.state.filters.provider or ""
        choices = ["any", *self.controller.providers]
        text = arg if arg else self.ask("Provider (any clears): ", default=current, choices=choices)
        return SetProvider(self.resolve_provider(text))

    def _modality_command(self) -> Command:
        filters = self.controller.state.filters
        choices = list(self.controller.modalities)
        inputs = self.ask(
            "Input modalities (comma separated, blank for any): ",
            default=",".join(sorted(filters.modalities_in)),
            choices=choices,
        )
        outputs = self.ask(
            "Output modalities (comma separated, blank for any): ",
            default=",".join(sorted(filters.modalities_out)),
            choices=choices,
        )
        return SetModalities(parse_tags(inputs), parse_tags(outputs))

    def _sort_command(self, arg: str) -> Command:
        if not arg:
            for number, mode in enumerate(EXTENDED_SORT_MODES, start=1):
                marker = "*" if mode is self.controller.state.sort_mode else " "
                self._print(f" {marker}{number:>3}  {mode.label}")
            arg = self.ask("Sort by (number or name): ", choices=[mode.label for mode in EXTENDED_SORT_MODES])
        return SetSort(self._sort_mode(arg))

    @staticmethod
    def _sort_mode(text: str) -> SortMode:
        text = text.strip()
        if text.isdigit():
            number = int(text)
            if 1 <= number <= len(EXTENDED_SORT_MODES):
                return EXTENDED_SORT_MODES[number - 1]
        mode = sort_mode_from_label(text)
        if mode is None:
            raise InvalidUserInput(f"Unknown sort: {text!r}")
        return mode

    def _show_detail(self, arg: str) -> None:
        if arg:
            self.controller.dispatch(SelectIndex(self._row_index(arg)))
        self._clear_screen()
        for line in detail_lines(self.controller.selected_entry, DETAIL_WIDTH, theme=self.theme, glyphs=self.glyphs):
            self._print(line)
        self._print()
        try:
            self.ask("Press Enter to continue")
        except (EOFError, KeyboardInterrupt):
            self.controller.dispatch(Quit())


__all__ = ["PromptLoop"]
