"""Tests for the full-screen adapter: key routing, overlays, and frames.

A fake terminal stands in for raw mode so frames can be inspected.
"""

from __future__ import annotations

import os
import termios
import unittest

from catalogue_fixtures import MODEL_A, MODEL_B, MODEL_C, abc_store, rich_store
from lazymodels.ansi import display_width, strip_ansi
from lazymodels.errors import PresentationUnavailable
from lazymodels.query.sorting import SortMode
from lazymodels.query.state import FilterSet, TriState
from lazymodels.runtime.config import SessionConfig
from lazymodels.runtime.features import REDUCED_FEATURES
from lazymodels.runtime.rich_pane import RichPane
from lazymodels.session import SessionController


class FakeTerminal:
    def __init__(self, stdin_fd: int, stdout_fd: int, *, mouse: bool = True) -> None:
        self.mouse = mouse
        self.writes: list[str] = []
        self.enabled = False
        self.disabled = 0

    def enable_tui_mode(self) -> None:
        self.enabled = True

    def disable_tui_mode(self) -> None:
        self.disabled += 1

    def write(self, text: str) -> None:
        self.writes.append(text)


class BrokenDrawTerminal(FakeTerminal):
    def write(self, text: str) -> None:
        raise RuntimeError("draw failed")


def _size(columns: int = 100, lines: int = 20):
    return lambda fallback: os.terminal_size((columns, lines))


class RichPaneTestCase(unittest.TestCase):
    def make_pane(self, store=None, keys=(), **kwargs) -> RichPane:
        self.controller = SessionController()
        self.controller.start(lambda: store if store is not None else abc_store())
        self.terminals: list[FakeTerminal] = []
        pending = list(keys)

        def factory(*args, **factory_kwargs) -> FakeTerminal:
            terminal = FakeTerminal(*args, **factory_kwargs)
            self.terminals.append(terminal)
            return terminal

        def read_key(fd: int) -> str:
            return pending.pop(0) if pending else ""

        kwargs.setdefault("config", SessionConfig(no_color=True))
        pane = RichPane(
            self.controller,
            terminal_factory=factory,
            read_key=read_key,
            get_terminal_size=_size(),
            **kwargs,
        )
        pane.open()
        return pane

    def frame(self, pane: RichPane) -> list[str]:
        return [strip_ansi(line) for line in pane.build_frame(100, 20)]


class LifecycleTests(RichPaneTestCase):
    def test_open_enters_tui_mode_and_draws(self) -> None:
        pane = self.make_pane()
        terminal = self.terminals[0]
        self.assertTrue(terminal.enabled)
        self.assertTrue(terminal.mouse)
        self.assertTrue(terminal.writes[0].startswith("\033[H\033[J"))
        pane.close()
        pane.close()
        self.assertEqual(terminal.disabled, 1)

    def test_reduced_features_disable_mouse(self) -> None:
        self.make_pane(features=REDUCED_FEATURES)
        self.assertFalse(self.terminals[0].mouse)

    def test_open_failure_becomes_presentation_unavailable(self) -> None:
        controller = SessionController()
        controller.start(abc_store)

        def broken(*args, **kwargs):
            raise termios.error(25, "Inappropriate ioctl for device")

        pane = RichPane(controller, terminal_factory=broken)
        with self.assertRaises(PresentationUnavailable):
            pane.open()

    def test_drawing_failure_restores_terminal(self) -> None:
        controller = SessionController()
        controller.start(abc_store)
        terminals: list[BrokenDrawTerminal] = []

        def factory(*args, **kwargs) -> BrokenDrawTerminal:
            terminals.append(BrokenDrawTerminal(*args, **kwargs))
            return terminals[-1]

        pane = RichPane(controller, terminal_factory=factory, get_terminal_size=_size())
        with self.assertRaises(PresentationUnavailable):
            pane.open()
        self.assertTrue(terminals[0].enabled)
        self.assertEqual(terminals[0].disabled, 1)

    def test_run_quits_on_q(self) -> None:
        pane = self.make_pane(keys=["j", "q"])
        pane.run()
        self.assertFalse(self.controller.running)
        self.assertEqual(self.controller.selected_entry, MODEL_B)

    def test_run_quits_on_eof(self) -> None:
        pane = self.make_pane(keys=[])
        pane.run()
        self.assertFalse(self.controller.running)

    def test_each_command_redraws(self) -> None:
        pane = self.make_pane()
        before = len(self.terminals[0].writes)
        pane.handle_key("j")
        pane.handle_key("s")
        self.assertEqual(len(self.terminals[0].writes), before + 2)


class KeyBindingTests(RichPaneTestCase):
    def test_tri_state_keys_cycle_filters(self) -> None:
        pane = self.make_pane(rich_store())
        pane.handle_key("t")
        pane.handle_key("r")
        pane.handle_key("r")
        pane.handle_key("w")
        pane.handle_key("y")
        filters = self.controller.state.filters
        self.assertIs(filters.tool, TriState.YES)
        self.assertIs(filters.reasoning, TriState.NO)
        self.assertIs(filters.weights, TriState.YES)
        self.assertIs(filters.temperature, TriState.YES)

    def test_sort_key_cycles_minimal_modes(self) -> None:
        pane = self.make_pane()
        pane.handle_key("s")
        pane.handle_key("s")
        self.assertIs(self.controller.state.sort_mode, SortMode.INPUT_COST_ASC)

    def test_navigation_keys(self) -> None:
        pane = self.make_pane()
        pane.handle_key("G")
        self.assertEqual(self.controller.selected_entry, MODEL_C)
        pane.handle_key("k")
        self.assertEqual(self.controller.selected_entry, MODEL_B)
        pane.handle_key("g")
        self.assertEqual(self.controller.selected_entry, MODEL_A)
        pane.handle_key("MOUSE_WHEEL_DOWN:5:5")
        self.assertEqual(self.controller.selected_entry, MODEL_C)

    def test_help_toggle_and_clear(self) -> None:
        pane = self.make_pane()
        pane.handle_key("t")
        pane.handle_key("h")
        self.assertFalse(self.controller.show_help)
        pane.handle_key("C")
        self.assertEqual(self.controller.state.filters, FilterSet())

    def test_unbound_key_is_ignored(self) -> None:
        pane = self.make_pane()
        self.assertFalse(pane.handle_key("Z"))
        self.assertTrue(self.controller.running)


class PromptTests(RichPaneTestCase):
    def test_search_prompt_applies_on_enter(self) -> None:
        pane = self.make_pane()
        for key in ["/", "c", "h", "a", "r", "BACKSPACE", "r"]:
            pane.handle_key(key)
        self.assertEqual(self.controller.state.search_term, "")
        self.assertIn("Search: char_", self.frame(pane)[-1])
        pane.handle_key("ENTER")
        self.assertIsNone(pane.prompt)
        self.assertEqual(self.controller.state.search_term, "char")
        self.assertEqual(list(self.controller.view), [MODEL_C])

    def test_prompt_swallows_command_keys_and_escape_cancels(self) -> None:
        pane = self.make_pane()
        pane.handle_key("/")
        pane.handle_key("q")
        self.assertTrue(self.controller.running)
        pane.handle_key("ESC")
        self.assertIsNone(pane.prompt)
        self.assertEqual(self.controller.state.search_term, "")

    def test_bound_prompt_prefills_and_invalid_value_clears(self) -> None:
        pane = self.make_pane()
        for key in ["i", "3", "ENTER"]:
            pane.handle_key(key)
        self.assertEqual(self.controller.state.filters.max_input_cost, 3.0)
        pane.handle_key("i")
        self.assertEqual(pane.prompt.text, "3")
        for key in ["CTRL_U", "x", "ENTER"]:
            pane.handle_key(key)
        self.assertIsNone(self.controller.state.filters.max_input_cost)
        self.assertIn("invalid number", self.controller.status_message)


class PickerTests(RichPaneTestCase):
    def test_provider_picker_selects_with_enter(self) -> None:
        pane = self.make_pane()
        pane.handle_key("p")
        self.assertEqual(pane.picker.columns[0].options, ("Any", "Acme", "Zeta"))
        pane.handle_key("DOWN")
        pane.handle_key("DOWN")
        pane.handle_key("ENTER")
        self.assertIsNone(pane.picker)
        self.assertEqual(self.controller.state.filters.provider, "Zeta")
        self.assertEqual(list(self.controller.view), [MODEL_C])

    def test_provider_picker_any_clears(self) -> None:
        pane = self.make_pane()
        pane.handle_key("p")
        pane.handle_key("DOWN")
        pane.handle_key("ENTER")
        pane.handle_key("p")
        self.assertEqual(pane.picker.columns[0].cursor, 1)
        pane.handle_key("UP")
        pane.handle_key("ENTER")
        self.assertIsNone(self.controller.state.filters.provider)

    def test_modality_checklists(self) -> None:
        pane = self.make_pane(rich_store())
        pane.handle_key("m")
        options = pane.picker.columns[0].options
        self.assertEqual(options, ("image", "pdf", "text"))
        pane.handle_key(" ")
        pane.handle_key("TAB")
        pane.handle_key("DOWN")
        pane.handle_key("DOWN")
        pane.handle_key(" ")
        frames_before = len(self.terminals[0].writes)
        pane.handle_key("ENTER")
        self.assertEqual(len(self.terminals[0].writes), frames_before + 1)
        filters = self.controller.state.filters
        self.assertEqual(filters.modalities_in, frozenset({"image"}))
        self.assertEqual(filters.modalities_out, frozenset({"text"}))
        self.assertEqual([item.model_id for item in self.controller.view], ["gpt-4o", "claude-sonnet"])

    def test_picker_escape_leaves_filters_alone(self) -> None:
        pane = self.make_pane(rich_store())
        pane.handle_key("m")
        pane.handle_key(" ")
        pane.handle_key("ESC")
        self.assertEqual(self.controller.state.filters, FilterSet())


class FrameTests(RichPaneTestCase):
    def test_frame_fills_terminal_and_shows_selection_detail(self) -> None:
        pane = self.make_pane()
        lines = pane.build_frame(100, 20)
        self.assertEqual(len(lines), 20)
        self.assertTrue(all(display_width(line) <= 100 for line in lines))
        plain = [strip_ansi(line) for line in lines]
        self.assertTrue(plain[0].startswith("› Acme › Alpha"))
        self.assertIn("Acme › Alpha", plain[0].split("│", 1)[1])
        self.assertIn("Shown: 3/3", plain[-2])

    def test_empty_view_says_so(self) -> None:
        pane = self.make_pane()
        for key in ["/", "z", "z", "z", "ENTER"]:
            pane.handle_key(key)
        plain = self.frame(pane)
        self.assertTrue(plain[0].startswith("No matches"))
        self.assertIn("No selection", plain[0])

    def test_ascii_glyphs_under_reduced_features(self) -> None:
        pane = self.make_pane(features=REDUCED_FEATURES)
        plain = self.frame(pane)
        self.assertIn("|", plain[0])
        self.assertNotIn("│", "".join(plain))
        self.assertEqual(pane.glyphs.arrow, ">")


if __name__ == "__main__":
    unittest.main()
