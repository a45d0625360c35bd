"""Tests for the turn-based prompt adapter.

prompt_toolkit sessions are replaced by a scripted fake so each typed line
and follow-up answer is deterministic.
"""

from __future__ import annotations

import unittest
from unittest import mock

from catalogue_fixtures import MODEL_A, MODEL_B, MODEL_C, abc_store, entry, rich_store
from lazymodels.catalogue import CatalogueStore
from lazymodels.errors import PresentationUnavailable
from lazymodels.query.sorting import SortMode
from lazymodels.query.state import QueryState, TriState
from lazymodels.runtime.config import SessionConfig
from lazymodels.runtime.prompt_loop import PromptLoop
from lazymodels.session import SessionController


class ScriptedSession:
    def __init__(self, answers: list[str]) -> None:
        self.answers = list(answers)
        self.prompts: list[tuple[str, str]] = []

    def prompt(self, message: str, default: str = "", completer=None) -> str:
        self.prompts.append((message, default))
        if not self.answers:
            raise EOFError
        return self.answers.pop(0)


class PromptLoopTestCase(unittest.TestCase):
    def make_loop(self, answers=(), store=None, state=None, clipboard=None) -> PromptLoop:
        self.controller = SessionController(state, clipboard=clipboard or mock.Mock(return_value=True))
        self.controller.start(lambda: store if store is not None else abc_store())
        self.session = ScriptedSession(list(answers))
        self.printed: list[str] = []
        loop = PromptLoop(
            self.controller,
            config=SessionConfig(no_color=True),
            session_factory=lambda: self.session,
            output=lambda text: self.printed.append(text.value),
            clear_screen=lambda: None,
        )
        loop.open()
        return loop


class LifecycleTests(PromptLoopTestCase):
    def test_session_creation_failure_is_presentation_unavailable(self) -> None:
        controller = SessionController()
        controller.start(abc_store)

        def broken():
            raise OSError("no console")

        loop = PromptLoop(controller, session_factory=broken)
        with self.assertRaises(PresentationUnavailable):
            loop.open()

    def test_run_until_quit(self) -> None:
        loop = self.make_loop(["s char", "q"])
        loop.run()
        self.assertFalse(self.controller.running)
        self.assertEqual(self.controller.state.search_term, "char")
        self.assertEqual(list(self.controller.view), [MODEL_C])

    def test_end_of_input_quits(self) -> None:
        loop = self.make_loop([])
        loop.run()
        self.assertFalse(self.controller.running)

    def test_draw_prints_summary_table_and_legend(self) -> None:
        loop = self.make_loop()
        loop.draw()
        text = "\n".join(self.printed)
        self.assertTrue(self.printed[0].startswith("Shown: 3/3"))
        self.assertIn("Provider", text)
        self.assertIn("Alpha", text)
        self.assertIn("Page 1/1  (3 rows)", text)
        self.assertIn("clear reset filters", text)
        self.assertIn("Loaded", text)

    def test_blank_line_keeps_running(self) -> None:
        loop = self.make_loop()
        self.assertTrue(loop.execute("   "))
        self.assertTrue(self.controller.running)


class FilterCommandTests(PromptLoopTestCase):
    def test_provider_resolves_fuzzy_name(self) -> None:
        loop = self.make_loop()
        loop.execute("p zet")
        self.assertEqual(self.controller.state.filters.provider, "Zeta")

    def test_provider_prompt_any_clears(self) -> None:
        loop = self.make_loop(["any"])
        loop.execute("p Acme")
        loop.execute("p")
        self.assertEqual(self.session.prompts[0][1], "Acme")
        self.assertIsNone(self.controller.state.filters.provider)

    def test_unknown_provider_is_a_notice(self) -> None:
        loop = self.make_loop()
        loop.execute("p qqq")
        self.assertIsNone(self.controller.state.filters.provider)
        self.assertEqual(loop.notice, "No provider matches 'qqq'")

    def test_tri_state_commands(self) -> None:
        loop = self.make_loop(["y"], store=rich_store())
        loop.execute("t")
        loop.execute("w open")
        loop.execute("temp n")
        filters = self.controller.state.filters
        self.assertIs(filters.tool, TriState.YES)
        self.assertIs(filters.weights, TriState.YES)
        self.assertIs(filters.temperature, TriState.NO)
        self.assertEqual([item.model_id for item in self.controller.view], [])

    def test_bad_tri_state_answer_is_a_notice(self) -> None:
        loop = self.make_loop()
        loop.execute("r maybe")
        self.assertIs(self.controller.state.filters.reasoning, TriState.ANY)
        self.assertIn("maybe", loop.notice)

    def test_bound_commands(self) -> None:
        loop = self.make_loop(["3"])
        loop.execute("ctx 8000")
        self.assertEqual(list(self.controller.view), [MODEL_A, MODEL_B])
        loop.execute("in")
        self.assertEqual(list(self.controller.view), [MODEL_A])
        loop.execute("out oops")
        self.assertIn("invalid number", self.controller.status_message)

    def test_modalities_ask_for_both_directions(self) -> None:
        loop = self.make_loop(["image, text", ""], store=rich_store())
        loop.execute("m")
        self.assertEqual(self.controller.state.filters.modalities_in, frozenset({"image", "text"}))
        self.assertEqual(self.controller.state.filters.modalities_out, frozenset())
        self.assertEqual([item.model_id for item in self.controller.view], ["gpt-4o", "claude-sonnet"])

    def test_sort_by_number_or_label(self) -> None:
        loop = self.make_loop(["2"])
        loop.execute("o")
        self.assertIs(self.controller.state.sort_mode, SortMode.INPUT_COST_ASC)
        self.assertEqual(list(self.controller.view), [MODEL_A, MODEL_C, MODEL_B])
        loop.execute("o context desc")
        self.assertIs(self.controller.state.sort_mode, SortMode.CONTEXT_DESC)
        loop.execute("o 99")
        self.assertEqual(loop.notice, "Unknown sort: '99'")

    def test_clear_and_help(self) -> None:
        loop = self.make_loop()
        loop.execute("s alpha")
        loop.execute("clear")
        self.assertEqual(self.controller.state.search_term, "")
        loop.execute("h")
        self.assertFalse(self.controller.show_help)

    def test_unknown_command_is_a_notice(self) -> None:
        loop = self.make_loop()
        self.assertTrue(loop.execute("bogus"))
        self.assertEqual(loop.notice, "Unknown command: bogus")

    def test_cancelled_follow_up_prompt_keeps_session(self) -> None:
        loop = self.make_loop([])
        self.assertTrue(loop.execute("s"))
        self.assertEqual(loop.notice, "Cancelled")
        self.assertTrue(self.controller.running)


class RowCommandTests(PromptLoopTestCase):
    def test_copy_row_by_number(self) -> None:
        clipboard = mock.Mock(return_value=True)
        loop = self.make_loop(clipboard=clipboard)
        loop.execute("c 3")
        clipboard.assert_called_once_with("c-1")
        self.assertEqual(self.controller.status_message, "Copied c-1")

    def test_copy_missing_row(self) -> None:
        clipboard = mock.Mock(return_value=True)
        loop = self.make_loop(clipboard=clipboard)
        loop.execute("c 9")
        clipboard.assert_not_called()
        self.assertEqual(loop.notice, "No row 9")

    def test_detail_selects_row_and_waits(self) -> None:
        loop = self.make_loop([""])
        loop.execute("d 2")
        self.assertEqual(self.controller.selected_entry, MODEL_B)
        self.assertIn("Acme › Bravo", self.printed)
        self.assertEqual(self.session.prompts[-1][0], "Press Enter to continue")


class PagingCommandTests(PromptLoopTestCase):
    def setUp(self) -> None:
        self.store = CatalogueStore.from_entries(entry("Bulk", f"m-{idx:02d}") for idx in range(25))

    def test_paging_commands(self) -> None:
        loop = self.make_loop(store=self.store, state=QueryState(page_size=10))
        loop.execute("n")
        self.assertEqual(self.controller.state.page_index, 1)
        loop.execute("go 3")
        self.assertEqual(self.controller.state.page_index, 2)
        loop.execute("back")
        self.assertEqual(self.controller.state.page_index, 1)
        loop.execute("ps 5")
        self.assertEqual(self.controller.state.page_size, 5)
        self.assertEqual(self.controller.state.page_index, 0)

    def test_page_rows_are_numbered_from_view_position(self) -> None:
        loop = self.make_loop(store=self.store, state=QueryState(page_size=10))
        loop.execute("n")
        self.printed.clear()
        loop.draw()
        rows = [line for line in self.printed if line.startswith("11 ")]
        self.assertEqual(len(rows), 1)
        self.assertIn("Page 2/3  (25 rows)", self.printed)


if __name__ == "__main__":
    unittest.main()
