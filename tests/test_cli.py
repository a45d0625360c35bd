"""Tests for CLI parsing, one-shot listings, and exit statuses."""

from __future__ import annotations

import io
import json
import os
import unittest
from unittest import mock

from catalogue_fixtures import abc_store
from lazymodels import cli
from lazymodels.errors import PresentationUnavailable, SourceUnavailable
from lazymodels.query.sorting import SortMode
from lazymodels.query.state import TriState
from lazymodels.runtime.config import UI_ENV_VAR
from lazymodels.runtime.guard import PresentationTier


class ParserTests(unittest.TestCase):
    def test_query_flags_seed_state(self) -> None:
        args = cli.build_parser().parse_args(
            ["--search", "  gpt ", "--provider", "OpenAI", "--tool", "--sort", "output-cost"]
        )
        state = cli.seed_state(args, page_size=12)
        self.assertEqual(state.search_term, "gpt")
        self.assertEqual(state.filters.provider, "OpenAI")
        self.assertIs(state.filters.tool, TriState.YES)
        self.assertIs(state.filters.reasoning, TriState.ANY)
        self.assertIs(state.sort_mode, SortMode.OUTPUT_COST_ASC)
        self.assertEqual(state.page_size, 12)

    def test_json_and_compact_are_exclusive(self) -> None:
        with mock.patch("sys.stderr", new_callable=io.StringIO), self.assertRaises(SystemExit):
            cli.build_parser().parse_args(["--json", "--compact"])

    def test_timeout_must_be_positive(self) -> None:
        with mock.patch("sys.stderr", new_callable=io.StringIO), self.assertRaises(SystemExit):
            cli.build_parser().parse_args(["--timeout", "0"])

    def test_interactive_selection(self) -> None:
        parse = cli.build_parser().parse_args
        self.assertTrue(cli.wants_interactive(parse([])))
        self.assertFalse(cli.wants_interactive(parse(["--json"])))
        self.assertFalse(cli.wants_interactive(parse(["--reasoning"])))
        self.assertTrue(cli.wants_interactive(parse(["--reasoning", "--ui", "table"])))
        self.assertFalse(cli.wants_interactive(parse(["--compact", "--ui", "auto"])))
        self.assertTrue(cli.wants_interactive(parse(["--search", "x"]), "table"))
        self.assertFalse(cli.wants_interactive(parse(["--search", "x"]), "auto"))


class MainTests(unittest.TestCase):
    def _main(self, argv, store=None, error=None, env=None, config=None):
        fetch = mock.Mock(return_value=store if store is not None else abc_store(), side_effect=error)
        with mock.patch.object(cli, "fetch_catalogue", fetch), mock.patch.object(
            cli, "load_config", return_value=dict(config or {})
        ), mock.patch.dict(os.environ, env or {}), mock.patch(
            "sys.stdout", new_callable=io.StringIO
        ) as stdout, mock.patch("sys.stderr", new_callable=io.StringIO) as stderr:
            if not env or UI_ENV_VAR not in env:
                os.environ.pop(UI_ENV_VAR, None)
            status = cli.main(argv)
        return status, stdout.getvalue(), stderr.getvalue(), fetch

    def test_compact_listing_honors_sort(self) -> None:
        status, out, _, _ = self._main(["--compact", "--sort", "input-cost"])
        self.assertEqual(status, 0)
        self.assertEqual(out.splitlines(), ["Acme:Alpha:a-1", "Zeta:Charlie:c-1", "Acme:Bravo:b-1"])

    def test_json_listing_is_plain_when_not_a_tty(self) -> None:
        status, out, _, _ = self._main(["--json", "--provider", "zeta"])
        self.assertEqual(status, 0)
        records = json.loads(out)
        self.assertEqual([record["id"] for record in records], ["c-1"])

    def test_query_flags_alone_print_a_table(self) -> None:
        status, out, _, _ = self._main(["--search", "alpha"])
        self.assertEqual(status, 0)
        self.assertIn("Alpha", out)
        self.assertNotIn("Charlie", out)

    def test_fetch_uses_url_and_timeout(self) -> None:
        _, _, _, fetch = self._main(["--compact", "--url", "http://example.test/api.json", "--timeout", "2.5"])
        fetch.assert_called_once_with("http://example.test/api.json", timeout=2.5)

    def test_source_failure_exits_one(self) -> None:
        status, out, err, _ = self._main(["--compact"], error=SourceUnavailable("network error: boom"))
        self.assertEqual(status, 1)
        self.assertEqual(out, "")
        self.assertIn("Failed to load catalogue: network error: boom", err)

    def test_interactive_path_runs_session(self) -> None:
        loaded: list[int] = []

        def browse(config, loader, state):
            loaded.append(len(loader()))
            return PresentationTier.PROMPT_LOOP

        run_session = mock.Mock(side_effect=browse)
        with mock.patch("lazymodels.runtime.run_session", run_session):
            status, _, _, fetch = self._main(["--ui", "table", "--tool"], config={"page_size": 7})
        self.assertEqual(status, 0)
        config, _, state = run_session.call_args.args
        self.assertEqual(config.ui_mode, "table")
        self.assertEqual(config.page_size, 7)
        self.assertEqual(state.page_size, 7)
        self.assertIs(state.filters.tool, TriState.YES)
        self.assertEqual(loaded, [3])
        fetch.assert_called_once()

    def test_ui_mode_from_environment_browses_with_query_flags(self) -> None:
        run_session = mock.Mock()
        with mock.patch("lazymodels.runtime.run_session", run_session):
            status, out, _, _ = self._main(["--search", "alpha"], env={UI_ENV_VAR: "table"})
        self.assertEqual(status, 0)
        self.assertEqual(out, "")
        config, _, state = run_session.call_args.args
        self.assertEqual(config.ui_mode, "table")
        self.assertEqual(state.search_term, "alpha")

    def test_ui_mode_from_config_file_browses_with_query_flags(self) -> None:
        run_session = mock.Mock()
        with mock.patch("lazymodels.runtime.run_session", run_session):
            self._main(["--tool"], config={"ui": "rich"})
        run_session.assert_called_once()

    def test_auto_mode_with_query_flags_prints_listing(self) -> None:
        run_session = mock.Mock()
        with mock.patch("lazymodels.runtime.run_session", run_session):
            _, out, _, _ = self._main(["--search", "alpha"], env={UI_ENV_VAR: "auto"})
        run_session.assert_not_called()
        self.assertIn("Alpha", out)

    def test_presentation_failure_exits_one(self) -> None:
        run_session = mock.Mock(side_effect=PresentationUnavailable("no presentation tier could run"))
        with mock.patch("lazymodels.runtime.run_session", run_session):
            status, _, err, _ = self._main([])
        self.assertEqual(status, 1)
        self.assertIn("No usable terminal interface", err)


if __name__ == "__main__":
    unittest.main()
