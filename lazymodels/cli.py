"""Command-line front door for lazymodels.

Parses CLI options, fetches the catalogue, and either prints a one-shot
listing (JSON, compact, or table) or starts the interactive session.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from collections.abc import Sequence

from .catalogue import API_URL, DEFAULT_FETCH_TIMEOUT_SECONDS, CatalogueStore, fetch_catalogue
from .errors import PresentationUnavailable, SourceUnavailable
from .query.engine import derive
from .query.sorting import CLI_SORT_FIELDS, SortMode
from .query.state import FilterSet, QueryState, TriState
from .render.table import dump_json, format_compact, render_table
from .runtime.config import UI_MODES, load_config, resolve_session_config, resolve_ui_mode
from .ui_theme import available_theme_names, resolve_theme

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def _positive_float(value: str) -> float:
    """argparse type for positive float values."""
    try:
        parsed = float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid number: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be > 0")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lazymodels",
        description="Browse the models.dev AI model catalogue in the terminal.",
    )
    parser.add_argument("--search", default=None, help="Fuzzy search over model name and id.")
    parser.add_argument("--provider", default=None, help="Only models from this provider (name or id).")
    parser.add_argument("--tool", action="store_true", help="Only models that support tool calling.")
    parser.add_argument("--reasoning", action="store_true", help="Only models that support reasoning.")
    parser.add_argument("--sort", choices=sorted(CLI_SORT_FIELDS), default=None, help="Sort rows.")
    output = parser.add_mutually_exclusive_group()
    output.add_argument("--json", action="store_true", help="Print matching models as JSON.")
    output.add_argument("--compact", action="store_true", help="Print provider:name:id per line.")
    parser.add_argument("--ui", choices=UI_MODES, default=None, help="Interactive interface (default: auto).")
    parser.add_argument("--no-color", action="store_true", help="Disable color output even on TTY.")
    parser.add_argument("--style", default="monokai", help="Pygments style name for --json output.")
    parser.add_argument(
        "--theme",
        default=None,
        help=f"UI theme name ({', '.join(available_theme_names())}).",
    )
    parser.add_argument("--url", default=API_URL, help="Catalogue URL.")
    parser.add_argument(
        "--timeout",
        type=_positive_float,
        default=DEFAULT_FETCH_TIMEOUT_SECONDS,
        help="Fetch timeout in seconds.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output to stderr.")
    return parser


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )
    # Silence httpx and its transport library
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def has_query_flags(args: argparse.Namespace) -> bool:
    return bool(args.search or args.provider or args.tool or args.reasoning or args.sort)


def wants_interactive(args: argparse.Namespace, ui_mode: str | None = None) -> bool:
    """An explicit rich or table mode always browses; otherwise only a bare invocation does.

    ``ui_mode`` is the resolved mode (flag, environment, config file); it
    defaults to the ``--ui`` flag alone.
    """
    if (ui_mode if ui_mode is not None else args.ui) in {"rich", "table"}:
        return True
    return not (args.json or args.compact or has_query_flags(args))


def seed_state(args: argparse.Namespace, page_size: int | None = None) -> QueryState:
    """Translate query flags into the starting ``QueryState``."""
    filters = FilterSet(
        provider=args.provider or None,
        tool=TriState.YES if args.tool else TriState.ANY,
        reasoning=TriState.YES if args.reasoning else TriState.ANY,
    )
    state = QueryState(
        search_term=(args.search or "").strip(),
        filters=filters,
        sort_mode=CLI_SORT_FIELDS[args.sort] if args.sort else SortMode.DEFAULT,
    )
    if page_size is not None:
        state.page_size = page_size
    return state


def _color_enabled(args: argparse.Namespace) -> bool:
    return not args.no_color and "NO_COLOR" not in os.environ and sys.stdout.isatty()


def print_listing(args: argparse.Namespace, store: CatalogueStore) -> None:
    """Print the full derived view in the requested output format."""
    view = derive(store, seed_state(args), limit=None)
    color = _color_enabled(args)
    if args.json:
        sys.stdout.write(dump_json(view, color=color, style=args.style))
        return
    if args.compact:
        lines = format_compact(view)
    else:
        theme = resolve_theme(args.theme, no_color=not color)
        lines = render_table(view.entries, theme=theme)
    if lines:
        sys.stdout.write("\n".join(lines) + "\n")


def main(argv: Sequence[str] | None = None) -> int:
    """Parse CLI arguments, fetch the catalogue, and list or browse it.

    Returns the process exit status: 0 on success, 1 when the catalogue
    cannot be loaded or no presentation tier could run.
    """
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    def loader() -> CatalogueStore:
        return fetch_catalogue(args.url, timeout=args.timeout)

    config_data = load_config()
    ui_mode = resolve_ui_mode(args.ui, os.environ, config_data)

    try:
        if not wants_interactive(args, ui_mode):
            print_listing(args, loader())
            return 0

        from .runtime import run_session

        config = resolve_session_config(
            ui_flag=args.ui,
            no_color=args.no_color,
            theme_flag=args.theme,
            config=config_data,
        )
        tier = run_session(config, loader, seed_state(args, config.page_size))
        logger.debug("session ended in %s", tier.value)
        return 0
    except SourceUnavailable as exc:
        sys.stderr.write(f"Failed to load catalogue: {exc}\n")
        return 1
    except PresentationUnavailable as exc:
        sys.stderr.write(f"No usable terminal interface: {exc}\n")
        return 1
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
