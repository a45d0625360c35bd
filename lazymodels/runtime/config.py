"""Startup configuration: flags, environment, and the user config file.

Everything that changes terminal handling is resolved once here into a frozen
``SessionConfig`` (flag > environment > config file > default) and passed to
the capability guard. The JSON config file is read-only; session state is
never written back.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_config_dir

from ..query.state import DEFAULT_PAGE_SIZE

logger = logging.getLogger(__name__)

APP_NAME = "lazymodels"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

UI_ENV_VAR = "LAZYMODELS_UI"
KEEP_TERM_ENV_VAR = "LAZYMODELS_KEEP_TERM"
FORCE_SIMPLE_ENV_VAR = "LAZYMODELS_FORCE_SIMPLE"

UI_MODES: tuple[str, ...] = ("rich", "table", "auto")
DEFAULT_UI_MODE = "auto"


@dataclass(frozen=True)
class SessionConfig:
    """Resolved startup switches consumed by the capability guard and adapters."""

    ui_mode: str = DEFAULT_UI_MODE
    term: str = ""
    term_program: str = ""
    keep_terminal_identity: bool = False
    force_simple: bool = False
    no_color: bool = False
    theme: str | None = None
    page_size: int = DEFAULT_PAGE_SIZE


def load_config() -> dict[str, object]:
    """Load the user JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as exc:
        logger.warning("ignoring unreadable config %s: %s", CONFIG_PATH, exc)
        return {}
    return data if isinstance(data, dict) else {}


def _env_flag(environ: Mapping[str, str], name: str) -> bool:
    value = environ.get(name, "").strip().lower()
    return value not in {"", "0", "false", "no", "off"}


def _ui_mode_or_none(value: object, source: str) -> str | None:
    if not isinstance(value, str) or not value.strip():
        return None
    mode = value.strip().lower()
    if mode not in UI_MODES:
        logger.warning("ignoring unknown ui mode %r from %s", value, source)
        return None
    return mode


def resolve_ui_mode(
    flag: str | None,
    environ: Mapping[str, str],
    config: Mapping[str, object],
) -> str:
    """Pick the UI mode with precedence flag > environment > config file > auto."""
    for value, source in (
        (flag, "--ui"),
        (environ.get(UI_ENV_VAR), UI_ENV_VAR),
        (config.get("ui"), CONFIG_FILENAME),
    ):
        mode = _ui_mode_or_none(value, source)
        if mode is not None:
            return mode
    return DEFAULT_UI_MODE


def _coerce_page_size(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        return DEFAULT_PAGE_SIZE
    return value


def resolve_session_config(
    *,
    ui_flag: str | None = None,
    no_color: bool = False,
    theme_flag: str | None = None,
    environ: Mapping[str, str] | None = None,
    config: Mapping[str, object] | None = None,
) -> SessionConfig:
    """Merge flags, environment, and config file into a ``SessionConfig``."""
    env = os.environ if environ is None else environ
    data = load_config() if config is None else config
    theme = theme_flag if theme_flag else data.get("theme")
    return SessionConfig(
        ui_mode=resolve_ui_mode(ui_flag, env, data),
        term=env.get("TERM", ""),
        term_program=env.get("TERM_PROGRAM", ""),
        keep_terminal_identity=_env_flag(env, KEEP_TERM_ENV_VAR),
        force_simple=_env_flag(env, FORCE_SIMPLE_ENV_VAR),
        no_color=no_color or "NO_COLOR" in env,
        theme=theme if isinstance(theme, str) else None,
        page_size=_coerce_page_size(data.get("page_size")),
    )


__all__ = [
    "APP_NAME",
    "CONFIG_PATH",
    "FORCE_SIMPLE_ENV_VAR",
    "KEEP_TERM_ENV_VAR",
    "SessionConfig",
    "UI_ENV_VAR",
    "UI_MODES",
    "load_config",
    "resolve_session_config",
    "resolve_ui_mode",
]
