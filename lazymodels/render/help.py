"""Help bar, status summary, and command legends.

Rendering helpers here are presentation-only and side-effect free.
"""

from __future__ import annotations

from ..query.state import QueryState, summarize_filters
from ..ui_theme import PLAIN_THEME, UITheme
from .cells import paint

RICH_PANE_KEYS: tuple[tuple[str, str], ...] = (
    ("q", "quit"),
    ("/", "search"),
    ("p", "provider"),
    ("t", "tool"),
    ("r", "reasoning"),
    ("w", "weights"),
    ("y", "temp"),
    ("x", "ctx>="),
    ("i", "in$<="),
    ("o", "out$<="),
    ("m", "modalities"),
    ("s", "sort"),
    ("c", "copy id"),
    ("C", "clear"),
    ("h", "help"),
)

PROMPT_LOOP_ACTIONS: tuple[tuple[str, str], ...] = (
    ("s", "search"),
    ("p", "provider"),
    ("t", "tool"),
    ("r", "reason"),
    ("o", "sort"),
    ("w", "weights"),
    ("temp", "temperature"),
    ("ctx", "min context"),
    ("in", "max in$"),
    ("out", "max out$"),
    ("m", "modalities"),
    ("ps", "page size"),
    ("n", "next"),
    ("b", "back"),
    ("g", "go to page"),
    ("d N", "detail"),
    ("c [N]", "copy id"),
    ("clear", "reset filters"),
    ("h", "help"),
    ("q", "quit"),
)


def key_legend(bindings: tuple[tuple[str, str], ...], theme: UITheme = PLAIN_THEME) -> str:
    return "  ".join(
        f"{paint(key, theme.help_key, theme)} {paint(action, theme.help_dim, theme)}" for key, action in bindings
    )


def filter_summary(
    state: QueryState,
    shown: int,
    total: int,
    theme: UITheme = PLAIN_THEME,
    message: str = "",
) -> str:
    """One-line shown/total count, status message, and every filter slot.

    Counts and the message lead so clipping a narrow line drops filters first.
    """
    parts = [f"Shown: {paint(str(shown), theme.status_value, theme)}/{total}"]
    if message:
        parts.append(f"| {message} |")
    parts.extend(f"{label}: {paint(value, theme.status_value, theme)}" for label, value in summarize_filters(state))
    return "  ".join(parts)


__all__ = ["PROMPT_LOOP_ACTIONS", "RICH_PANE_KEYS", "filter_summary", "key_legend"]
