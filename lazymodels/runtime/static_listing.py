"""Last-resort tier: print one table of the first rows and stop."""

from __future__ import annotations

import sys
from collections.abc import Callable

from ..render.table import render_table
from ..session import SessionController
from ..ui_theme import resolve_glyphs, resolve_theme
from .config import SessionConfig
from .features import REDUCED_FEATURES, RenderFeatures

STATIC_ROW_LIMIT = 30


class StaticListing:
    """One-shot table of the view's head; terminates the session when run."""

    def __init__(
        self,
        controller: SessionController,
        features: RenderFeatures = REDUCED_FEATURES,
        config: SessionConfig | None = None,
        *,
        write: Callable[[str], object] | None = None,
    ) -> None:
        self.controller = controller
        self.features = features
        self.config = config if config is not None else SessionConfig()
        self._write = write if write is not None else sys.stdout.write

    def open(self) -> None:
        pass

    def lines(self) -> list[str]:
        view = self.controller.view
        theme = resolve_theme(self.config.theme, no_color=self.config.no_color, extended_colors=False)
        rows = [view[idx] for idx in range(min(STATIC_ROW_LIMIT, len(view)))]
        lines = render_table(rows, theme=theme, glyphs=resolve_glyphs(self.features.unicode_glyphs))
        if len(view) > len(rows):
            lines.append(f"... {len(view) - len(rows)} more rows; use --json or --compact for the full list")
        elif not rows:
            lines.append("No matches")
        return lines

    def run(self) -> None:
        self._write("\n".join(self.lines()) + "\n")
        self.controller.terminate()

    def close(self) -> None:
        pass


__all__ = ["STATIC_ROW_LIMIT", "StaticListing"]
