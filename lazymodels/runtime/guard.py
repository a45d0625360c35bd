"""Presentation tier selection and the fallback chain.

The guard decides before any UI exists which tier to start with and which
feature set to request, then walks RichPane -> PromptLoop -> StaticListing
until one adapter runs to completion. Steps never go back up the chain.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Mapping
from enum import Enum
from typing import Protocol

from ..errors import PresentationUnavailable
from ..session import SessionController
from .config import SessionConfig
from .features import FULL_FEATURES, REDUCED_FEATURES, RenderFeatures
from .prompt_loop import PromptLoop
from .rich_pane import RichPane
from .static_listing import StaticListing

logger = logging.getLogger(__name__)

HOSTILE_TERM_RE = re.compile(r"xterm-256color", re.IGNORECASE)
HOSTILE_TERM_PROGRAM_RE = re.compile(r"iterm", re.IGNORECASE)


class PresentationTier(Enum):
    RICH_PANE = "rich-pane"
    PROMPT_LOOP = "prompt-loop"
    STATIC_LISTING = "static-listing"


class PresentationAdapter(Protocol):
    def open(self) -> None: ...

    def run(self) -> None: ...

    def close(self) -> None: ...


AdapterFactory = Callable[[SessionController, RenderFeatures, SessionConfig], PresentationAdapter]

DEFAULT_FACTORIES: dict[PresentationTier, AdapterFactory] = {
    PresentationTier.RICH_PANE: RichPane,
    PresentationTier.PROMPT_LOOP: PromptLoop,
    PresentationTier.STATIC_LISTING: StaticListing,
}


def detect_hostile_terminal(config: SessionConfig) -> str | None:
    """Return why the terminal is known to mishandle the rich pane, if it is."""
    if config.force_simple:
        return "simple mode forced"
    if HOSTILE_TERM_RE.search(config.term):
        return f"TERM={config.term}"
    if HOSTILE_TERM_PROGRAM_RE.search(config.term_program):
        return f"TERM_PROGRAM={config.term_program}"
    return None


def initial_features(config: SessionConfig) -> RenderFeatures:
    reason = detect_hostile_terminal(config)
    if reason is None:
        return FULL_FEATURES
    if config.keep_terminal_identity and not config.force_simple:
        logger.debug("keeping full features despite %s", reason)
        return FULL_FEATURES
    logger.info("requesting reduced features: %s", reason)
    return REDUCED_FEATURES


def fallback_chain(ui_mode: str) -> tuple[PresentationTier, ...]:
    if ui_mode == "table":
        return (PresentationTier.PROMPT_LOOP, PresentationTier.STATIC_LISTING)
    return (PresentationTier.RICH_PANE, PresentationTier.PROMPT_LOOP, PresentationTier.STATIC_LISTING)


class TerminalCapabilityGuard:
    """Run the session through the first presentation tier that works."""

    def __init__(
        self,
        config: SessionConfig,
        *,
        factories: Mapping[PresentationTier, AdapterFactory] | None = None,
    ) -> None:
        self.config = config
        self.factories = dict(DEFAULT_FACTORIES if factories is None else factories)
        self.features = initial_features(config)
        self.attempts: list[tuple[PresentationTier, RenderFeatures]] = []

    def _open(self, tier: PresentationTier, controller: SessionController) -> PresentationAdapter | None:
        candidates = [self.features]
        if tier is PresentationTier.RICH_PANE and self.features != REDUCED_FEATURES:
            candidates.append(REDUCED_FEATURES)
        for features in candidates:
            # A downgrade sticks for every later tier.
            self.features = features
            self.attempts.append((tier, features))
            try:
                adapter = self.factories[tier](controller, features, self.config)
                adapter.open()
            except Exception as exc:
                logger.warning("%s failed to start: %s", tier.value, exc)
                continue
            return adapter
        return None

    def run(self, controller: SessionController) -> PresentationTier:
        """Run until the session terminates; return the tier that served it."""
        for tier in fallback_chain(self.config.ui_mode):
            if tier not in self.factories:
                continue
            adapter = self._open(tier, controller)
            if adapter is None:
                continue
            logger.info("presentation tier: %s", tier.value)
            try:
                adapter.run()
            except Exception as exc:
                logger.warning(
                    "%s failed while running: %s",
                    tier.value,
                    exc,
                    exc_info=logger.isEnabledFor(logging.DEBUG),
                )
                continue
            finally:
                adapter.close()
            return tier
        raise PresentationUnavailable("no presentation tier could run")


__all__ = [
    "DEFAULT_FACTORIES",
    "PresentationAdapter",
    "PresentationTier",
    "TerminalCapabilityGuard",
    "detect_hostile_terminal",
    "fallback_chain",
    "initial_features",
]
