"""Interactive session bootstrap.

Loads the catalogue before any UI exists, then hands the ready controller to
the capability guard.
"""

from __future__ import annotations

from collections.abc import Callable

from ..catalogue import CatalogueStore
from ..query.state import QueryState
from ..session import SessionController
from .config import SessionConfig
from .guard import PresentationTier, TerminalCapabilityGuard


def run_session(
    config: SessionConfig,
    loader: Callable[[], CatalogueStore],
    state: QueryState | None = None,
    *,
    guard_factory: Callable[[SessionConfig], TerminalCapabilityGuard] = TerminalCapabilityGuard,
    controller_factory: Callable[[QueryState], SessionController] = SessionController,
) -> PresentationTier:
    """Fetch, then browse until quit; return the tier that served the session.

    ``SourceUnavailable`` from ``loader`` propagates before any terminal mode
    change. ``PresentationUnavailable`` propagates when every tier fails.
    """
    if state is None:
        state = QueryState(page_size=config.page_size)
    controller = controller_factory(state)
    controller.start(loader)
    return guard_factory(config).run(controller)


__all__ = ["run_session"]
