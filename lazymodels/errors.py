"""Exception types shared by the catalogue, session, and presentation layers."""

from __future__ import annotations


class LazyModelsError(Exception):
    """Base class for all lazymodels errors."""


class SourceUnavailable(LazyModelsError):
    """The catalogue could not be fetched or decoded. Fatal to the session."""


class PresentationUnavailable(LazyModelsError):
    """A presentation tier could not be constructed or kept running."""


class TransientActionFailure(LazyModelsError):
    """A side action (clipboard write) failed; the session continues."""


class InvalidUserInput(LazyModelsError, ValueError):
    """User-typed text could not be interpreted for the requested slot."""


__all__ = [
    "LazyModelsError",
    "SourceUnavailable",
    "PresentationUnavailable",
    "TransientActionFailure",
    "InvalidUserInput",
]
