"""Runtime package: terminal adapters, capability guard, and session bootstrap.

Exports are resolved lazily so importing the package does not pull in
prompt_toolkit or termios until a session actually starts.
"""

from __future__ import annotations


def run_session(*args, **kwargs):
    """Lazily import the session runner."""
    from .app import run_session as _run_session

    return _run_session(*args, **kwargs)


__all__ = ["run_session"]
