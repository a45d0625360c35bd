"""Render feature sets negotiated between the capability guard and adapters."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RenderFeatures:
    """Terminal features an adapter may rely on when drawing."""

    unicode_glyphs: bool = True
    extended_colors: bool = True
    mouse: bool = True


FULL_FEATURES = RenderFeatures()
REDUCED_FEATURES = RenderFeatures(unicode_glyphs=False, extended_colors=False, mouse=False)


__all__ = ["FULL_FEATURES", "REDUCED_FEATURES", "RenderFeatures"]
