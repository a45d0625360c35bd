"""ANSI-aware text measurement and line shaping utilities.

Clipping and padding preserve escape sequences so colored cells stay aligned
when they are laid out in panes and table columns.
"""

from __future__ import annotations

import re
import unicodedata

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")
TAB_STOP = 8


def char_display_width(ch: str, col: int) -> int:
    """Return terminal column width for one character at visual column ``col``.

    Tabs expand to the next 8-column stop, combining marks consume no columns,
    and East Asian wide/fullwidth characters consume two.
    """
    if ch == "\t":
        return TAB_STOP - (col % TAB_STOP)
    if unicodedata.combining(ch):
        return 0
    if unicodedata.east_asian_width(ch) in {"W", "F"}:
        return 2
    return 1


def strip_ansi(text: str) -> str:
    return ANSI_ESCAPE_RE.sub("", text)


def display_width(text: str) -> int:
    """Visible column count of ``text`` ignoring escape sequences."""
    col = 0
    for ch in strip_ansi(text):
        col += char_display_width(ch, col)
    return col


def clip_ansi_line(text: str, max_cols: int) -> str:
    """Trim a styled line to at most ``max_cols`` display columns.

    ANSI escape sequences are preserved verbatim and do not count toward width.
    Tabs are expanded into spaces so clipping aligns with rendered terminal cells.
    """
    if max_cols <= 0 or not text:
        return ""

    out: list[str] = []
    col = 0
    i = 0
    n = len(text)
    while i < n and col < max_cols:
        if text[i] == "\x1b":
            match = ANSI_ESCAPE_RE.match(text, i)
            if match:
                out.append(match.group(0))
                i = match.end()
                continue
        ch = text[i]
        w = char_display_width(ch, col)
        if ch == "\t":
            if col + w > max_cols:
                break
            out.append(" " * w)
            col += w
            i += 1
            continue
        if col + w > max_cols:
            break
        out.append(ch)
        col += w
        i += 1

    return "".join(out)


def fit_ansi_cell(text: str, width: int) -> str:
    """Clip and right-pad ``text`` to exactly ``width`` columns.

    A reset is appended after styled content so padding never inherits color.
    """
    if width <= 0:
        return ""
    clipped = clip_ansi_line(text, width)
    pad = " " * max(0, width - display_width(clipped))
    if "\x1b" in clipped:
        return f"{clipped}\033[0m{pad}"
    return f"{clipped}{pad}"


def selected_with_ansi(text: str, reverse: str = "\033[7m") -> str:
    """Apply selection styling without discarding existing ANSI colors."""
    if not text or not reverse:
        return text

    # Keep reverse video active even when the text contains internal resets.
    return reverse + text.replace("\033[0m", "\033[0;7m") + "\033[0m"


__all__ = [
    "ANSI_ESCAPE_RE",
    "char_display_width",
    "clip_ansi_line",
    "display_width",
    "fit_ansi_cell",
    "selected_with_ansi",
    "strip_ansi",
]
