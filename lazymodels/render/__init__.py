"""Pure renderers for catalogue rows: table, compact, JSON, detail, help.

Nothing here writes to the terminal; callers decide where text goes.
"""

from __future__ import annotations

from .detail import detail_lines, detail_sections
from .help import PROMPT_LOOP_ACTIONS, RICH_PANE_KEYS, filter_summary, key_legend
from .table import TABLE_COLUMNS, dump_json, format_compact, render_table

__all__ = [
    "PROMPT_LOOP_ACTIONS",
    "RICH_PANE_KEYS",
    "TABLE_COLUMNS",
    "detail_lines",
    "detail_sections",
    "dump_json",
    "filter_summary",
    "format_compact",
    "key_legend",
    "render_table",
]
