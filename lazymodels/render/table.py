"""Fixed-column table, compact, and JSON output for catalogue rows.

Used by the non-interactive listing, the prompt loop pages, and the static
fallback tier. Missing values render as a single ``-``.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass

from pygments import highlight
from pygments.formatters import TerminalFormatter
from pygments.lexers import JsonLexer
from pygments.util import ClassNotFound

from ..ansi import fit_ansi_cell, selected_with_ansi
from ..catalogue import CatalogueEntry
from ..ui_theme import PLAIN_THEME, UNICODE_GLYPHS, GlyphSet, UITheme
from .cells import fmt_flag, fmt_money, fmt_number, fmt_tags, fmt_text, fmt_weights, paint


@dataclass(frozen=True)
class TableColumn:
    header: str
    width: int
    cell: Callable[[CatalogueEntry, UITheme], str]


TABLE_COLUMNS: tuple[TableColumn, ...] = (
    TableColumn("Provider", 12, lambda m, t: m.provider_name),
    TableColumn("Model", 18, lambda m, t: m.model_name),
    TableColumn("Provider ID", 12, lambda m, t: m.provider_id),
    TableColumn("Model ID", 18, lambda m, t: m.model_id),
    TableColumn("Tool", 4, lambda m, t: fmt_flag(m.tool_call, t)),
    TableColumn("Reason", 6, lambda m, t: fmt_flag(m.reasoning, t)),
    TableColumn("In Mod", 10, lambda m, t: fmt_tags(m.modalities_input)),
    TableColumn("Out Mod", 10, lambda m, t: fmt_tags(m.modalities_output)),
    TableColumn("In $", 7, lambda m, t: fmt_money(m.input_cost)),
    TableColumn("Out $", 7, lambda m, t: fmt_money(m.output_cost)),
    TableColumn("Cache R", 7, lambda m, t: fmt_money(m.cache_read_cost)),
    TableColumn("Cache W", 7, lambda m, t: fmt_money(m.cache_write_cost)),
    TableColumn("Ctx", 8, lambda m, t: fmt_number(m.context_length)),
    TableColumn("Out Lim", 8, lambda m, t: fmt_number(m.output_length)),
    TableColumn("Temp", 4, lambda m, t: fmt_flag(m.temperature, t)),
    TableColumn("Weights", 7, lambda m, t: fmt_weights(m.open_weights, t)),
    TableColumn("Knowledge", 10, lambda m, t: fmt_text(m.knowledge)),
    TableColumn("Release", 10, lambda m, t: fmt_text(m.release_date)),
    TableColumn("Updated", 10, lambda m, t: fmt_text(m.last_updated)),
)


def _join_row(cells: Iterable[str], glyphs: GlyphSet, theme: UITheme) -> str:
    separator = paint(f" {glyphs.vertical} ", theme.divider, theme) or f" {glyphs.vertical} "
    return separator.join(cells).rstrip()


def render_table(
    entries: Sequence[CatalogueEntry],
    *,
    theme: UITheme = PLAIN_THEME,
    glyphs: GlyphSet = UNICODE_GLYPHS,
    columns: Sequence[TableColumn] = TABLE_COLUMNS,
    row_numbers: int | None = None,
    marked_index: int | None = None,
) -> list[str]:
    """Render header, rule, and one line per entry.

    ``row_numbers`` prefixes each row with a 1-based number starting after the
    given offset; ``marked_index`` (relative to ``entries``) highlights a row.
    """
    number_width = len(str((row_numbers or 0) + len(entries))) if row_numbers is not None else 0

    header_cells = [fit_ansi_cell(paint(col.header, theme.table_header, theme), col.width) for col in columns]
    rule_cells = [glyphs.horizontal * col.width for col in columns]
    if row_numbers is not None:
        header_cells.insert(0, " " * number_width)
        rule_cells.insert(0, glyphs.horizontal * number_width)

    lines = [_join_row(header_cells, glyphs, theme)]
    rule_joint = f"{glyphs.horizontal}{glyphs.cross}{glyphs.horizontal}"
    lines.append(paint(rule_joint.join(rule_cells), theme.divider, theme))

    for idx, entry in enumerate(entries):
        cells = [fit_ansi_cell(col.cell(entry, theme), col.width) for col in columns]
        if row_numbers is not None:
            cells.insert(0, str(row_numbers + idx + 1).rjust(number_width))
        line = _join_row(cells, glyphs, theme)
        if marked_index == idx:
            line = selected_with_ansi(line, theme.reverse)
        lines.append(line)
    return lines


def format_compact(entries: Iterable[CatalogueEntry]) -> list[str]:
    """One ``provider:name:id`` line per entry."""
    return [f"{entry.provider_name}:{entry.model_name}:{entry.model_id}" for entry in entries]


def dump_json(entries: Iterable[CatalogueEntry], *, color: bool = False, style: str = "monokai") -> str:
    """Serialize entries as a pretty JSON array, optionally highlighted."""
    text = json.dumps([entry.to_record() for entry in entries], indent=2, ensure_ascii=False)
    if not color:
        return text + "\n"
    try:
        formatter = TerminalFormatter(style=style)
    except ClassNotFound:
        formatter = TerminalFormatter()
    return highlight(text, JsonLexer(), formatter)


__all__ = [
    "TABLE_COLUMNS",
    "TableColumn",
    "dump_json",
    "format_compact",
    "render_table",
]
