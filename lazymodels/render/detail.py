"""Detail pane projection of one selected entry.

``detail_sections`` is the plain data view (fixed section order); the line
builder only styles it. No state beyond the entry is consulted.
"""

from __future__ import annotations

from ..ansi import clip_ansi_line
from ..catalogue import CatalogueEntry
from ..ui_theme import PLAIN_THEME, UNICODE_GLYPHS, GlyphSet, UITheme
from .cells import PLACEHOLDER, fmt_money, fmt_number, fmt_tags, fmt_text, paint

DETAIL_SECTIONS: tuple[str, ...] = ("Capabilities", "Modalities", "Costs (per 1M)", "Limits", "Metadata")
NO_SELECTION_TEXT = "No selection"


def detail_sections(entry: CatalogueEntry) -> list[tuple[str, list[tuple[str, object]]]]:
    """Group entry fields into the fixed detail sections.

    Values are raw (bools, numbers, tag tuples, strings or ``None``).
    """
    return [
        (
            "Capabilities",
            [
                ("Tool", entry.tool_call),
                ("Reason", entry.reasoning),
                ("Attach", entry.attachment),
                ("Temp", entry.temperature),
                ("Weights", entry.open_weights),
            ],
        ),
        (
            "Modalities",
            [
                ("Input", entry.modalities_input),
                ("Output", entry.modalities_output),
            ],
        ),
        (
            "Costs (per 1M)",
            [
                ("In", entry.input_cost),
                ("Out", entry.output_cost),
                ("CacheR", entry.cache_read_cost),
                ("CacheW", entry.cache_write_cost),
            ],
        ),
        (
            "Limits",
            [
                ("Ctx", entry.context_length),
                ("Out", entry.output_length),
            ],
        ),
        (
            "Metadata",
            [
                ("Knowledge", entry.knowledge),
                ("Release", entry.release_date),
                ("Updated", entry.last_updated),
            ],
        ),
    ]


def _styled_value(section: str, key: str, value: object, theme: UITheme) -> str:
    if isinstance(value, bool):
        if key == "Weights":
            return paint("OPEN", theme.flag_yes, theme) if value else paint("CLOSED", theme.flag_no, theme)
        return paint("Y", theme.flag_yes, theme) if value else paint("N", theme.flag_no, theme)
    if section == "Modalities":
        text = fmt_tags(value, ", ")  # type: ignore[arg-type]
        return paint(text, theme.tags, theme) if text != PLACEHOLDER else text
    if section.startswith("Costs"):
        text = fmt_money(value)  # type: ignore[arg-type]
        return paint(text, theme.money, theme) if value is not None else text
    if section == "Limits":
        text = fmt_number(value)  # type: ignore[arg-type]
        return paint(text, theme.number, theme) if value is not None else text
    text = fmt_text(value)  # type: ignore[arg-type]
    if key == "Knowledge" and value:
        return paint(text, theme.knowledge, theme)
    return text


def detail_lines(
    entry: CatalogueEntry | None,
    width: int,
    *,
    theme: UITheme = PLAIN_THEME,
    glyphs: GlyphSet = UNICODE_GLYPHS,
) -> list[str]:
    """Render the detail pane rows, clipped to ``width`` columns."""
    if entry is None:
        return [NO_SELECTION_TEXT]

    arrow = paint(glyphs.arrow, theme.label, theme)
    lines = [
        f"{paint(entry.provider_name, theme.detail_provider, theme)} {arrow} "
        f"{paint(entry.model_name, theme.detail_model, theme)}",
        paint(entry.model_id, theme.detail_id, theme),
        paint(glyphs.horizontal * max(1, min(60, width)), theme.divider, theme),
    ]
    for section, fields in detail_sections(entry):
        heading = paint(f"{section}:", theme.label, theme)
        if section in {"Modalities", "Metadata"}:
            lines.append(heading)
            for key, value in fields:
                lines.append(f"  {key} {_styled_value(section, key, value, theme)}")
        else:
            parts = "   ".join(f"{key} {_styled_value(section, key, value, theme)}" for key, value in fields)
            lines.append(f"{heading}  {parts}")
        lines.append("")
    if lines[-1] == "":
        lines.pop()
    return [clip_ansi_line(line, width) if line else line for line in lines]


__all__ = ["DETAIL_SECTIONS", "NO_SELECTION_TEXT", "detail_lines", "detail_sections"]
