"""Value formatting shared by the table, detail, and list renderers."""

from __future__ import annotations

from collections.abc import Sequence

from ..ui_theme import UITheme

PLACEHOLDER = "-"


def paint(text: str, style: str, theme: UITheme) -> str:
    if not style or not text:
        return text
    return f"{style}{text}{theme.reset}"


def fmt_number(value: float | int | None) -> str:
    if value is None:
        return PLACEHOLDER
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return f"{value:g}" if isinstance(value, float) else str(value)


def fmt_money(value: float | int | None) -> str:
    if value is None:
        return PLACEHOLDER
    return f"${fmt_number(value)}"


def fmt_text(value: str | None) -> str:
    return value if value else PLACEHOLDER


def fmt_tags(values: Sequence[str], separator: str = ",") -> str:
    return separator.join(values) if values else PLACEHOLDER


def fmt_flag(value: bool, theme: UITheme, yes: str = "Y", no: str = "N") -> str:
    if value:
        return paint(yes, theme.flag_yes, theme)
    return paint(no, theme.flag_no, theme)


def fmt_weights(open_weights: bool, theme: UITheme) -> str:
    return fmt_flag(open_weights, theme, yes="OPEN", no="CLOSED")
