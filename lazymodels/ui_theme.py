"""UI theme definitions and selection helpers.

Themes are ANSI palettes for the list, detail, table, and status chrome.
Glyph sets are chosen separately so a terminal with unreliable Unicode
support can keep colors while drawing with ASCII.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class UITheme:
    """Semantic ANSI palette used by renderers."""

    name: str
    divider: str
    reverse: str
    reset: str
    list_provider: str
    list_separator: str
    list_model: str
    detail_provider: str
    detail_model: str
    detail_id: str
    label: str
    money: str
    number: str
    tags: str
    knowledge: str
    flag_yes: str
    flag_no: str
    table_header: str
    help_key: str
    help_dim: str
    status_value: str
    prompt: str


DEFAULT_THEME = UITheme(
    name="default",
    divider="\033[2m",
    reverse="\033[7m",
    reset="\033[0m",
    list_provider="\033[38;5;44m",
    list_separator="\033[2;38;5;250m",
    list_model="\033[38;5;252m",
    detail_provider="\033[1;38;5;44m",
    detail_model="\033[1m",
    detail_id="\033[38;5;75m",
    label="\033[1;38;5;255m",
    money="\033[38;5;229m",
    number="\033[38;5;44m",
    tags="\033[38;5;75m",
    knowledge="\033[38;5;176m",
    flag_yes="\033[38;5;42m",
    flag_no="\033[2;38;5;250m",
    table_header="\033[1;38;5;81m",
    help_key="\033[38;5;229m",
    help_dim="\033[2;38;5;250m",
    status_value="\033[38;5;221m",
    prompt="\033[1;38;5;81m",
)

OCEAN_THEME = UITheme(
    name="ocean",
    divider="\033[2;38;5;31m",
    reverse="\033[7m",
    reset="\033[0m",
    list_provider="\033[38;5;39m",
    list_separator="\033[2;38;5;110m",
    list_model="\033[38;5;153m",
    detail_provider="\033[1;38;5;45m",
    detail_model="\033[1;38;5;153m",
    detail_id="\033[38;5;117m",
    label="\033[1;38;5;153m",
    money="\033[38;5;215m",
    number="\033[38;5;45m",
    tags="\033[38;5;117m",
    knowledge="\033[38;5;141m",
    flag_yes="\033[38;5;84m",
    flag_no="\033[2;38;5;110m",
    table_header="\033[1;38;5;45m",
    help_key="\033[38;5;153m",
    help_dim="\033[2;38;5;110m",
    status_value="\033[38;5;215m",
    prompt="\033[1;38;5;39m",
)

# 16-color palette for terminals that misreport extended color support.
BASIC_THEME = UITheme(
    name="basic",
    divider="\033[2m",
    reverse="\033[7m",
    reset="\033[0m",
    list_provider="\033[36m",
    list_separator="\033[2m",
    list_model="\033[37m",
    detail_provider="\033[1;36m",
    detail_model="\033[1m",
    detail_id="\033[34m",
    label="\033[1;37m",
    money="\033[33m",
    number="\033[36m",
    tags="\033[34m",
    knowledge="\033[35m",
    flag_yes="\033[32m",
    flag_no="\033[2m",
    table_header="\033[1;36m",
    help_key="\033[33m",
    help_dim="\033[2m",
    status_value="\033[33m",
    prompt="\033[1;36m",
)

PLAIN_THEME = UITheme(
    name="plain",
    divider="",
    reverse="",
    reset="",
    list_provider="",
    list_separator="",
    list_model="",
    detail_provider="",
    detail_model="",
    detail_id="",
    label="",
    money="",
    number="",
    tags="",
    knowledge="",
    flag_yes="",
    flag_no="",
    table_header="",
    help_key="",
    help_dim="",
    status_value="",
    prompt="",
)

_THEMES: dict[str, UITheme] = {
    DEFAULT_THEME.name: DEFAULT_THEME,
    OCEAN_THEME.name: OCEAN_THEME,
}


@dataclass(frozen=True)
class GlyphSet:
    vertical: str
    horizontal: str
    cross: str
    arrow: str
    checked: str
    unchecked: str


UNICODE_GLYPHS = GlyphSet(vertical="│", horizontal="─", cross="┼", arrow="›", checked="☑", unchecked="☐")
ASCII_GLYPHS = GlyphSet(vertical="|", horizontal="-", cross="+", arrow=">", checked="[x]", unchecked="[ ]")


def available_theme_names() -> tuple[str, ...]:
    """Return selectable non-plain theme names."""
    return tuple(sorted(_THEMES.keys()))


def normalize_theme_name(name: str | None) -> str:
    """Return a valid theme name, falling back to default."""
    if not name:
        return DEFAULT_THEME.name
    candidate = str(name).strip().lower()
    if candidate in _THEMES:
        return candidate
    return DEFAULT_THEME.name


def resolve_theme(name: str | None, *, no_color: bool = False, extended_colors: bool = True) -> UITheme:
    """Return concrete theme for requested name and color capability."""
    if no_color:
        return PLAIN_THEME
    if not extended_colors:
        return BASIC_THEME
    return _THEMES[normalize_theme_name(name)]


def resolve_glyphs(unicode_glyphs: bool) -> GlyphSet:
    return UNICODE_GLYPHS if unicode_glyphs else ASCII_GLYPHS


__all__ = [
    "ASCII_GLYPHS",
    "BASIC_THEME",
    "DEFAULT_THEME",
    "GlyphSet",
    "OCEAN_THEME",
    "PLAIN_THEME",
    "UITheme",
    "UNICODE_GLYPHS",
    "available_theme_names",
    "normalize_theme_name",
    "resolve_glyphs",
    "resolve_theme",
]
