"""Core rendering primitives used by the webforest exporters."""

from .svg import SvgDocument, SvgElement, format_number
from .theme import DEFAULT_THEME, ThemeManager, merge_theme

__all__ = [
    "DEFAULT_THEME",
    "SvgDocument",
    "SvgElement",
    "ThemeManager",
    "format_number",
    "merge_theme",
]
