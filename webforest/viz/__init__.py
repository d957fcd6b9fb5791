"""Drawing primitives for forest plots.

The SVG scene graph and the theme registry live here. Both are shared by
the static exporter and any host that paints the live view, so they stay
free of layout logic.
"""

from .core.svg import SvgDocument, SvgElement
from .core.theme import DEFAULT_THEME, ThemeManager, merge_theme

__all__ = [
    "DEFAULT_THEME",
    "SvgDocument",
    "SvgElement",
    "ThemeManager",
    "merge_theme",
]
