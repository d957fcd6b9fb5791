"""Theme registry and preset composition for forest plots.

Only :data:`DEFAULT_THEME` is spelled out in full. Every other preset is a
plain override mapping layered on top of it with :func:`merge_theme`.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Mapping, MutableMapping, Optional

from pydantic.alias_generators import to_snake

from webforest.spec.models import ColorPalette, Spacing, Theme, Typography

__all__ = [
    "DEFAULT_THEME",
    "THEME_LABELS",
    "THEME_PRESETS",
    "ThemeManager",
    "build_preset",
    "merge_theme",
    "rebase_theme",
]


LOG = logging.getLogger(__name__)

DEFAULT_THEME = Theme(
    name="default",
    colors=ColorPalette(),
    typography=Typography(),
    spacing=Spacing(),
)


def _normalise_keys(source: Mapping[str, Any]) -> Dict[str, Any]:
    normalised: Dict[str, Any] = {}
    for key, value in source.items():
        if isinstance(value, Mapping):
            value = _normalise_keys(value)
        key = str(key)
        normalised[to_snake(key) if not key.islower() else key] = value
    return normalised


def _deep_merge(base: Dict[str, Any], overrides: Mapping[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in overrides.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def merge_theme(base: Theme, overrides: Mapping[str, Any]) -> Theme:
    """Return a new theme with ``overrides`` applied section by section.

    Keys may be snake_case or camelCase. Nested sections merge key by key,
    so an override of ``colors.primary`` keeps every other colour of
    ``base``.
    """

    payload = _deep_merge(base.model_dump(), _normalise_keys(overrides))
    return Theme.model_validate(payload)


THEME_PRESETS: Dict[str, Dict[str, Any]] = {
    "minimal": {
        "colors": {
            "foreground": "#000000",
            "primary": "#000000",
            "secondary": "#333333",
            "muted": "#666666",
            "border": "#cccccc",
            "interval_line": "#000000",
            "summary_fill": "#000000",
            "summary_border": "#000000",
        },
        "typography": {"font_family": "'Times New Roman', Times, serif"},
    },
    "dark": {
        "colors": {
            "background": "#1e1e2e",
            "foreground": "#cdd6f4",
            "primary": "#89b4fa",
            "secondary": "#a6adc8",
            "accent": "#cba6f7",
            "muted": "#6c7086",
            "border": "#45475a",
            "interval_line": "#bac2de",
            "summary_fill": "#89b4fa",
            "summary_border": "#74c7ec",
        },
    },
    "jama": {
        "colors": {
            "foreground": "#000000",
            "primary": "#000000",
            "secondary": "#333333",
            "accent": "#000000",
            "muted": "#666666",
            "border": "#000000",
            "interval_line": "#000000",
            "summary_fill": "#000000",
            "summary_border": "#000000",
        },
        "typography": {
            "font_family": "Arial, Helvetica, sans-serif",
            "font_size_sm": "9pt",
            "font_size_base": "10pt",
            "font_size_lg": "11pt",
            "font_weight_bold": 700,
            "line_height": 1.3,
        },
        "spacing": {
            "row_height": 20,
            "header_height": 26,
            "column_gap": 6,
            "section_gap": 12,
            "padding": 8,
        },
        "shapes": {
            "point_size": 5,
            "summary_height": 8,
            "line_width": 1,
            "border_radius": 0,
        },
    },
    "lancet": {
        "colors": {
            "foreground": "#00407a",
            "primary": "#00407a",
            "secondary": "#446e9b",
            "accent": "#c4161c",
            "muted": "#7a99ac",
            "border": "#ccd6dd",
            "interval_line": "#00407a",
            "summary_fill": "#00407a",
            "summary_border": "#002d54",
        },
        "typography": {
            "font_family": "Georgia, 'Times New Roman', serif",
            "font_weight_bold": 700,
            "line_height": 1.4,
        },
        "spacing": {"row_height": 24, "header_height": 32, "section_gap": 14, "padding": 10},
        "shapes": {
            "point_size": 5,
            "summary_height": 9,
            "line_width": 1.25,
            "border_radius": 0,
        },
    },
    "modern": {
        "colors": {
            "background": "#fafafa",
            "foreground": "#18181b",
            "secondary": "#52525b",
            "accent": "#7c3aed",
            "muted": "#a1a1aa",
            "border": "#e4e4e7",
            "interval_line": "#3f3f46",
        },
        "typography": {"font_family": "Inter, system-ui, -apple-system, sans-serif"},
        "spacing": {
            "row_height": 32,
            "header_height": 40,
            "column_gap": 10,
            "section_gap": 20,
            "padding": 14,
        },
        "shapes": {"point_size": 7, "summary_height": 11, "border_radius": 6},
    },
    "presentation": {
        "colors": {
            "foreground": "#0f172a",
            "primary": "#0284c7",
            "secondary": "#475569",
            "accent": "#f59e0b",
            "border": "#cbd5e1",
            "interval_line": "#1e293b",
            "summary_fill": "#0284c7",
            "summary_border": "#0369a1",
        },
        "typography": {
            "font_family": "'Source Sans Pro', 'Segoe UI', Roboto, sans-serif",
            "font_size_sm": "0.875rem",
            "font_size_base": "1rem",
            "font_size_lg": "1.125rem",
            "font_weight_medium": 600,
            "font_weight_bold": 700,
            "line_height": 1.4,
        },
        "spacing": {
            "row_height": 40,
            "header_height": 48,
            "column_gap": 12,
            "section_gap": 24,
            "padding": 16,
        },
        "shapes": {"point_size": 10, "summary_height": 14, "line_width": 2},
    },
}

THEME_LABELS = {
    "default": "Default",
    "minimal": "Minimal",
    "dark": "Dark",
    "jama": "JAMA",
    "lancet": "Lancet",
    "modern": "Modern",
    "presentation": "Presentation",
}


def build_preset(name: str) -> Theme:
    if name == "default":
        return DEFAULT_THEME
    try:
        overrides = THEME_PRESETS[name]
    except KeyError as exc:
        raise KeyError(f"Unknown theme preset '{name}'") from exc
    return merge_theme(DEFAULT_THEME, {**overrides, "name": name})


class ThemeManager:
    """Registry of named :class:`~webforest.spec.models.Theme` instances."""

    def __init__(self, themes: Optional[Iterable[Theme]] = None, *, presets: bool = True) -> None:
        self._themes: MutableMapping[str, Theme] = {}
        if presets:
            self.register(DEFAULT_THEME)
            for name in THEME_PRESETS:
                self.register(build_preset(name))
        if themes:
            for theme in themes:
                self.register(theme)

    def register(self, theme: Theme) -> None:
        if theme.name in self._themes:
            raise ValueError(f"Theme '{theme.name}' already registered")
        self._themes[theme.name] = theme

    def replace(self, theme: Theme) -> None:
        """Insert or update a theme without raising."""

        self._themes[theme.name] = theme

    def get(self, name: str) -> Theme:
        try:
            return self._themes[name]
        except KeyError as exc:
            raise KeyError(f"Unknown theme '{name}'") from exc

    def load_from_payload(self, payload: Mapping[str, object], *, base: str = "default") -> Theme:
        """Register a theme described as overrides of the ``base`` theme."""

        name = str(payload.get("name") or "custom")
        overrides = {key: _as_mapping(value) if key != "name" else value for key, value in payload.items()}
        theme = merge_theme(self.get(base), {**overrides, "name": name})
        self.replace(theme)
        return theme

    def default_theme(self) -> Theme:
        if not self._themes:
            self.register(DEFAULT_THEME)
        return self._themes.get("default") or next(iter(self._themes.values()))

    def list_themes(self) -> Mapping[str, Theme]:
        return dict(self._themes)


def _as_mapping(source: object) -> Dict[str, object]:
    if source is None:
        return {}
    if isinstance(source, Mapping):
        return dict(source)
    raise TypeError("Theme payload sections must be mappings")


def rebase_theme(theme: Theme, name: str, manager: Optional[ThemeManager] = None) -> Theme:
    """Layer the fields ``theme`` set explicitly over the registered theme ``name``.

    A theme that names itself keeps its own tokens, as does every theme when
    ``name`` is ``"default"``. An unregistered ``name`` is logged and ignored.
    """

    if name == DEFAULT_THEME.name or "name" in theme.model_fields_set:
        return theme
    manager = manager or ThemeManager()
    try:
        base = manager.get(name)
    except KeyError:
        LOG.warning("Configured default theme %r is not registered; keeping %r", name, theme.name)
        return theme
    return merge_theme(base, theme.model_dump(exclude_unset=True))
