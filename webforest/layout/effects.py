"""Resolve overlaid effects and their marker styling for each row."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from webforest.spec.models import EffectSpec, Row, Theme

from .constants import DEFAULT_EFFECT_COLORS, DEFAULT_MARKER_SHAPES, EFFECT_SPACING

__all__ = [
    "EffectStyle",
    "ResolvedEffect",
    "effect_style",
    "effect_value",
    "effect_y_offset",
    "point_size",
    "resolve_effects",
]

_PRIMARY_FIELDS = {"point", "lower", "upper"}


@dataclass(frozen=True)
class ResolvedEffect:
    """One plottable interval for a row."""

    index: int
    point: float
    lower: float
    upper: float
    effect: Optional[EffectSpec] = None

    @property
    def is_primary(self) -> bool:
        return self.effect is None or self.index == 0


@dataclass(frozen=True)
class EffectStyle:
    color: str
    shape: str
    opacity: float


def _as_number(value: Any, *, positive: bool) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    numeric = float(value)
    if not math.isfinite(numeric):
        return None
    if positive and numeric <= 0:
        return None
    return numeric


def effect_value(row: Row, column: str, *, log_scale: bool = False) -> Optional[float]:
    """Read ``column`` for ``row``: metadata first, then the primary field.

    Log scales only accept strictly positive values.
    """

    if column in row.metadata:
        found = _as_number(row.metadata[column], positive=log_scale)
        if found is not None:
            return found
    if column in _PRIMARY_FIELDS:
        return _as_number(getattr(row, column), positive=log_scale)
    return None


def resolve_effects(
    row: Row, effects: Sequence[EffectSpec] = (), *, log_scale: bool = False
) -> list[ResolvedEffect]:
    """Return the effects with a complete point/lower/upper triple.

    Without configured effects the row's primary interval is used.
    """

    if not effects:
        values = [effect_value(row, name, log_scale=log_scale) for name in ("point", "lower", "upper")]
        if any(value is None for value in values):
            return []
        point, lower, upper = values
        return [ResolvedEffect(0, point, lower, upper)]

    resolved: list[ResolvedEffect] = []
    for index, effect in enumerate(effects):
        point = effect_value(row, effect.point_col, log_scale=log_scale)
        lower = effect_value(row, effect.lower_col, log_scale=log_scale)
        upper = effect_value(row, effect.upper_col, log_scale=log_scale)
        if point is None or lower is None or upper is None:
            continue
        resolved.append(ResolvedEffect(index, point, lower, upper, effect))
    return resolved


def effect_style(row: Row, resolved: ResolvedEffect, theme: Theme) -> EffectStyle:
    """Marker styling: row marker style, then the effect, then theme cycles."""

    index = resolved.index
    effect = resolved.effect
    marker = row.marker_style if resolved.is_primary else None
    shapes = theme.shapes

    palette = shapes.effect_colors or None
    color = (
        (marker.color if marker else None)
        or (effect.color if effect else None)
        or (palette[index % len(palette)] if palette else None)
        or (theme.colors.interval if index == 0 else None)
        or (DEFAULT_EFFECT_COLORS[index % len(DEFAULT_EFFECT_COLORS)] if index else None)
        or theme.colors.primary
    )

    shape_cycle = shapes.marker_shapes or DEFAULT_MARKER_SHAPES
    shape = (
        (marker.shape if marker else None)
        or (effect.shape if effect else None)
        or shape_cycle[index % len(shape_cycle)]
    )

    opacity = None
    if marker and marker.opacity is not None:
        opacity = marker.opacity
    elif effect and effect.opacity is not None:
        opacity = effect.opacity
    return EffectStyle(color=color, shape=shape, opacity=1.0 if opacity is None else opacity)


def point_size(row: Row, base: float, weight_col: Optional[str] = None, *, primary: bool = True) -> float:
    """Marker half-size in pixels for ``row``."""

    if primary and row.marker_style and row.marker_style.size is not None:
        return row.marker_style.size * base
    if weight_col:
        weight = row.metadata.get(weight_col)
        if isinstance(weight, (int, float)) and not isinstance(weight, bool) and weight > 0:
            scaled = base * (0.5 + math.sqrt(weight / 100) * 1.5)
            return min(max(scaled, 3.0), base * 2.5)
    return base


def effect_y_offset(index: int, count: int) -> float:
    """Vertical offset that centres ``count`` stacked effects on the row."""

    if count <= 1:
        return 0.0
    return (index - (count - 1) / 2) * EFFECT_SPACING
