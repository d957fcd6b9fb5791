"""Decide which interval ends are clipped and where truncation arrows go."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional, Sequence, Tuple

from webforest.viz.core.svg import format_number

from .effects import ResolvedEffect
from .scale import Scale

__all__ = [
    "ArrowDimensions",
    "IntervalGeometry",
    "arrow_dimensions",
    "arrow_path",
    "clamp",
    "clip_direction",
    "resolve_interval",
]

Direction = Literal["left", "right"]


@dataclass(frozen=True)
class ArrowDimensions:
    width: float
    height: float


def arrow_dimensions(line_width: float) -> ArrowDimensions:
    """Arrow size scaled to the interval line width."""

    return ArrowDimensions(
        width=max(4, round(line_width * 3)),
        height=max(6, round(line_width * 4)),
    )


def arrow_path(direction: Direction, x: float, y: float, dims: ArrowDimensions) -> str:
    """Closed triangle with its tip at ``(x, y)`` pointing ``direction``."""

    half = dims.height / 2
    base = x + dims.width if direction == "left" else x - dims.width
    fmt = format_number
    return (
        f"M {fmt(x)} {fmt(y)} L {fmt(base)} {fmt(y - half)} "
        f"L {fmt(base)} {fmt(y + half)} Z"
    )


def clip_direction(value: float, bounds: Sequence[float]) -> Optional[Direction]:
    if value < bounds[0]:
        return "left"
    if value > bounds[1]:
        return "right"
    return None


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


@dataclass(frozen=True)
class IntervalGeometry:
    """Pixel geometry for one effect of one row, relative to the forest area."""

    index: int
    y: float
    x_lower: float
    x_upper: float
    x_point: float
    clipped_lower: bool = False
    clipped_upper: bool = False
    is_summary: bool = False
    lower_arrow: Optional[str] = None
    upper_arrow: Optional[str] = None

    @property
    def clipped(self) -> bool:
        return self.clipped_lower or self.clipped_upper


def resolve_interval(
    effect: ResolvedEffect,
    scale: Scale,
    clip_bounds: Tuple[float, float],
    forest_width: float,
    y: float,
    line_width: float,
    *,
    limits: Optional[Tuple[float, float]] = None,
    is_summary: bool = False,
) -> IntervalGeometry:
    """Resolve clipping for ``effect`` drawn at row centre ``y``.

    A bound beyond ``clip_bounds`` is clipped: its end of the line runs to
    the visible plot edge at ``limits`` (the plot boundary when omitted,
    never outside ``[0, forest_width]``) and carries an arrow. Summary
    diamonds are never clipped, only clamped to the plot. The point is
    always clamped to the plot.
    """

    x_point = clamp(scale(effect.point), 0.0, forest_width)
    if is_summary:
        return IntervalGeometry(
            index=effect.index,
            y=y,
            x_lower=clamp(scale(effect.lower), 0.0, forest_width),
            x_upper=clamp(scale(effect.upper), 0.0, forest_width),
            x_point=x_point,
            is_summary=True,
        )

    if limits is None:
        left_edge, right_edge = 0.0, forest_width
    else:
        left_edge = clamp(scale(limits[0]), 0.0, forest_width)
        right_edge = clamp(scale(limits[1]), 0.0, forest_width)
    clipped_lower = clip_direction(effect.lower, clip_bounds) == "left"
    clipped_upper = clip_direction(effect.upper, clip_bounds) == "right"

    x_lower = left_edge if clipped_lower else clamp(scale(effect.lower), 0.0, forest_width)
    x_upper = right_edge if clipped_upper else clamp(scale(effect.upper), 0.0, forest_width)

    dims = arrow_dimensions(line_width)
    return IntervalGeometry(
        index=effect.index,
        y=y,
        x_lower=x_lower,
        x_upper=x_upper,
        x_point=x_point,
        clipped_lower=clipped_lower,
        clipped_upper=clipped_upper,
        lower_arrow=arrow_path("left", x_lower, y, dims) if clipped_lower else None,
        upper_arrow=arrow_path("right", x_upper, y, dims) if clipped_upper else None,
    )
