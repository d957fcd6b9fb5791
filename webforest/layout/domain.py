"""Derive the x-axis domain from point estimates, intervals and axis policy."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple

from webforest.spec.models import AxisConfig, EffectSpec, Row

from .constants import LOG_EPSILON
from .effects import effect_value

__all__ = ["AxisDomain", "compute_domain", "resolve_symmetric"]

LOG = logging.getLogger(__name__)

LINEAR_FALLBACK = (0.0, 1.0)
LOG_FALLBACK = (0.1, 10.0)


@dataclass(frozen=True)
class AxisDomain:
    """Raw (un-niced) domain plus the bounds used to decide clipping.

    ``clip_min``/``clip_max`` are the CI-extended range before padding,
    with any explicit side replaced by its explicit value.
    """

    min: float
    max: float
    clip_min: float
    clip_max: float
    symmetric: bool = False
    explicit: bool = False
    fallback: bool = False

    @property
    def bounds(self) -> Tuple[float, float]:
        return (self.min, self.max)

    @property
    def clip_bounds(self) -> Tuple[float, float]:
        return (self.clip_min, self.clip_max)


def _collect(rows: Iterable[Row], columns: Sequence[Tuple[str, str, str]], log_scale: bool):
    points: list[float] = []
    bounds: list[Tuple[Optional[float], Optional[float]]] = []
    for row in rows:
        if row.row_type in {"header", "spacer"}:
            continue
        for point_col, lower_col, upper_col in columns:
            point = effect_value(row, point_col, log_scale=log_scale)
            if point is None:
                continue
            points.append(point)
            bounds.append(
                (
                    effect_value(row, lower_col, log_scale=log_scale),
                    effect_value(row, upper_col, log_scale=log_scale),
                )
            )
    return points, bounds


def resolve_symmetric(axis: AxisConfig, points: Sequence[float], null_value: float) -> bool:
    """Explicit ``True``/``False`` wins; ``None`` needs estimates on both sides of null."""

    if axis.symmetric is not None:
        return axis.symmetric
    return any(p < null_value for p in points) and any(p > null_value for p in points)


def _floor_log(value: float) -> float:
    return max(value, LOG_EPSILON)


def compute_domain(
    rows: Sequence[Row],
    axis: AxisConfig,
    scale: str = "linear",
    null_value: float = 0.0,
    effects: Sequence[EffectSpec] = (),
) -> AxisDomain:
    log_scale = scale == "log"
    explicit_min = axis.range_min
    explicit_max = axis.range_max

    if explicit_min is not None and explicit_max is not None:
        return AxisDomain(
            explicit_min, explicit_max, explicit_min, explicit_max, explicit=True
        )

    columns = [("point", "lower", "upper")]
    columns.extend((e.point_col, e.lower_col, e.upper_col) for e in effects)
    points, bounds = _collect(rows, columns, log_scale)

    if not points:
        lo, hi = LOG_FALLBACK if log_scale else LINEAR_FALLBACK
        if explicit_min is not None and explicit_min < hi:
            lo = explicit_min
        if explicit_max is not None and explicit_max > lo:
            hi = explicit_max
        if log_scale:
            lo, hi = _floor_log(lo), _floor_log(hi)
        LOG.debug("No finite point estimates; using fallback domain (%s, %s)", lo, hi)
        return AxisDomain(lo, hi, lo, hi, fallback=True)

    core_min = min(points)
    core_max = max(points)
    null_ok = not log_scale or null_value > 0
    if axis.include_null and null_ok:
        core_min = min(core_min, null_value)
        core_max = max(core_max, null_value)

    estimate_range = (core_max - core_min) or 1.0
    limit = estimate_range * axis.ci_truncation_threshold

    ext_min, ext_max = core_min, core_max
    for lower, upper in bounds:
        for bound in (lower, upper):
            if bound is None:
                continue
            if bound < ext_min and core_min - bound <= limit:
                ext_min = bound
            elif bound > ext_max and bound - core_max <= limit:
                ext_max = bound

    pad = estimate_range * axis.padding
    lo = explicit_min if explicit_min is not None else ext_min - pad
    hi = explicit_max if explicit_max is not None else ext_max + pad
    clip_lo = explicit_min if explicit_min is not None else ext_min
    clip_hi = explicit_max if explicit_max is not None else ext_max

    # A lone explicit bound beyond the data keeps its side; the other follows.
    if explicit_min is not None and hi <= explicit_min:
        hi = clip_hi = explicit_min + (pad or estimate_range)
    if explicit_max is not None and lo >= explicit_max:
        lo = clip_lo = explicit_max - (pad or estimate_range)

    symmetric = False
    if explicit_min is None and explicit_max is None and null_ok:
        symmetric = resolve_symmetric(axis, points, null_value)
    if symmetric:
        if log_scale:
            log_null = math.log(null_value)
            dist = max(
                abs(math.log(_floor_log(core_min)) - log_null),
                abs(math.log(_floor_log(core_max)) - log_null),
            )
            lo, hi = math.exp(log_null - dist), math.exp(log_null + dist)
        else:
            dist = max(abs(core_min - null_value), abs(core_max - null_value))
            lo, hi = null_value - dist, null_value + dist
        if lo == hi:
            symmetric = False
            lo, hi = ext_min - pad, ext_max + pad

    if log_scale:
        lo, hi = _floor_log(lo), _floor_log(hi)
        clip_lo, clip_hi = _floor_log(clip_lo), _floor_log(clip_hi)

    return AxisDomain(lo, hi, clip_lo, clip_hi, symmetric=symmetric)
