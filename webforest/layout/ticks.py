"""Axis tick generation with pixel-spacing filtering around the null value."""

from __future__ import annotations

import math
from typing import Callable, List, Optional, Sequence

from webforest.spec.models import AxisConfig

from .constants import DEFAULT_TICK_COUNT, MAX_TICK_COUNT, MIN_TICK_SPACING
from .nice import NICE_LOG_VALUES, NICE_Q
from .scale import make_scale

__all__ = ["effective_tick_count", "generate_ticks", "linear_candidates", "log_candidates"]

# Preferred log ticks when the table has to be subsampled.
_LOG_PRIORITY = (1.0, 0.1, 10.0, 100.0, 0.5, 2.0, 5.0, 0.2, 0.25, 1.5, 3.0, 4.0, 20.0, 50.0)


def _clean(value: float) -> float:
    return float(f"{value:.12g}")


def effective_tick_count(axis: AxisConfig, width: float) -> int:
    """Tick budget from the configured count and the available pixels."""

    by_width = min(MAX_TICK_COUNT, max(2, int(math.floor(width / MIN_TICK_SPACING))))
    return min(axis.tick_count or DEFAULT_TICK_COUNT, by_width)


def linear_candidates(lo: float, hi: float, count: int) -> List[float]:
    span = hi - lo
    if span <= 0:
        return [lo]

    raw_step = span / max(count - 1, 1)
    magnitude = 10 ** math.floor(math.log10(raw_step))
    best_step = magnitude
    best_score = math.inf
    for q in NICE_Q:
        for step in (q * magnitude, q * magnitude / 10):
            score = abs(math.floor(span / step) + 1 - count)
            if score < best_score:
                best_score = score
                best_step = step

    ticks: List[float] = []
    index = math.ceil(lo / best_step)
    tick = index * best_step
    while tick <= hi + best_step * 0.001:
        rounded = round(tick * 1e10) / 1e10
        if lo <= rounded <= hi:
            ticks.append(rounded)
        index += 1
        tick = index * best_step
    return ticks


def _subsample(values: Sequence[float], count: int) -> List[float]:
    if len(values) <= count:
        return list(values)
    selected = [p for p in _LOG_PRIORITY if p in values][:count]
    remaining = [v for v in values if v not in selected]
    if len(selected) < count and remaining:
        step = max(1, len(remaining) // (count - len(selected)))
        for value in remaining[::step]:
            if len(selected) >= count:
                break
            selected.append(value)
    return sorted(selected)


def log_candidates(lo: float, hi: float, count: int) -> List[float]:
    """1/2/5 x 10^k ticks inside ``[lo, hi]``, falling back to the nice table."""

    if lo <= 0 or hi <= lo:
        return [lo] if lo > 0 else []

    tiers: List[List[float]] = [[], [], []]
    for exponent in range(math.floor(math.log10(lo)), math.ceil(math.log10(hi)) + 1):
        for tier, mantissa in enumerate((1, 5, 2)):
            value = _clean(mantissa * 10.0 ** exponent)
            if lo <= value <= hi:
                tiers[tier].append(value)

    chosen: List[float] = []
    for tier in tiers:
        if chosen and len(chosen) + len(tier) > count:
            break
        chosen.extend(tier)
    if len(chosen) >= 2:
        return sorted(chosen)

    table = [v for v in NICE_LOG_VALUES if lo <= v <= hi]
    if len(table) >= 2:
        return _subsample(table, count)
    return sorted(chosen)


def _contains(values: Sequence[float], target: float, tolerance: float) -> bool:
    return any(abs(v - target) <= tolerance for v in values)


def _spaced(candidates: Sequence[float], anchor: Optional[float], position: Callable[[float], float]) -> List[float]:
    kept: List[float] = []
    last = anchor
    for value in candidates:
        pixel = position(value)
        if last is None or abs(pixel - last) >= MIN_TICK_SPACING:
            kept.append(value)
            last = pixel
    return kept


def generate_ticks(
    domain: Sequence[float],
    axis: AxisConfig,
    scale: str,
    null_value: float,
    width: float,
    position: Optional[Callable[[float], float]] = None,
) -> List[float]:
    """Return the tick values for ``domain`` drawn across ``width`` pixels.

    ``position`` maps a value to its pixel x; it defaults to a scale over
    ``[0, width]``.
    """

    lo, hi = float(domain[0]), float(domain[1])
    tolerance = abs(hi - lo) * 1e-9
    null_in_domain = lo <= null_value <= hi and (scale != "log" or null_value > 0)

    if axis.tick_values:
        ticks = [t for t in axis.tick_values if lo <= t <= hi]
        if axis.null_tick and null_in_domain and null_value not in ticks:
            ticks.append(null_value)
        return sorted(set(ticks))

    if hi <= lo:
        return [lo]

    count = effective_tick_count(axis, width)
    if scale == "log":
        candidates = log_candidates(lo, hi, count)
    else:
        candidates = linear_candidates(lo, hi, count)

    if position is None:
        position = make_scale(scale, (lo, hi), (0.0, max(float(width), 1.0)))

    null_candidate = _contains(candidates, null_value, tolerance)
    keep_null = null_in_domain and (null_candidate or axis.null_tick)

    below = sorted((v for v in candidates if v < null_value - tolerance), reverse=True)
    above = sorted(v for v in candidates if v > null_value + tolerance)

    anchor = position(null_value) if keep_null else None
    kept_below = _spaced(below, anchor, position)
    if anchor is None and kept_below:
        anchor = position(kept_below[0])
    kept_above = _spaced(above, anchor, position)

    ticks = kept_below + kept_above
    if keep_null:
        ticks.append(null_value)
    ticks = sorted(ticks)

    if len(ticks) < 2:
        if not _contains(ticks, lo, tolerance):
            ticks.insert(0, lo)
        if not _contains(ticks, hi, tolerance):
            ticks.append(hi)
    return ticks
