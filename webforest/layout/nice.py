"""Round axis domains to human friendly bounds."""

from __future__ import annotations

import math
from typing import Sequence, Tuple

__all__ = ["NICE_LOG_VALUES", "NICE_Q", "nice_domain", "nice_linear", "nice_log"]

Domain = Tuple[float, float]

# Preferred step multipliers, best first.
NICE_Q = (1.0, 5.0, 2.0, 2.5, 4.0, 3.0)

NICE_LOG_VALUES: Sequence[float] = (
    0.001, 0.002, 0.005,
    0.01, 0.02, 0.05,
    0.1, 0.15, 0.2, 0.25, 0.3, 0.4, 0.5, 0.6, 0.7, 0.8, 0.9,
    1.0, 1.1, 1.2, 1.3, 1.4, 1.5, 1.75, 2.0, 2.5, 3.0, 4.0, 5.0, 6.0, 7.0, 8.0,
    10.0, 12.0, 15.0, 20.0, 25.0, 30.0, 40.0, 50.0, 75.0,
    100.0, 150.0, 200.0, 300.0, 500.0, 750.0, 1000.0,
)

_ROUND_FACTOR = 1e10


def nice_log(lo: float, hi: float) -> Domain:
    """Snap a positive log domain outward through :data:`NICE_LOG_VALUES`."""

    if lo <= 0 or hi <= 0:
        return (0.1, 10.0)
    if lo >= hi:
        return (lo, hi)

    nice_min = None
    for value in NICE_LOG_VALUES:
        if value <= lo:
            nice_min = value
        else:
            break
    if nice_min is None:
        nice_min = 10 ** math.floor(math.log10(lo))

    nice_max = None
    for value in NICE_LOG_VALUES:
        if value >= hi:
            nice_max = value
            break
    if nice_max is None:
        nice_max = 10 ** math.ceil(math.log10(hi))

    # Guard against float error in the power-of-ten fallbacks.
    return (min(nice_min, lo), max(nice_max, hi))


def _round_outward(value: float, *, down: bool) -> float:
    rounded = round(value * _ROUND_FACTOR) / _ROUND_FACTOR
    if down and rounded > value:
        return value
    if not down and rounded < value:
        return value
    return rounded


def nice_linear(lo: float, hi: float) -> Domain:
    """Wilkinson style step search that minimises expansion of ``[lo, hi]``."""

    span = hi - lo
    if span == 0 or not math.isfinite(span):
        return (lo, hi)
    if span < 0:
        lo, hi = hi, lo
        span = -span

    magnitude = 10 ** math.floor(math.log10(span))
    best_step = magnitude
    best_expansion = math.inf
    for q in NICE_Q:
        for scale in (0.1, 1.0, 10.0):
            step = q * magnitude * scale
            nice_lo = math.floor(lo / step) * step
            nice_hi = math.ceil(hi / step) * step
            expansion = (nice_hi - nice_lo) / span - 1
            if 0 <= expansion < best_expansion:
                best_expansion = expansion
                best_step = step

    nice_lo = math.floor(lo / best_step) * best_step
    nice_hi = math.ceil(hi / best_step) * best_step
    nice_lo = min(_round_outward(nice_lo, down=True), lo)
    nice_hi = max(_round_outward(nice_hi, down=False), hi)
    return (nice_lo, nice_hi)


def nice_domain(domain: Sequence[float], scale: str = "linear") -> Domain:
    """Return a rounded domain containing ``domain``.

    Zero span domains pass through unchanged; inverted linear domains are
    swapped and inverted log domains are returned as given.
    """

    lo, hi = float(domain[0]), float(domain[1])
    if scale == "log":
        return nice_log(lo, hi)
    return nice_linear(lo, hi)
