"""Continuous scales mapping axis values onto forest-plot pixels."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence, Tuple, Union

from .constants import LOG_EPSILON

__all__ = ["LinearScale", "LogScale", "Scale", "make_scale"]


@dataclass(frozen=True)
class LinearScale:
    domain: Tuple[float, float]
    range: Tuple[float, float]

    kind = "linear"

    def __call__(self, value: float) -> float:
        d0, d1 = self.domain
        r0, r1 = self.range
        if d1 == d0:
            return (r0 + r1) / 2
        return r0 + (value - d0) / (d1 - d0) * (r1 - r0)

    def invert(self, pixel: float) -> float:
        d0, d1 = self.domain
        r0, r1 = self.range
        if r1 == r0:
            return d0
        return d0 + (pixel - r0) / (r1 - r0) * (d1 - d0)


@dataclass(frozen=True)
class LogScale:
    """Base-10 log scale. Inputs and domain are clamped to ``LOG_EPSILON``."""

    domain: Tuple[float, float]
    range: Tuple[float, float]

    kind = "log"

    def __post_init__(self) -> None:
        lo, hi = self.domain
        object.__setattr__(self, "domain", (max(lo, LOG_EPSILON), max(hi, LOG_EPSILON)))

    def __call__(self, value: float) -> float:
        d0, d1 = (math.log10(v) for v in self.domain)
        r0, r1 = self.range
        if d1 == d0:
            return (r0 + r1) / 2
        return r0 + (math.log10(max(value, LOG_EPSILON)) - d0) / (d1 - d0) * (r1 - r0)

    def invert(self, pixel: float) -> float:
        d0, d1 = (math.log10(v) for v in self.domain)
        r0, r1 = self.range
        if r1 == r0:
            return self.domain[0]
        return 10 ** (d0 + (pixel - r0) / (r1 - r0) * (d1 - d0))


Scale = Union[LinearScale, LogScale]


def make_scale(kind: str, domain: Sequence[float], range: Sequence[float]) -> Scale:
    """Build the scale named by ``kind`` ("linear" or "log")."""

    dom = (float(domain[0]), float(domain[1]))
    rng = (float(range[0]), float(range[1]))
    if kind == "log":
        return LogScale(dom, rng)
    return LinearScale(dom, rng)
