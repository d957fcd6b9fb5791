from __future__ import annotations

from webforest.layout.constants import MIN_TICK_SPACING
from webforest.layout.scale import make_scale
from webforest.layout.ticks import effective_tick_count, generate_ticks, log_candidates
from webforest.spec.models import AxisConfig


def test_explicit_tick_values_gain_the_null_tick():
    axis = AxisConfig(tick_values=[0.5, 2, 50])
    assert generate_ticks((0.25, 4.0), axis, "log", 1.0, 400) == [0.5, 1.0, 2.0]


def test_explicit_tick_values_without_null_tick():
    axis = AxisConfig(tick_values=[0.5, 2], null_tick=False)
    assert generate_ticks((0.25, 4.0), axis, "log", 1.0, 400) == [0.5, 2.0]


def test_degenerate_domain_yields_single_tick():
    assert generate_ticks((3.0, 3.0), AxisConfig(), "linear", 0.0, 400) == [3.0]


def test_tick_budget_follows_width():
    assert effective_tick_count(AxisConfig(), 120) == 2
    assert effective_tick_count(AxisConfig(), 1000) == 5
    assert effective_tick_count(AxisConfig(tick_count=10), 1000) == 7


def test_log_candidates_prefer_powers_of_ten_then_fives():
    assert log_candidates(0.1, 10.0, 5) == [0.1, 0.5, 1.0, 5.0, 10.0]
    assert log_candidates(0.1, 10.0, 3) == [0.1, 1.0, 10.0]


def test_kept_ticks_are_spaced_apart():
    domain = (-2.0, 8.0)
    width = 300.0
    ticks = generate_ticks(domain, AxisConfig(tick_count=7), "linear", 0.0, width)
    assert 0.0 in ticks
    scale = make_scale("linear", domain, (0.0, width))
    pixels = [scale(t) for t in ticks]
    assert all(b - a >= MIN_TICK_SPACING - 1e-9 for a, b in zip(pixels, pixels[1:]))
