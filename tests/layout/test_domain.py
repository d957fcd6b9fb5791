"""Axis domain policy: symmetry, null inclusion, CI extension and explicit bounds."""

from __future__ import annotations

import pytest

from webforest.layout.calculator import compute_layout
from webforest.layout.domain import compute_domain, resolve_symmetric
from webforest.spec.models import AxisConfig, Row


def _rows(*estimates):
    rows = []
    for i, estimate in enumerate(estimates):
        if isinstance(estimate, tuple):
            point, lower, upper = estimate
        else:
            point, lower, upper = estimate, None, None
        rows.append(Row(id=f"r{i}", label=f"Study {i}", point=point, lower=lower, upper=upper))
    return rows


STRADDLING = _rows((-1.0, -1.5, -0.5), (3.0, 2.5, 3.5))


def test_auto_symmetric_centres_on_null() -> None:
    domain = compute_domain(STRADDLING, AxisConfig(), "linear", 0.0)

    assert domain.symmetric
    assert domain.bounds == (-3.0, 3.0)
    assert domain.clip_bounds == (-1.5, 3.5)


def test_symmetry_can_be_switched_off() -> None:
    domain = compute_domain(STRADDLING, AxisConfig(symmetric=False), "linear", 0.0)

    assert not domain.symmetric
    assert domain.bounds == pytest.approx((-1.9, 3.9))
    assert domain.clip_bounds == (-1.5, 3.5)


def test_symmetry_can_be_forced_on_one_sided_data() -> None:
    rows = _rows(1.0, 2.0)

    auto = compute_domain(rows, AxisConfig(), "linear", 0.0)
    forced = compute_domain(rows, AxisConfig(symmetric=True), "linear", 0.0)

    assert not auto.symmetric
    assert auto.bounds == pytest.approx((-0.2, 2.2))
    assert forced.symmetric
    assert forced.bounds == (-2.0, 2.0)


def test_resolve_symmetric_needs_estimates_on_both_sides() -> None:
    assert resolve_symmetric(AxisConfig(), [-1.0, 3.0], 0.0)
    assert not resolve_symmetric(AxisConfig(), [1.0, 3.0], 0.0)
    assert not resolve_symmetric(AxisConfig(symmetric=False), [-1.0, 3.0], 0.0)
    assert resolve_symmetric(AxisConfig(symmetric=True), [1.0, 3.0], 0.0)


def test_log_symmetry_is_measured_in_log_space() -> None:
    domain = compute_domain(_rows(0.5, 4.0), AxisConfig(), "log", 1.0)

    assert domain.symmetric
    assert domain.bounds == pytest.approx((0.25, 4.0))


def test_log_symmetry_forced_and_forbidden() -> None:
    forced = compute_domain(_rows(2.0, 4.0), AxisConfig(symmetric=True), "log", 1.0)
    forbidden = compute_domain(_rows(0.5, 4.0), AxisConfig(symmetric=False), "log", 1.0)

    assert forced.symmetric
    assert forced.bounds == pytest.approx((0.25, 4.0))
    assert not forbidden.symmetric
    assert forbidden.bounds == pytest.approx((0.15, 4.35))


def test_null_is_left_out_when_include_null_is_off() -> None:
    rows = _rows(5.0, 6.0)

    with_null = compute_domain(rows, AxisConfig(), "linear", 0.0)
    without_null = compute_domain(rows, AxisConfig(include_null=False), "linear", 0.0)

    assert with_null.bounds == pytest.approx((-0.6, 6.6))
    assert without_null.bounds == pytest.approx((4.9, 6.1))


def test_ci_bound_at_the_truncation_limit_is_included() -> None:
    # core range is [0, 2], so bounds up to 4 beyond it are kept
    rows = _rows((2.0, 1.5, 6.0), (1.0, -4.01, 1.5))

    domain = compute_domain(rows, AxisConfig(), "linear", 0.0)

    assert domain.clip_bounds == (0.0, 6.0)
    assert domain.bounds == pytest.approx((-0.2, 6.2))


def test_padding_scales_with_the_estimate_range() -> None:
    rows = _rows(5.0, 6.0)

    wide = compute_domain(rows, AxisConfig(include_null=False, padding=0.5), "linear", 0.0)
    tight = compute_domain(rows, AxisConfig(include_null=False, padding=0.0), "linear", 0.0)

    assert wide.bounds == pytest.approx((4.5, 6.5))
    assert tight.bounds == (5.0, 6.0)
    assert wide.clip_bounds == tight.clip_bounds == (5.0, 6.0)


def test_single_explicit_side_keeps_the_other_derived() -> None:
    domain = compute_domain(_rows(5.0, 6.0), AxisConfig(range_min=2.0), "linear", 0.0)

    assert not domain.explicit
    assert not domain.symmetric
    assert domain.min == 2.0
    assert domain.max == pytest.approx(6.6)
    assert domain.clip_bounds == (2.0, 6.0)


def test_explicit_min_above_the_data_never_inverts() -> None:
    rows = _rows((5.0, 4.5, 5.5), (6.0, 5.5, 6.5))

    domain = compute_domain(rows, AxisConfig(range_min=10.0), "linear", 0.0)

    assert domain.min == 10.0
    assert domain.max == pytest.approx(10.6)
    assert domain.clip_min <= domain.clip_max


def test_explicit_max_below_the_data_never_inverts() -> None:
    domain = compute_domain(_rows(5.0, 6.0), AxisConfig(range_max=-3.0), "linear", 0.0)

    assert domain.max == -3.0
    assert domain.min == pytest.approx(-3.6)
    assert domain.clip_min <= domain.clip_max


def test_explicit_min_stays_the_lower_limit_after_rounding(make_spec) -> None:
    rows = [
        {"id": "a", "label": "A", "point": 5.0, "lower": 4.5, "upper": 5.5},
        {"id": "b", "label": "B", "point": 6.0, "lower": 5.5, "upper": 6.5},
    ]
    spec = make_spec(rows, theme={"axis": {"rangeMin": 10}})

    lo, hi = compute_layout(spec).axis.limits

    assert lo <= 10.0 < hi
