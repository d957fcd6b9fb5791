from __future__ import annotations

import pytest

from webforest.layout.clipping import arrow_dimensions, arrow_path, resolve_interval
from webforest.layout.effects import ResolvedEffect
from webforest.layout.scale import LinearScale

SCALE = LinearScale((0.0, 10.0), (0.0, 100.0))


def test_arrow_dimensions_scale_with_line_width():
    thin = arrow_dimensions(1.0)
    thick = arrow_dimensions(3.0)

    assert (thin.width, thin.height) == (4, 6)
    assert (thick.width, thick.height) == (9, 12)


def test_arrow_path_points_outward():
    dims = arrow_dimensions(1.0)
    assert arrow_path("left", 0, 10, dims) == "M 0 10 L 4 7 L 4 13 Z"
    assert arrow_path("right", 100, 10, dims) == "M 100 10 L 96 7 L 96 13 Z"


def test_interval_inside_bounds_is_untouched():
    effect = ResolvedEffect(0, point=5.0, lower=2.0, upper=8.0)
    geometry = resolve_interval(effect, SCALE, (0.0, 10.0), 100.0, 14.0, 1.5)

    assert not geometry.clipped
    assert (geometry.x_lower, geometry.x_point, geometry.x_upper) == (20.0, 50.0, 80.0)
    assert geometry.lower_arrow is None and geometry.upper_arrow is None


def test_clipped_ends_run_to_the_axis_limits():
    effect = ResolvedEffect(0, point=5.0, lower=-5.0, upper=20.0)
    geometry = resolve_interval(effect, SCALE, (1.0, 9.0), 100.0, 14.0, 1.5, limits=(0.5, 9.5))

    assert geometry.clipped_lower and geometry.clipped_upper
    assert geometry.x_lower == pytest.approx(5.0)
    assert geometry.x_upper == pytest.approx(95.0)
    assert geometry.lower_arrow.startswith("M 5 14")
    assert geometry.upper_arrow.startswith("M 95 14")


def test_clipped_end_leaves_a_visible_line_past_the_point():
    # the clip bound sits on the point itself; the line still reaches the edge
    effect = ResolvedEffect(0, point=9.0, lower=8.0, upper=40.0)
    geometry = resolve_interval(effect, SCALE, (1.0, 9.0), 100.0, 14.0, 1.5, limits=(0.0, 10.0))

    assert geometry.clipped_upper
    assert geometry.x_point == pytest.approx(90.0)
    assert geometry.x_upper == 100.0
    assert geometry.upper_arrow.startswith("M 100 14")


def test_limits_outside_the_plot_are_clamped():
    effect = ResolvedEffect(0, point=5.0, lower=-5.0, upper=20.0)
    geometry = resolve_interval(effect, SCALE, (1.0, 9.0), 100.0, 14.0, 1.5, limits=(-2.0, 12.0))

    assert (geometry.x_lower, geometry.x_upper) == (0.0, 100.0)


def test_clipped_ends_default_to_the_plot_boundary():
    effect = ResolvedEffect(0, point=5.0, lower=-5.0, upper=20.0)
    geometry = resolve_interval(effect, SCALE, (1.0, 9.0), 100.0, 14.0, 1.5)

    assert (geometry.x_lower, geometry.x_upper) == (0.0, 100.0)


def test_point_outside_plot_is_clamped():
    effect = ResolvedEffect(0, point=12.0, lower=11.0, upper=13.0)
    geometry = resolve_interval(effect, SCALE, (0.0, 10.0), 100.0, 14.0, 1.5)

    assert geometry.x_point == 100.0
    assert not geometry.clipped_lower
    assert geometry.clipped_upper


def test_summary_rows_are_never_clipped():
    effect = ResolvedEffect(0, point=5.0, lower=-5.0, upper=20.0)
    geometry = resolve_interval(effect, SCALE, (1.0, 9.0), 100.0, 14.0, 1.5, is_summary=True)

    assert geometry.is_summary
    assert not geometry.clipped
    assert (geometry.x_lower, geometry.x_upper) == (0.0, 100.0)
