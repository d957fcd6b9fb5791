from __future__ import annotations

import pytest

from webforest.layout.domain import compute_domain
from webforest.layout.nice import nice_domain
from webforest.layout.ticks import generate_ticks
from webforest.spec.models import AxisConfig, Row

hypothesis = pytest.importorskip("hypothesis")
given = hypothesis.given
st = hypothesis.strategies
settings = hypothesis.settings

STARTS = st.floats(min_value=-1e6, max_value=1e6, allow_nan=False, allow_infinity=False)
SPANS = st.floats(min_value=1e-3, max_value=1e6, allow_nan=False, allow_infinity=False)
LOG_STARTS = st.floats(min_value=1e-2, max_value=100.0, allow_nan=False, allow_infinity=False)
LOG_FACTORS = st.floats(min_value=1.01, max_value=1000.0, allow_nan=False, allow_infinity=False)
WIDTHS = st.floats(min_value=50.0, max_value=2000.0, allow_nan=False, allow_infinity=False)


@settings(deadline=None)
@given(lo=STARTS, span=SPANS)
def test_nice_linear_contains_input(lo: float, span: float) -> None:
    """Rounding never shrinks a linear domain."""

    hi = lo + span
    nice_lo, nice_hi = nice_domain((lo, hi), "linear")
    assert nice_lo <= lo
    assert nice_hi >= hi


@settings(deadline=None)
@given(lo=LOG_STARTS, factor=LOG_FACTORS)
def test_nice_log_contains_input_and_stays_positive(lo: float, factor: float) -> None:
    """Log rounding contains the input and stays strictly positive."""

    hi = lo * factor
    nice_lo, nice_hi = nice_domain((lo, hi), "log")
    assert 0 < nice_lo <= lo
    assert nice_hi >= hi


@settings(deadline=None)
@given(lo=STARTS, span=SPANS, width=WIDTHS)
def test_linear_ticks_never_fewer_than_two(lo: float, span: float, width: float) -> None:
    """A non-degenerate linear domain always gets at least two ticks."""

    ticks = generate_ticks((lo, lo + span), AxisConfig(), "linear", 0.0, width)
    assert len(ticks) >= 2
    assert ticks == sorted(ticks)


@settings(deadline=None)
@given(lo=LOG_STARTS, factor=LOG_FACTORS, width=WIDTHS)
def test_log_ticks_positive_and_at_least_two(lo: float, factor: float, width: float) -> None:
    """Log ticks are strictly positive and never fewer than two."""

    ticks = generate_ticks((lo, lo * factor), AxisConfig(), "log", 1.0, width)
    assert len(ticks) >= 2
    assert all(tick > 0 for tick in ticks)


@settings(deadline=None)
@given(
    below=st.floats(min_value=0.1, max_value=1e4, allow_nan=False, allow_infinity=False),
    above=st.floats(min_value=0.1, max_value=1e4, allow_nan=False, allow_infinity=False),
    width=WIDTHS,
)
def test_null_tick_present_when_null_in_domain(below: float, above: float, width: float) -> None:
    """``null_tick`` with the null inside the domain keeps the null as a tick."""

    ticks = generate_ticks((-below, above), AxisConfig(null_tick=True), "linear", 0.0, width)
    assert 0.0 in ticks


@settings(deadline=None)
@given(
    points=st.lists(
        st.floats(min_value=-50.0, max_value=50.0, allow_nan=False, allow_infinity=False),
        min_size=1,
        max_size=12,
    )
)
def test_log_domain_bounds_are_positive(points: list[float]) -> None:
    """Whatever the estimates, a log domain never reaches zero or below."""

    rows = [
        Row(id=str(i), label=f"r{i}", point=p, lower=p - 1, upper=p + 1)
        for i, p in enumerate(points)
    ]
    domain = compute_domain(rows, AxisConfig(), "log", 1.0)
    assert domain.min > 0
    assert domain.max > 0
    assert domain.clip_min > 0
    assert domain.clip_max > 0
