from __future__ import annotations

import pytest

from webforest.exceptions import UnknownElementWarning
from webforest.layout.formatters import (
    ColumnKind,
    abbreviate_number,
    add_thousands_sep,
    format_interval,
    format_number,
    format_pvalue,
    format_tick,
    formatter_for,
    known_columns,
)
from webforest.spec.models import (
    ColumnOptions,
    ColumnSpec,
    EventsOptions,
    IntervalOptions,
    NumericOptions,
    PvalueOptions,
    Row,
)


def test_abbreviation_suffixes():
    assert abbreviate_number(5300) == "5.3K"
    assert abbreviate_number(1000) == "1K"
    assert abbreviate_number(2_500_000) == "2.5M"
    assert abbreviate_number(-7_000_000_000) == "-7B"
    assert abbreviate_number(999) == "999"


def test_abbreviation_rejects_trillions():
    with pytest.raises(ValueError):
        abbreviate_number(1e12)


def test_thousands_separator_leaves_decimals_alone():
    assert add_thousands_sep("1234567.8912", ",") == "1,234,567.8912"
    assert add_thousands_sep("999", ",") == "999"


def test_number_formatting_options():
    assert format_number(42.0) == "42"
    assert format_number(3.14159) == "3.14"
    assert format_number(None, ColumnOptions(na_text="NA")) == "NA"
    assert format_number(1234.5, ColumnOptions(numeric=NumericOptions(decimals=1, thousands_sep=","))) == "1,234.5"
    assert format_number(0.012345, ColumnOptions(numeric=NumericOptions(digits=3))) == "0.0123"
    assert format_number(15_000, ColumnOptions(numeric=NumericOptions(abbreviate=True))) == "15K"


def test_interval_text_and_imprecise_marker():
    assert format_interval(0.8, 0.61, 1.05) == "0.80 (0.61, 1.05)"
    imprecise = ColumnOptions(interval=IntervalOptions(imprecise_threshold=10))
    assert format_interval(1.0, 0.1, 5.0, imprecise) == "—"
    assert format_interval(1.0, None, 5.0) == "1.00"


def test_pvalue_formats():
    assert format_pvalue(0.25) == "0.25"
    assert format_pvalue(0.034) == "0.034"
    assert format_pvalue(0.0001) == "1.0×10⁻⁴"
    starred = ColumnOptions(pvalue=PvalueOptions(stars=True))
    assert format_pvalue(0.004, starred) == "0.0040**"
    abbreviated = ColumnOptions(pvalue=PvalueOptions(abbrev_threshold=0.001))
    assert format_pvalue(0.0002, abbreviated) == "<0.001"


def test_tick_labels():
    assert format_tick(0) == "0"
    assert format_tick(0.005) == "0.005"
    assert format_tick(0.5) == "0.50"
    assert format_tick(12.5) == "12.5"
    assert format_tick(250) == "250"


def test_percent_and_events_cells():
    row = Row(id="1", label="Trial", metadata={"rate": 0.256, "events": 1200, "total": 5000})

    percent = ColumnSpec(id="rate", type="percent")
    assert formatter_for(percent).cell_text(row, percent) == "25.6%"

    events = ColumnSpec(
        id="ev",
        type="events",
        options=ColumnOptions(events=EventsOptions(events_field="events", n_field="total")),
    )
    assert formatter_for(events).cell_text(row, events) == "1,200/5,000"


def test_visual_columns_do_not_contribute_measured_text():
    row = Row(id="1", label="Trial", metadata={"trend": [1, 2, 3], "score": 3})
    sparkline = ColumnSpec(id="trend", type="sparkline")
    stars = ColumnSpec(id="score", type="stars")

    assert formatter_for(sparkline).display_text(row, sparkline) == ""
    assert formatter_for(sparkline).series(row, sparkline) == [1.0, 2.0, 3.0]
    assert formatter_for(stars).display_text(row, stars) == ""
    assert formatter_for(stars).cell_text(row, stars) == "★★★☆☆"


def test_every_kind_has_a_formatter():
    for kind in ColumnKind:
        assert formatter_for(ColumnSpec(id="c", type=kind.value)) is not None


def test_unknown_column_types_warn_and_are_skipped():
    columns = [ColumnSpec(id="ok", type="text"), ColumnSpec(id="odd", type="hologram")]

    assert formatter_for(columns[1]) is None
    with pytest.warns(UnknownElementWarning, match="hologram"):
        kept = known_columns(columns)
    assert [c.id for c in kept] == ["ok"]
