from __future__ import annotations

import math

from webforest.layout.constants import COLUMN_GROUP_PADDING, LABEL_WIDTH_MAX, LABEL_WIDTH_MIN, VISUAL_MIN
from webforest.layout.text import EstimatingMeasurer, parse_font_size
from webforest.layout.widths import measure_column_widths, measure_label_width
from webforest.spec.models import ColumnGroup, ColumnSpec, Group, Row, Typography

TYPO = Typography()


def test_fixed_widths_survive_a_short_group_header():
    group = ColumnGroup(
        id="g",
        header="G",
        columns=[ColumnSpec(id="a", width=100), ColumnSpec(id="b", width=100)],
    )
    assert measure_column_widths([group], [], TYPO) == {"a": 100.0, "b": 100.0}


def test_wide_group_header_spreads_over_leaves():
    header = "Outcomes reported at twelve months of follow up"
    group = ColumnGroup(
        id="g",
        header=header,
        columns=[ColumnSpec(id="a", width=40), ColumnSpec(id="b", width=40)],
    )
    widths = measure_column_widths([group], [], TYPO)

    font_size = parse_font_size(TYPO.font_size_base)
    needed = EstimatingMeasurer().measure(header, font_size) + COLUMN_GROUP_PADDING
    assert widths["a"] == widths["b"]
    assert widths["a"] + widths["b"] >= needed
    assert widths["a"] - 40 == math.ceil((needed - 80) / 2)


def test_visual_columns_respect_their_minimum():
    rows = [Row(id="1", metadata={"trend": [1, 2]})]
    widths = measure_column_widths([ColumnSpec(id="trend", type="sparkline")], rows, TYPO)
    assert widths["trend"] == VISUAL_MIN["sparkline"]


def test_unknown_columns_get_no_width():
    widths = measure_column_widths([ColumnSpec(id="odd", type="hologram")], [], TYPO)
    assert widths == {}


def test_label_width_is_clamped():
    assert measure_label_width([], [], None, TYPO) == LABEL_WIDTH_MIN
    long_label = [Row(id="1", label="x" * 200)]
    assert measure_label_width(long_label, [], None, TYPO) == LABEL_WIDTH_MAX


def test_nested_rows_are_wider_than_top_level_rows():
    label = "A moderately long study name"
    groups = [Group(id="g", label="")]
    flat = measure_label_width([Row(id="1", label=label)], groups, None, TYPO)
    nested = measure_label_width([Row(id="1", label=label, group_id="g")], groups, None, TYPO)
    assert nested > flat
