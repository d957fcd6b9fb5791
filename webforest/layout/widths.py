"""Automatic column and label widths, including column-group expansion."""

from __future__ import annotations

import math
from typing import Dict, List, Optional, Sequence

from webforest.spec.models import ColumnDef, ColumnGroup, ColumnSpec, Group, Row, Typography

from .constants import (
    AUTO_WIDTH_MAX,
    AUTO_WIDTH_MIN,
    AUTO_WIDTH_PADDING,
    BADGE_FONT_SCALE,
    BADGE_GAP,
    BADGE_PADDING,
    COLUMN_GROUP_PADDING,
    DEFAULT_COLUMN_WIDTH,
    GROUP_CHEVRON_WIDTH,
    GROUP_COUNT_FONT_SCALE,
    GROUP_HEADER_GAP,
    GROUP_INTERNAL_PADDING,
    INDENT_PER_LEVEL,
    LABEL_WIDTH_MAX,
    LABEL_WIDTH_MIN,
    VISUAL_MIN,
)
from .formatters import formatter_for
from .rows import descendant_counts, row_depth
from .text import EstimatingMeasurer, TextMeasurer, parse_font_size

__all__ = [
    "LABEL_COLUMN_ID",
    "column_leaves",
    "measure_column_width",
    "measure_column_widths",
    "measure_label_width",
]

LABEL_COLUMN_ID = "__label__"

_SKIPPED_ROW_TYPES = {"header", "spacer"}


def column_leaves(column: ColumnDef) -> List[ColumnSpec]:
    """Leaves of ``column`` with a known type, in declared order."""

    leaves = column.leaves() if isinstance(column, ColumnGroup) else [column]
    return [leaf for leaf in leaves if formatter_for(leaf) is not None]


def measure_column_width(
    column: ColumnSpec,
    rows: Sequence[Row],
    typography: Typography,
    measurer: Optional[TextMeasurer] = None,
) -> int:
    """Width of one auto column: widest header or cell text plus padding."""

    measurer = measurer or EstimatingMeasurer()
    formatter = formatter_for(column)
    font_size = parse_font_size(typography.font_size_base)
    widest = 0.0
    if column.header:
        widest = measurer.measure(
            column.header,
            font_size * typography.header_font_scale,
            weight=typography.font_weight_bold,
        )
    if formatter is not None:
        for row in rows:
            if row.row_type in _SKIPPED_ROW_TYPES:
                continue
            text = formatter.display_text(row, column)
            if text:
                widest = max(widest, measurer.measure(text, font_size))
    minimum = VISUAL_MIN.get(column.type, AUTO_WIDTH_MIN)
    return min(AUTO_WIDTH_MAX, max(minimum, math.ceil(widest + AUTO_WIDTH_PADDING)))


def _effective(column: ColumnSpec, widths: Dict[str, float]) -> float:
    if column.id in widths:
        return widths[column.id]
    if isinstance(column.width, (int, float)):
        return float(column.width)
    return float(AUTO_WIDTH_MIN)


def _expand_groups(
    column: ColumnDef,
    widths: Dict[str, float],
    font_size: float,
    weight: int,
    measurer: TextMeasurer,
) -> None:
    if not isinstance(column, ColumnGroup):
        return
    for child in column.columns:
        _expand_groups(child, widths, font_size, weight, measurer)
    if not column.header:
        return
    leaves = column_leaves(column)
    if not leaves:
        return
    needed = measurer.measure(column.header, font_size, weight=weight) + COLUMN_GROUP_PADDING
    total = sum(_effective(leaf, widths) for leaf in leaves)
    if needed > total:
        extra = math.ceil((needed - total) / len(leaves))
        for leaf in leaves:
            widths[leaf.id] = _effective(leaf, widths) + extra


def measure_column_widths(
    columns: Sequence[ColumnDef],
    rows: Sequence[Row],
    typography: Typography,
    measurer: Optional[TextMeasurer] = None,
) -> Dict[str, float]:
    """Pixel width for every known leaf column.

    Auto (or unset) columns are measured from their content; fixed columns
    keep their declared width. Column groups whose header is wider than
    their leaves then spread the shortfall over every leaf, fixed ones
    included.
    """

    measurer = measurer or EstimatingMeasurer()
    widths: Dict[str, float] = {}
    for column in columns:
        for leaf in column_leaves(column):
            if leaf.is_auto:
                widths[leaf.id] = float(measure_column_width(leaf, rows, typography, measurer))
            elif isinstance(leaf.width, (int, float)):
                widths[leaf.id] = float(leaf.width)
            else:
                widths[leaf.id] = float(DEFAULT_COLUMN_WIDTH)

    font_size = parse_font_size(typography.font_size_base)
    for column in columns:
        _expand_groups(column, widths, font_size, typography.font_weight_bold, measurer)
    return widths


def measure_label_width(
    rows: Sequence[Row],
    groups: Sequence[Group],
    label_header: Optional[str],
    typography: Typography,
    measurer: Optional[TextMeasurer] = None,
) -> int:
    """Width of the label column, clamped to ``[60, 400]``."""

    measurer = measurer or EstimatingMeasurer()
    font_size = parse_font_size(typography.font_size_base)
    groups_by_id = {group.id: group for group in groups}
    widest = 0.0

    if label_header:
        widest = measurer.measure(
            label_header,
            font_size * typography.header_font_scale,
            weight=typography.font_weight_bold,
        )

    for row in rows:
        if not row.label:
            continue
        indent = (row_depth(row, groups_by_id) + row.style.indent) * INDENT_PER_LEVEL
        width = measurer.measure(row.label, font_size) + indent
        if row.style.badge:
            badge = measurer.measure(str(row.style.badge), font_size * BADGE_FONT_SCALE)
            width += BADGE_GAP + badge + BADGE_PADDING * 2
        widest = max(widest, width)

    counts = descendant_counts(rows, groups)
    for group in groups:
        if not group.label:
            continue
        count_text = f"({counts.get(group.id, 0)})"
        width = (
            group.depth * INDENT_PER_LEVEL
            + GROUP_CHEVRON_WIDTH
            + GROUP_HEADER_GAP
            + measurer.measure(group.label, font_size, weight=typography.font_weight_bold)
            + GROUP_HEADER_GAP
            + measurer.measure(count_text, font_size * GROUP_COUNT_FONT_SCALE)
            + GROUP_INTERNAL_PADDING
        )
        widest = max(widest, width)

    return min(LABEL_WIDTH_MAX, max(LABEL_WIDTH_MIN, math.ceil(widest + AUTO_WIDTH_PADDING)))
