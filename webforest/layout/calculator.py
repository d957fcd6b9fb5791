"""Compose domain, ticks, widths and display rows into one immutable layout."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional, Sequence, Tuple

from webforest.spec.models import AxisConfig, ColumnSpec, ForestSpec, Row

from .constants import (
    AXIS_HEIGHT,
    AXIS_LABEL_HEIGHT,
    BOTTOM_MARGIN,
    CAPTION_HEIGHT,
    COLUMN_GAP,
    DEFAULT_WIDTH,
    FOOTNOTE_HEIGHT,
    GROUP_HEADER_MULTIPLIER,
    LOG_EPSILON,
    MIN_FOREST_WIDTH,
    OVERALL_SUMMARY_MULTIPLIER,
    SUBTITLE_BASELINE,
    SUBTITLE_HEIGHT,
    TITLE_BASELINE,
    TITLE_HEIGHT,
)
from .domain import AxisDomain, compute_domain
from .formatters import known_columns
from .nice import nice_domain
from .rows import DataRow, DisplayRow, build_display_rows
from .scale import Scale, make_scale
from .text import TextMeasurer, resolve_measurer
from .ticks import generate_ticks
from .widths import LABEL_COLUMN_ID, measure_column_widths, measure_label_width

__all__ = [
    "AxisLayout",
    "Layout",
    "LayoutOptions",
    "compute_axis",
    "compute_layout",
    "compute_plot_region",
]

LOG = logging.getLogger(__name__)

Domain = Tuple[float, float]


@dataclass(frozen=True)
class LayoutOptions:
    """Inputs that override what the calculator would otherwise derive.

    ``column_widths`` (including ``"__label__"``), ``forest_width`` and
    ``x_domain`` are reused verbatim when supplied, so a second consumer
    can reproduce the geometry of the first exactly.
    """

    width: Optional[float] = None
    height: Optional[float] = None
    column_widths: Optional[Mapping[str, float]] = None
    forest_width: Optional[float] = None
    x_domain: Optional[Tuple[float, float]] = None


@dataclass(frozen=True)
class AxisLayout:
    kind: str
    domain: AxisDomain
    limits: Domain
    plot_region: Domain
    clip_bounds: Domain
    ticks: Tuple[float, ...]
    null_value: float
    forest_width: float

    @property
    def scale(self) -> Scale:
        return make_scale(self.kind, self.plot_region, (0.0, self.forest_width))

    @property
    def null_x(self) -> Optional[float]:
        lo, hi = self.limits
        if not lo <= self.null_value <= hi:
            return None
        if self.kind == "log" and self.null_value <= 0:
            return None
        return self.scale(self.null_value)


@dataclass(frozen=True)
class Layout:
    total_width: float
    total_height: float
    padding: float
    forest_width: float
    forest_x: float
    header_height: float
    row_height: float
    plot_height: float
    axis_height: float
    row_positions: Tuple[float, ...]
    row_heights: Tuple[float, ...]
    null_x: Optional[float]
    show_overall_summary: bool
    summary_y: float
    label_width: float
    column_widths: Mapping[str, float]
    left_columns: Tuple[ColumnSpec, ...]
    right_columns: Tuple[ColumnSpec, ...]
    left_table_width: float
    right_table_width: float
    header_text_height: float
    footer_text_height: float
    title_y: float
    subtitle_y: float
    main_y: float
    footer_y: float
    display_rows: Tuple[DisplayRow, ...]
    axis: AxisLayout
    has_column_groups: bool = False

    @property
    def plot_y(self) -> float:
        """Top of the first row."""

        return self.main_y + self.header_height

    @property
    def axis_y(self) -> float:
        return self.plot_y + self.plot_height

    @property
    def right_table_x(self) -> float:
        return self.forest_x + self.forest_width + (COLUMN_GAP if self.forest_width else 0)

    def width_of(self, column_id: str) -> float:
        return self.column_widths.get(column_id, 0.0)


def compute_plot_region(
    limits: Sequence[float],
    axis: AxisConfig,
    scale: str,
    forest_width: float,
    point_size: float,
) -> Domain:
    """Widen ``limits`` by half a marker so edge markers stay on the plot."""

    lo, hi = float(limits[0]), float(limits[1])
    if not axis.marker_margin or forest_width <= 0 or hi <= lo:
        return (lo, hi)

    if scale == "log":
        log_lo = math.log(max(lo, LOG_EPSILON))
        log_hi = math.log(max(hi, LOG_EPSILON))
        margin = min((point_size / 2) * (log_hi - log_lo) / forest_width, 0.5)
        return (math.exp(log_lo - margin), math.exp(log_hi + margin))

    margin = (point_size / 2) * (hi - lo) / forest_width
    return (lo - margin, hi + margin)


def compute_axis(
    rows: Sequence[Row],
    spec: ForestSpec,
    forest_width: float,
    x_domain: Optional[Sequence[float]] = None,
) -> AxisLayout:
    data = spec.data
    axis = spec.axis
    kind = data.scale
    domain = compute_domain(rows, axis, kind, data.null_value, data.effects)

    if x_domain is not None:
        limits = (float(x_domain[0]), float(x_domain[1]))
        if kind == "log":
            limits = (max(limits[0], LOG_EPSILON), max(limits[1], LOG_EPSILON))
    elif domain.explicit:
        limits = domain.bounds
    else:
        limits = nice_domain(domain.bounds, kind)
    region = compute_plot_region(limits, axis, kind, forest_width, spec.theme.shapes.point_size)

    clip = (max(domain.clip_min, limits[0]), min(domain.clip_max, limits[1]))
    if clip[0] > clip[1]:
        clip = limits

    scale = make_scale(kind, region, (0.0, forest_width))
    ticks = generate_ticks(limits, axis, kind, data.null_value, forest_width, position=scale)
    return AxisLayout(
        kind=kind,
        domain=domain,
        limits=limits,
        plot_region=region,
        clip_bounds=clip,
        ticks=tuple(ticks),
        null_value=data.null_value,
        forest_width=forest_width,
    )


def _row_height(display_row: DisplayRow, row_height: float) -> float:
    if isinstance(display_row, DataRow) and display_row.is_spacer:
        return row_height / 2
    return row_height


def compute_layout(
    spec: ForestSpec,
    options: Optional[LayoutOptions] = None,
    measurer: Optional[TextMeasurer] = None,
    display_rows: Optional[Sequence[DisplayRow]] = None,
    rows: Optional[Sequence[Row]] = None,
) -> Layout:
    """Derive the complete geometry for ``spec``.

    ``rows`` defaults to every row of the spec; callers that filter or sort
    pass the visible rows along with matching ``display_rows``.
    """

    options = options or LayoutOptions()
    measurer = resolve_measurer(measurer=measurer)
    data = spec.data
    theme = spec.theme
    spacing = theme.spacing
    rows = list(data.rows if rows is None else rows)
    if display_rows is None:
        display_rows = build_display_rows(rows, data.groups)

    leaves = known_columns(spec.leaf_columns())
    left = tuple(c for c in leaves if c.position == "left")
    right = tuple(c for c in leaves if c.position == "right")

    overrides = dict(options.column_widths or {})
    widths = measure_column_widths(spec.columns, rows, theme.typography, measurer)
    widths.update({key: float(value) for key, value in overrides.items() if key != LABEL_COLUMN_ID})
    if LABEL_COLUMN_ID in overrides:
        label_width = float(overrides[LABEL_COLUMN_ID])
    else:
        label_width = float(
            measure_label_width(rows, data.groups, data.label_header, theme.typography, measurer)
        )
    widths[LABEL_COLUMN_ID] = label_width

    left_width = label_width + sum(widths.get(c.id, 0.0) for c in left)
    right_width = sum(widths.get(c.id, 0.0) for c in right)
    padding = spacing.padding
    base_width = options.width if options.width is not None else DEFAULT_WIDTH

    if not data.include_forest:
        forest_width = 0.0
    elif options.forest_width is not None:
        forest_width = float(options.forest_width)
    elif isinstance(spec.layout.plot_width, (int, float)):
        forest_width = float(spec.layout.plot_width)
    else:
        forest_width = max(
            base_width - left_width - right_width - 2 * COLUMN_GAP - 2 * padding,
            MIN_FOREST_WIDTH,
        )

    grouped = spec.has_column_groups()
    header_height = spacing.header_height * (GROUP_HEADER_MULTIPLIER if grouped else 1)
    row_height = spacing.row_height

    heights = tuple(_row_height(r, row_height) for r in display_rows)
    positions = []
    cursor = 0.0
    for height in heights:
        positions.append(cursor)
        cursor += height
    show_overall = data.overall is not None
    plot_height = cursor + (row_height * OVERALL_SUMMARY_MULTIPLIER if show_overall else 0)

    labels = spec.labels
    title_height = TITLE_HEIGHT if labels.title else 0
    subtitle_height = SUBTITLE_HEIGHT if labels.subtitle else 0
    header_text = title_height + subtitle_height
    header_text_height = header_text + (padding if header_text else 0)
    footer_text = (CAPTION_HEIGHT if labels.caption else 0) + (FOOTNOTE_HEIGHT if labels.footnote else 0)
    footer_text_height = footer_text + (padding if footer_text else 0)

    needed_width = 2 * padding + left_width + right_width + forest_width + 2 * COLUMN_GAP
    total_width = max(base_width, needed_width)
    natural_height = (
        header_text_height
        + padding
        + header_height
        + plot_height
        + AXIS_HEIGHT
        + AXIS_LABEL_HEIGHT
        + footer_text_height
        + BOTTOM_MARGIN
    )
    total_height = options.height if options.height is not None else natural_height

    main_y = header_text_height + padding
    forest_x = padding + left_width + (COLUMN_GAP if forest_width else 0)
    axis_layout = compute_axis(rows, spec, forest_width, options.x_domain)

    layout = Layout(
        total_width=total_width,
        total_height=total_height,
        padding=padding,
        forest_width=forest_width,
        forest_x=forest_x,
        header_height=header_height,
        row_height=row_height,
        plot_height=plot_height,
        axis_height=AXIS_HEIGHT,
        row_positions=tuple(positions),
        row_heights=heights,
        null_x=axis_layout.null_x if forest_width else None,
        show_overall_summary=show_overall,
        summary_y=plot_height - row_height,
        label_width=label_width,
        column_widths=MappingProxyType(dict(widths)),
        left_columns=left,
        right_columns=right,
        left_table_width=left_width,
        right_table_width=right_width,
        header_text_height=header_text_height,
        footer_text_height=footer_text_height,
        title_y=padding + TITLE_BASELINE,
        subtitle_y=padding + title_height + SUBTITLE_BASELINE,
        main_y=main_y,
        footer_y=main_y + header_height + plot_height + AXIS_HEIGHT + AXIS_LABEL_HEIGHT + padding,
        display_rows=tuple(display_rows),
        axis=axis_layout,
        has_column_groups=grouped,
    )
    LOG.debug(
        "Computed layout %.0fx%.0f (forest %.0f, %d rows)",
        total_width,
        total_height,
        forest_width,
        len(display_rows),
    )
    return layout
