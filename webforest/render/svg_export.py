"""Static SVG export of a forest plot.

The exporter draws from the same :class:`~webforest.layout.Layout` the live
view uses. Passing the live view's widths and domain through
:class:`ExportOptions` reproduces its geometry exactly.
"""
from __future__ import annotations

import logging
import re
import warnings
from dataclasses import dataclass, replace
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from ..config.settings import RenderSettings
from ..exceptions import UnknownElementWarning
from ..layout.calculator import Layout, LayoutOptions, compute_layout
from ..layout.clipping import clamp, resolve_interval
from ..layout.constants import (
    BADGE_FONT_SCALE,
    BADGE_GAP,
    BADGE_PADDING,
    BAR_LABEL_SPACE,
    BAR_OPACITY,
    EDGE_LABEL_THRESHOLD,
    GROUP_CHEVRON_WIDTH,
    GROUP_COUNT_FONT_SCALE,
    GROUP_HEADER_GAP,
    INDENT_PER_LEVEL,
    ROW_ODD_OPACITY,
    TEXT_BASELINE_RATIO,
    TEXT_PADDING,
    WHISKER_HALF_HEIGHT,
    depth_opacity,
    group_header_opacity,
)
from ..layout.effects import effect_style, effect_y_offset, point_size, resolve_effects
from ..layout.formatters import (
    BarFormatter,
    ColumnFormatter,
    SparklineFormatter,
    format_tick,
    formatter_for,
)
from ..layout.rows import DataRow, GroupHeaderRow
from ..layout.text import TextMeasurer, parse_font_size, resolve_measurer, truncate_text
from ..layout.widths import column_leaves
from ..spec.models import (
    Annotation,
    ColumnGroup,
    ColumnSpec,
    ForestSpec,
    GroupHeaderStyles,
    Row,
)
from ..runtime_config import RuntimeSettings
from ..spec.validation import validate_spec
from ..viz.core.svg import SvgDocument, SvgElement, format_number
from ..viz.core.theme import ThemeManager, rebase_theme

__all__ = ["ExportOptions", "apply_default_theme", "generate_image"]

LOG = logging.getLogger(__name__)

_DASHES: Mapping[str, Optional[str]] = {"solid": None, "dashed": "6,4", "dotted": "2,2"}
_HEX_COLOR = re.compile(r"^#([0-9a-fA-F]{6})$")
_CHEVRON_OPEN = "▾"
_CHEVRON_CLOSED = "▸"


@dataclass(frozen=True)
class ExportOptions(LayoutOptions):
    """Layout overrides plus output-only settings.

    ``scale`` multiplies the outer ``width``/``height`` of the document; the
    view box stays in layout units.
    """

    scale: float = 1.0
    background_color: Optional[str] = None


def _px(value: float) -> str:
    return f"{format_number(value)}px"


def _translate(x: float, y: float) -> str:
    return f"translate({format_number(x)},{format_number(y)})"


def _rgba(color: str, opacity: float) -> Optional[str]:
    match = _HEX_COLOR.match(color)
    if not match:
        return None
    digits = match.group(1)
    r, g, b = (int(digits[i : i + 2], 16) for i in (0, 2, 4))
    return f"rgba({r}, {g}, {b}, {format_number(opacity, 2)})"


def _text_position(x: float, width: float, align: Optional[str]) -> Tuple[float, str]:
    if align == "right":
        return x + width - TEXT_PADDING, "end"
    if align == "center":
        return x + width / 2, "middle"
    return x + TEXT_PADDING, "start"


def sparkline_path(values: Sequence[float], x: float, y: float, width: float, height: float) -> str:
    """``M``/``L`` path through ``values`` scaled into the given box."""

    if not values:
        return ""
    lo, hi = min(values), max(values)
    span = (hi - lo) or 1.0
    step = width / (len(values) - 1) if len(values) > 1 else 0.0
    commands = []
    for index, value in enumerate(values):
        px = x + index * step
        py = y + height - (value - lo) / span * height
        commands.append(f"{'M' if index == 0 else 'L'}{px:.1f},{py:.1f}")
    return " ".join(commands)


def _marker(
    parent: SvgElement, shape: str, x: float, y: float, size: float, color: str, opacity: float
) -> SvgElement:
    attrs: Dict[str, Any] = {"fill": color}
    if opacity < 1:
        attrs["fill_opacity"] = opacity
    if shape == "circle":
        return parent.circle(x, y, size, **attrs)
    if shape == "diamond":
        return parent.polygon(((x, y - size), (x + size, y), (x, y + size), (x - size, y)), **attrs)
    if shape == "triangle":
        return parent.polygon(((x, y - size), (x + size, y + size), (x - size, y + size)), **attrs)
    return parent.rect(x - size, y - size, size * 2, size * 2, **attrs)


def _diamond(
    parent: SvgElement, x_lower: float, x_point: float, x_upper: float, y: float, height: float, **attrs: Any
) -> SvgElement:
    half = height / 2
    return parent.polygon(
        ((x_lower, y), (x_point, y - half), (x_upper, y), (x_point, y + half)), **attrs
    )


class _ForestPainter:
    """Draws one computed layout into an :class:`SvgDocument`."""

    def __init__(self, spec: ForestSpec, layout: Layout, measurer: TextMeasurer) -> None:
        self.spec = spec
        self.layout = layout
        self.measurer = measurer
        self.theme = spec.theme
        self.colors = spec.theme.colors
        typography = spec.theme.typography
        self.font_family = typography.font_family
        self.font_sm = parse_font_size(typography.font_size_sm)
        self.font_base = parse_font_size(typography.font_size_base)
        self.font_lg = parse_font_size(typography.font_size_lg)
        self.log_scale = spec.data.scale == "log"
        visible = [r.row for r in layout.display_rows if isinstance(r, DataRow)]
        self.bar_max = self._bar_maxima(visible)

    # -------------------- helpers --------------------
    def _baseline(self, y: float, height: float, font_size: Optional[float] = None) -> float:
        size = self.font_base if font_size is None else font_size
        return y + height / 2 + size * TEXT_BASELINE_RATIO

    def _text(self, parent: SvgElement, x: float, y: float, value: str, **attrs: Any) -> SvgElement:
        attrs.setdefault("font_size", _px(self.font_base))
        attrs.setdefault("fill", self.colors.foreground)
        return parent.text_node(x, y, value, **attrs)

    def _hline(self, parent: SvgElement, y: float, width: float = 1, **attrs: Any) -> SvgElement:
        layout = self.layout
        return parent.line(
            layout.padding,
            y,
            layout.total_width - layout.padding,
            y,
            stroke=self.colors.border,
            stroke_width=width,
            **attrs,
        )

    def _bar_maxima(self, rows: Sequence[Row]) -> Dict[str, float]:
        maxima: Dict[str, float] = {}
        for column in (*self.layout.left_columns, *self.layout.right_columns):
            if column.type != "bar":
                continue
            largest = 0.0
            for row in rows:
                value = row.value(column.source_field)
                if isinstance(value, (int, float)) and not isinstance(value, bool):
                    largest = max(largest, float(value))
            maxima[column.id] = largest if largest > 0 else 1.0
        return maxima

    # -------------------- header --------------------
    def draw_titles(self, root: SvgElement) -> None:
        labels = self.spec.labels
        layout = self.layout
        typography = self.theme.typography
        if labels.title:
            self._text(
                root,
                layout.padding,
                layout.title_y,
                labels.title,
                font_size=_px(self.font_lg),
                font_weight=typography.font_weight_bold,
            )
        if labels.subtitle:
            self._text(root, layout.padding, layout.subtitle_y, labels.subtitle, fill=self.colors.secondary)

    def draw_column_headers(self, root: SvgElement, side: str) -> None:
        layout = self.layout
        include_label = side == "left"
        x = layout.padding if include_label else layout.right_table_x
        y = layout.main_y
        height = layout.header_height
        weight = self.theme.typography.font_weight_medium
        bold = self.theme.typography.font_weight_bold
        label_header = self.spec.data.label_header if include_label else None

        if label_header:
            self._text(root, x + TEXT_PADDING, self._baseline(y, height), label_header, font_weight=weight)
        cursor = x + (layout.label_width if include_label else 0)

        if not layout.has_column_groups:
            leaves = layout.left_columns if include_label else layout.right_columns
            for column in leaves:
                cursor += self._header_cell(root, column, cursor, y, height, weight)
            return

        tier = height / 2
        for column in self.spec.columns:
            if column.position != side:
                continue
            leaves = column_leaves(column)
            if not leaves:
                continue
            if not isinstance(column, ColumnGroup):
                cursor += self._header_cell(root, column, cursor, y, height, weight)
                continue
            span = sum(layout.width_of(leaf.id) for leaf in leaves)
            self._text(
                root,
                cursor + span / 2,
                self._baseline(y, tier),
                column.header,
                font_weight=bold,
                text_anchor="middle",
            )
            root.line(cursor, y + tier, cursor + span, y + tier, stroke=self.colors.border, stroke_width=1, opacity=0.5)
            sub = cursor
            for leaf in leaves:
                sub += self._header_cell(root, leaf, sub, y + tier, height - tier, weight)
            cursor += span

    def _header_cell(
        self, root: SvgElement, column: ColumnSpec, x: float, y: float, height: float, weight: int
    ) -> float:
        width = self.layout.width_of(column.id)
        text_x, anchor = _text_position(x, width, column.header_align or column.align)
        header = truncate_text(column.header, width, self.font_base, TEXT_PADDING)
        self._text(root, text_x, self._baseline(y, height), header, font_weight=weight, text_anchor=anchor)
        return width

    # -------------------- table rows --------------------
    def draw_rows(self, root: SvgElement) -> None:
        layout = self.layout
        grouped = bool(self.spec.data.groups)
        banding = self.theme.layout.banding
        for index, display_row in enumerate(layout.display_rows):
            y = layout.plot_y + layout.row_positions[index]
            height = layout.row_heights[index]
            if isinstance(display_row, GroupHeaderRow):
                self._group_header(root, display_row, y, height)
                continue
            if display_row.is_spacer:
                continue
            row = display_row.row
            self._row_background(root, row, display_row.depth, index, y, height, grouped, banding)
            self._label_cell(root, row, display_row.depth, layout.padding, y, height)
            cursor = layout.padding + layout.label_width
            for column in layout.left_columns:
                cursor += self._cell(root, row, column, cursor, y, height)
            cursor = layout.right_table_x
            for column in layout.right_columns:
                cursor += self._cell(root, row, column, cursor, y, height)
            if row.row_type == "summary":
                self._hline(root, y, width=2)
            self._hline(root, y + height)

    def _row_background(
        self,
        root: SvgElement,
        row: Row,
        depth: int,
        index: int,
        y: float,
        height: float,
        grouped: bool,
        banding: bool,
    ) -> None:
        layout = self.layout
        width = layout.total_width - 2 * layout.padding
        if row.style.bg:
            root.rect(layout.padding, y, width, height, fill=row.style.bg)
            return
        opacity = depth_opacity(depth)
        if banding and not grouped and index % 2 == 1:
            opacity = max(opacity, ROW_ODD_OPACITY)
        if opacity > 0:
            root.rect(layout.padding, y, width, height, fill=self.colors.muted, opacity=opacity)

    def _group_header(self, root: SvgElement, header: GroupHeaderRow, y: float, height: float) -> None:
        layout = self.layout
        styles = self.theme.group_headers or GroupHeaderStyles()
        level = styles.level(header.depth)
        font_size = parse_font_size(level.font_size)
        indent_step = styles.indent_per_level if self.theme.group_headers else INDENT_PER_LEVEL
        indent = header.depth * indent_step
        x = layout.padding
        width = layout.total_width - 2 * layout.padding

        opacity = group_header_opacity(header.depth)
        fill = level.background or _rgba(self.colors.primary, opacity)
        if fill is None:
            root.rect(x, y, width, height, fill=self.colors.primary, fill_opacity=opacity)
        else:
            root.rect(x, y, width, height, fill=fill)
        if level.border_bottom:
            root.line(x, y + height, x + width, y + height, stroke=self.colors.border, stroke_width=1, opacity=0.5)

        baseline = self._baseline(y, height, font_size)
        cursor = x + TEXT_PADDING + indent
        chevron = _CHEVRON_CLOSED if header.collapsed else _CHEVRON_OPEN
        self._text(root, cursor, baseline, chevron, font_size=_px(font_size), fill=self.colors.secondary)
        cursor += GROUP_CHEVRON_WIDTH + GROUP_HEADER_GAP
        label = header.group.label or header.group.id
        self._text(
            root,
            cursor,
            baseline,
            label,
            font_size=_px(font_size),
            font_weight=level.font_weight,
            font_style="italic" if level.italic else None,
        )
        cursor += self.measurer.measure(label, font_size, weight=level.font_weight) + GROUP_HEADER_GAP
        self._text(
            root,
            cursor,
            baseline,
            f"({header.row_count})",
            font_size=_px(font_size * GROUP_COUNT_FONT_SCALE),
            fill=self.colors.muted,
        )
        self._hline(root, y + height)

    def _label_cell(self, root: SvgElement, row: Row, depth: int, x: float, y: float, height: float) -> None:
        style = row.style
        typography = self.theme.typography
        indent = (depth + style.indent) * INDENT_PER_LEVEL
        strong = style.bold or style.emphasis or row.row_type in {"header", "summary"}
        if style.color:
            color = style.color
        elif style.muted:
            color = self.colors.muted
        elif style.accent:
            color = self.colors.accent
        else:
            color = self.colors.foreground

        available = self.layout.label_width - indent - TEXT_PADDING * 2
        label = truncate_text(row.label, available, self.font_base)
        text_x = x + TEXT_PADDING + indent
        self._text(
            root,
            text_x,
            self._baseline(y, height),
            label,
            font_weight=typography.font_weight_bold if strong else typography.font_weight_normal,
            font_style="italic" if style.italic else None,
            fill=color,
        )
        if not style.badge:
            return

        badge = str(style.badge)
        badge_font = self.font_base * BADGE_FONT_SCALE
        badge_height = badge_font + BADGE_PADDING * 2
        badge_width = self.measurer.measure(badge, badge_font) + BADGE_PADDING * 2
        badge_x = text_x + self.measurer.measure(label, self.font_base) + BADGE_GAP
        badge_y = y + (height - badge_height) / 2
        root.rect(badge_x, badge_y, badge_width, badge_height, rx=3, fill=self.colors.primary, opacity=0.15)
        self._text(
            root,
            badge_x + badge_width / 2,
            badge_y + badge_height / 2 + badge_font * 0.35,
            badge,
            font_size=_px(badge_font),
            font_weight=typography.font_weight_medium,
            text_anchor="middle",
            fill=self.colors.primary,
        )

    def _cell(self, root: SvgElement, row: Row, column: ColumnSpec, x: float, y: float, height: float) -> float:
        width = self.layout.width_of(column.id)
        formatter = formatter_for(column)
        if formatter is None or row.row_type == "header":
            return width
        if isinstance(formatter, BarFormatter):
            self._bar_cell(root, formatter, row, column, x, y, width, height)
        elif isinstance(formatter, SparklineFormatter):
            self._sparkline_cell(root, formatter, row, column, x, y, width, height)
        else:
            self._text_cell(root, formatter, row, column, x, y, width, height)
        return width

    def _text_cell(
        self,
        root: SvgElement,
        formatter: ColumnFormatter,
        row: Row,
        column: ColumnSpec,
        x: float,
        y: float,
        width: float,
        height: float,
    ) -> None:
        text = formatter.cell_text(row, column)
        if not text:
            return
        options = column.options
        fill = self.colors.foreground
        if column.type == "icon" and options.icon and options.icon.color:
            fill = options.icon.color
        elif column.type == "stars":
            fill = (options.stars.color if options.stars else None) or self.colors.accent
        elif column.type == "badge":
            colors = options.badge.colors if options.badge else {}
            fill = colors.get(text, self.colors.primary)
        text = truncate_text(text, width, self.font_base, TEXT_PADDING)
        text_x, anchor = _text_position(x, width, column.align)
        self._text(root, text_x, self._baseline(y, height), text, text_anchor=anchor, fill=fill)

    def _bar_cell(
        self,
        root: SvgElement,
        formatter: BarFormatter,
        row: Row,
        column: ColumnSpec,
        x: float,
        y: float,
        width: float,
        height: float,
    ) -> None:
        value = formatter.raw(row, column)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return
        options = column.options.bar
        maximum = (options.max_value if options else None) or self.bar_max.get(column.id) or 100.0
        color = (options.color if options else None) or self.colors.primary
        bar_height = self.theme.shapes.point_size * 2
        area = width - TEXT_PADDING * 2 - BAR_LABEL_SPACE
        bar_width = max(0.0, min(float(value) / maximum * area, area))
        root.rect(
            x + TEXT_PADDING,
            y + height / 2 - bar_height / 2,
            bar_width,
            bar_height,
            fill=color,
            opacity=BAR_OPACITY,
            rx=2,
        )
        label = formatter.cell_text(row, column)
        if label:
            self._text(root, x + width - TEXT_PADDING, self._baseline(y, height), label, text_anchor="end")

    def _sparkline_cell(
        self,
        root: SvgElement,
        formatter: SparklineFormatter,
        row: Row,
        column: ColumnSpec,
        x: float,
        y: float,
        width: float,
        height: float,
    ) -> None:
        series = formatter.series(row, column)
        if len(series) < 2:
            return
        options = column.options.sparkline
        spark_height = options.height if options else 16
        color = (options.color if options else None) or self.colors.primary
        path = sparkline_path(
            series, x + TEXT_PADDING, y + height / 2 - spark_height / 2, width - TEXT_PADDING * 2, spark_height
        )
        root.path(path, fill="none", stroke=color, stroke_width=1.5)

    # -------------------- forest --------------------
    def draw_forest(self, root: SvgElement) -> None:
        layout = self.layout
        if layout.forest_width <= 0:
            return
        forest = root.group(class_="forest", transform=_translate(layout.forest_x, layout.plot_y))
        self._gridlines(forest)
        if layout.null_x is not None:
            forest.line(
                layout.null_x,
                0,
                layout.null_x,
                layout.plot_height,
                stroke=self.colors.muted,
                stroke_width=1,
                stroke_dasharray=_DASHES["dashed"],
            )
        for annotation in self.spec.annotations:
            self._annotation(forest, annotation)
        for index, display_row in enumerate(layout.display_rows):
            if isinstance(display_row, GroupHeaderRow) or display_row.is_spacer:
                continue
            if display_row.row.row_type == "header":
                continue
            centre = layout.row_positions[index] + layout.row_heights[index] / 2
            self._intervals(forest, display_row.row, centre)
        self._overall(root, forest)

    def _gridlines(self, forest: SvgElement) -> None:
        axis = self.spec.axis
        if not axis.gridlines:
            return
        scale = self.layout.axis.scale
        for tick in self.layout.axis.ticks:
            x = scale(tick)
            if not 0 <= x <= self.layout.forest_width:
                continue
            forest.line(
                x,
                0,
                x,
                self.layout.plot_height,
                stroke=self.colors.border,
                stroke_width=1,
                stroke_dasharray=_DASHES.get(axis.gridline_style),
            )

    def _annotation(self, forest: SvgElement, annotation: Annotation) -> None:
        if annotation.type != "reference_line":
            LOG.warning("Skipping annotation %r with unknown type %r", annotation.id, annotation.type)
            warnings.warn(
                f"Unknown annotation type {annotation.type!r}; annotation skipped",
                UnknownElementWarning,
                stacklevel=2,
            )
            return
        if annotation.x is None or (self.log_scale and annotation.x <= 0):
            return
        x = self.layout.axis.scale(annotation.x)
        if not 0 <= x <= self.layout.forest_width:
            return
        color = annotation.color or self.colors.accent
        forest.line(
            x,
            0,
            x,
            self.layout.plot_height,
            stroke=color,
            stroke_width=annotation.width,
            stroke_dasharray=_DASHES.get(annotation.style),
            opacity=annotation.opacity,
        )
        if annotation.label:
            self._text(forest, x, -4, annotation.label, font_size="10px", text_anchor="middle", fill=color)

    def _intervals(self, forest: SvgElement, row: Row, centre: float) -> None:
        layout = self.layout
        data = self.spec.data
        shapes = self.theme.shapes
        effects = resolve_effects(row, data.effects, log_scale=self.log_scale)
        is_summary = row.row_type == "summary"
        for effect in effects:
            y = centre + effect_y_offset(effect.index, len(effects))
            geometry = resolve_interval(
                effect,
                layout.axis.scale,
                layout.axis.clip_bounds,
                layout.forest_width,
                y,
                shapes.line_width,
                limits=layout.axis.limits,
                is_summary=is_summary,
            )
            style = effect_style(row, effect, self.theme)
            if is_summary:
                _diamond(
                    forest,
                    geometry.x_lower,
                    geometry.x_point,
                    geometry.x_upper,
                    y,
                    shapes.summary_height,
                    fill=self.colors.summary_fill,
                    stroke=self.colors.summary_border,
                    stroke_width=1,
                )
                continue

            line_color = self.colors.interval_line if effect.is_primary else style.color
            forest.line(
                geometry.x_lower, y, geometry.x_upper, y, stroke=line_color, stroke_width=shapes.line_width
            )
            for clipped, x, arrow in (
                (geometry.clipped_lower, geometry.x_lower, geometry.lower_arrow),
                (geometry.clipped_upper, geometry.x_upper, geometry.upper_arrow),
            ):
                if clipped and arrow:
                    forest.path(arrow, fill=line_color)
                else:
                    forest.line(
                        x,
                        y - WHISKER_HALF_HEIGHT,
                        x,
                        y + WHISKER_HALF_HEIGHT,
                        stroke=line_color,
                        stroke_width=shapes.line_width,
                    )
            size = point_size(row, shapes.point_size, data.weight_col, primary=effect.is_primary)
            _marker(forest, style.shape, geometry.x_point, y, size, style.color, style.opacity)

    def _overall(self, root: SvgElement, forest: SvgElement) -> None:
        layout = self.layout
        overall = self.spec.data.overall
        if overall is None or not layout.show_overall_summary:
            return
        values = (overall.lower, overall.point, overall.upper)
        if self.log_scale and min(values) <= 0:
            return
        y = layout.summary_y + layout.row_height / 2
        scale = layout.axis.scale
        x_lower, x_point, x_upper = (clamp(scale(v), 0.0, layout.forest_width) for v in values)
        _diamond(
            forest,
            x_lower,
            x_point,
            x_upper,
            y,
            self.theme.shapes.summary_height,
            fill=self.colors.summary_fill,
            stroke=self.colors.summary_border,
            stroke_width=1,
        )
        self._text(
            root,
            layout.padding + TEXT_PADDING,
            self._baseline(layout.plot_y + layout.summary_y, layout.row_height),
            "Overall",
            font_weight=self.theme.typography.font_weight_bold,
        )

    # -------------------- axis and footer --------------------
    def draw_axis(self, root: SvgElement) -> None:
        layout = self.layout
        width = layout.forest_width
        if width <= 0:
            return
        axis = root.group(class_="axis", transform=_translate(layout.forest_x, layout.axis_y))
        axis.line(0, 0, width, 0, stroke=self.colors.border, stroke_width=1)
        scale = layout.axis.scale
        for tick in layout.axis.ticks:
            x = scale(tick)
            if x < -0.5 or x > width + 0.5:
                continue
            axis.line(x, 0, x, 4, stroke=self.colors.border, stroke_width=1)
            if x < EDGE_LABEL_THRESHOLD:
                anchor, offset = "start", 2
            elif x > width - EDGE_LABEL_THRESHOLD:
                anchor, offset = "end", -2
            else:
                anchor, offset = "middle", 0
            self._text(
                axis,
                x + offset,
                16,
                format_tick(tick),
                font_size=_px(self.font_sm),
                text_anchor=anchor,
                fill=self.colors.secondary,
            )
        if self.spec.data.axis_label:
            self._text(
                axis,
                width / 2,
                28 + self.font_sm,
                self.spec.data.axis_label,
                font_weight=self.theme.typography.font_weight_medium,
                text_anchor="middle",
            )

    def draw_footer(self, root: SvgElement) -> None:
        labels = self.spec.labels
        layout = self.layout
        y = layout.footer_y
        if labels.caption:
            y += self.font_sm
            self._text(
                root, layout.padding, y, labels.caption, font_size=_px(self.font_sm), fill=self.colors.secondary
            )
        if labels.footnote:
            y += self.font_sm + 4
            self._text(
                root,
                layout.padding,
                y,
                labels.footnote,
                font_size=_px(self.font_sm),
                font_style="italic",
                fill=self.colors.muted,
            )

    def paint(self, doc: SvgDocument) -> None:
        layout = self.layout
        root = doc.root
        self.draw_titles(root)
        self._hline(root, layout.main_y, width=2)
        self.draw_column_headers(root, "left")
        self.draw_column_headers(root, "right")
        self._hline(root, layout.main_y + layout.header_height, width=2)
        self.draw_rows(root)
        self.draw_forest(root)
        self.draw_axis(root)
        self.draw_footer(root)


def apply_default_theme(
    spec: ForestSpec, settings: RenderSettings, themes: Optional[ThemeManager] = None
) -> ForestSpec:
    """Swap in the configured default theme when ``spec`` names no theme of its own."""

    theme = rebase_theme(spec.theme, settings.default_theme, themes)
    if theme is spec.theme:
        return spec
    return spec.model_copy(update={"theme": theme})


def generate_image(
    spec: ForestSpec | Mapping[str, Any],
    options: Optional[ExportOptions] = None,
    *,
    settings: Optional[RenderSettings] = None,
    measurer: Optional[TextMeasurer] = None,
) -> str:
    """Render ``spec`` to SVG markup.

    The specification is validated before anything is drawn; a malformed one
    raises :class:`~webforest.exceptions.InvalidSpecificationError`. Width,
    domain and column-width overrides in ``options`` are used verbatim.
    Without explicit ``settings`` the persisted render settings are used.
    """

    if settings is None:
        settings = RuntimeSettings().persisted()
    forest_spec = apply_default_theme(validate_spec(spec), settings)
    options = options or ExportOptions()
    if options.scale <= 0:
        raise ValueError(f"scale must be positive, got {options.scale!r}")
    if options.width is None:
        options = replace(options, width=settings.default_width)

    measurer = resolve_measurer(settings, measurer)
    layout = compute_layout(forest_spec, options, measurer)

    doc = SvgDocument(
        width=layout.total_width * options.scale,
        height=layout.total_height * options.scale,
        viewbox=(0.0, 0.0, layout.total_width, layout.total_height),
        background=options.background_color or forest_spec.theme.colors.background,
        font_family=forest_spec.theme.typography.font_family,
    )
    _ForestPainter(forest_spec, layout, measurer).paint(doc)
    LOG.debug("Exported forest plot %.0fx%.0f at scale %s", layout.total_width, layout.total_height, options.scale)
    return doc.to_string(pretty=settings.pretty_svg, precision=settings.svg_precision)
