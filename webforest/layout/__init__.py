"""Layout and axis-scaling engine shared by every forest plot consumer."""

from .calculator import AxisLayout, Layout, LayoutOptions, compute_axis, compute_layout, compute_plot_region
from .clipping import IntervalGeometry, arrow_dimensions, arrow_path, resolve_interval
from .domain import AxisDomain, compute_domain
from .formatters import ColumnKind, formatter_for
from .nice import nice_domain
from .rows import DataRow, DisplayRow, GroupHeaderRow, build_display_rows
from .scale import LinearScale, LogScale, make_scale
from .text import EstimatingMeasurer, PillowMeasurer, TextMeasurer, estimate_text_width
from .ticks import generate_ticks
from .widths import LABEL_COLUMN_ID, measure_column_widths, measure_label_width

__all__ = [
    "AxisDomain",
    "AxisLayout",
    "ColumnKind",
    "DataRow",
    "DisplayRow",
    "EstimatingMeasurer",
    "GroupHeaderRow",
    "IntervalGeometry",
    "LABEL_COLUMN_ID",
    "Layout",
    "LayoutOptions",
    "LinearScale",
    "LogScale",
    "PillowMeasurer",
    "TextMeasurer",
    "arrow_dimensions",
    "arrow_path",
    "build_display_rows",
    "compute_axis",
    "compute_domain",
    "compute_layout",
    "compute_plot_region",
    "estimate_text_width",
    "formatter_for",
    "generate_ticks",
    "make_scale",
    "measure_column_widths",
    "measure_label_width",
    "nice_domain",
    "resolve_interval",
]
