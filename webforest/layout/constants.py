"""Shared numeric constants for the layout engine and the SVG exporter.

Both consumers read these values from here so the live view and the
static export cannot drift apart.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

# Smallest positive value allowed anywhere log arithmetic happens.
LOG_EPSILON = 0.001

# Minimum horizontal pixel distance between two kept axis ticks.
MIN_TICK_SPACING = 50
DEFAULT_TICK_COUNT = 5
MAX_TICK_COUNT = 7

# Vertical offset between overlaid effects in the same row.
EFFECT_SPACING = 6

DEFAULT_EFFECT_COLORS = ("#2563eb", "#22c55e", "#f59e0b", "#ef4444", "#8b5cf6")
DEFAULT_MARKER_SHAPES = ("square", "circle", "diamond", "triangle")

# -------------------- Layout --------------------
DEFAULT_WIDTH = 800
DEFAULT_LABEL_WIDTH = 200
DEFAULT_COLUMN_WIDTH = 100
COLUMN_GAP = 16
AXIS_HEIGHT = 32
AXIS_LABEL_HEIGHT = 20
BOTTOM_MARGIN = 16
MIN_FOREST_WIDTH = 200
GROUP_HEADER_MULTIPLIER = 2.0
OVERALL_SUMMARY_MULTIPLIER = 1.5

# -------------------- Typography --------------------
TITLE_HEIGHT = 28
TITLE_BASELINE = 20
SUBTITLE_HEIGHT = 20
SUBTITLE_BASELINE = 16
CAPTION_HEIGHT = 16
FOOTNOTE_HEIGHT = 14
DEFAULT_FONT_SIZE = 14.0
REM_PX = 16.0
PT_PX = 4.0 / 3.0
TEXT_BASELINE_RATIO = 1.0 / 3.0

# -------------------- Spacing --------------------
INDENT_PER_LEVEL = 12
TEXT_PADDING = 10
WHISKER_HALF_HEIGHT = 4
EDGE_LABEL_THRESHOLD = 35

# -------------------- Auto width --------------------
AUTO_WIDTH_PADDING = 28
AUTO_WIDTH_MIN = 60
AUTO_WIDTH_MAX = 600
LABEL_WIDTH_MIN = 60
LABEL_WIDTH_MAX = 400
HEADER_FONT_SCALE = 1.05

VISUAL_MIN: Mapping[str, int] = MappingProxyType(
    {
        "sparkline": 100,
        "bar": 120,
        "icon": 60,
        "badge": 80,
        "stars": 90,
        "img": 60,
        "range": 100,
    }
)

COLUMN_GROUP_PADDING = 16

# Group header rows in the label column: chevron, gaps and count suffix.
GROUP_CHEVRON_WIDTH = 12
GROUP_HEADER_GAP = 6
GROUP_INTERNAL_PADDING = 16
GROUP_COUNT_FONT_SCALE = 0.75

BADGE_FONT_SCALE = 0.8
BADGE_PADDING = 4
BADGE_GAP = 6

# -------------------- Rendering --------------------
ROW_ODD_OPACITY = 0.06
DEPTH_BASE_OPACITY = 0.04
GROUP_HEADER_OPACITY = (0.15, 0.10, 0.06)
BAR_OPACITY = 0.7
BAR_LABEL_SPACE = 50


def depth_opacity(depth: int) -> float:
    """Background opacity for a data row nested ``depth`` levels deep."""

    if depth <= 0:
        return 0.0
    return DEPTH_BASE_OPACITY + depth * DEPTH_BASE_OPACITY


def group_header_opacity(depth: int) -> float:
    return GROUP_HEADER_OPACITY[min(max(depth, 0), len(GROUP_HEADER_OPACITY) - 1)]
