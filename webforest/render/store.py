"""Mutable owner of a live forest view.

:class:`ForestStore` keeps the user-controlled inputs (container size,
collapsed groups, filter, sort and width overrides) and republishes a fresh
:class:`~webforest.render.context.ForestContext` whenever one of them
changes. The axis is always derived from every row of the specification so
filtering and collapsing never move it.
"""
from __future__ import annotations

import logging
from functools import cmp_to_key
from typing import Any, Dict, Iterable, List, Mapping, Optional

from ..config.settings import RenderSettings
from ..exceptions import WebforestError
from ..layout.calculator import LayoutOptions, compute_layout
from ..layout.rows import build_display_rows
from ..layout.text import EstimatingMeasurer, TextMeasurer
from ..runtime_config import RuntimeSettings
from ..spec.models import ForestSpec, Row
from ..spec.validation import validate_spec
from ..viz.core.theme import ThemeManager
from .context import FilterConfig, ForestContext, SortConfig
from .svg_export import ExportOptions, apply_default_theme

__all__ = [
    "FILTER_OPERATORS",
    "ForestStore",
    "MIN_COLUMN_WIDTH",
    "MIN_PLOT_WIDTH",
    "apply_filter",
    "apply_sort",
]

LOG = logging.getLogger(__name__)

MIN_COLUMN_WIDTH = 40.0
MIN_PLOT_WIDTH = 100.0
FILTER_OPERATORS = frozenset({"eq", "neq", "gt", "lt", "contains"})


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _matches(value: Any, config: FilterConfig) -> bool:
    op = config.operator
    if op == "eq":
        return value == config.value
    if op == "neq":
        return value != config.value
    if op in {"gt", "lt"}:
        if not (_is_number(value) and _is_number(config.value)):
            return False
        return value > config.value if op == "gt" else value < config.value
    if op == "contains":
        if not (isinstance(value, str) and isinstance(config.value, str)):
            return False
        return config.value.casefold() in value.casefold()
    return True


def apply_filter(rows: Iterable[Row], config: Optional[FilterConfig]) -> List[Row]:
    """Rows whose ``config.field`` (metadata first) satisfies the operator."""

    rows = list(rows)
    if config is None:
        return rows
    return [row for row in rows if _matches(row.value(config.field), config)]


def _compare(a: Any, b: Any) -> int:
    if _is_number(a) and _is_number(b):
        return (a > b) - (a < b)
    if isinstance(a, str) and isinstance(b, str):
        left, right = a.casefold(), b.casefold()
        return (left > right) - (left < right)
    return 0


def apply_sort(rows: Iterable[Row], config: Optional[SortConfig]) -> List[Row]:
    """Stable sort on ``config.field``.

    Numbers compare numerically and strings case-insensitively; any other
    pairing compares equal and keeps its input order.
    """

    rows = list(rows)
    if config is None:
        return rows
    sign = -1 if config.direction == "desc" else 1
    field = config.field
    return sorted(rows, key=cmp_to_key(lambda a, b: sign * _compare(a.value(field), b.value(field))))


class ForestStore:
    """Owns the mutable inputs of one forest view and derives its context."""

    def __init__(
        self,
        spec: ForestSpec | Mapping[str, Any] | None = None,
        *,
        width: Optional[float] = None,
        height: Optional[float] = None,
        measurer: Optional[TextMeasurer] = None,
        themes: Optional[ThemeManager] = None,
        settings: Optional[RenderSettings] = None,
    ) -> None:
        self._spec: Optional[ForestSpec] = None
        self._width = width
        self._height = height
        self._measurer: TextMeasurer = measurer or EstimatingMeasurer()
        self._themes = themes or ThemeManager()
        self._settings = settings if settings is not None else RuntimeSettings().persisted()
        self._collapsed: set[str] = set()
        self._filter: Optional[FilterConfig] = None
        self._sort: Optional[SortConfig] = None
        self._column_widths: Dict[str, float] = {}
        self._plot_width: Optional[float] = None
        self._context: Optional[ForestContext] = None
        if spec is not None:
            self.set_spec(spec)

    # -------------------- state --------------------
    @property
    def spec(self) -> Optional[ForestSpec]:
        return self._spec

    @property
    def context(self) -> ForestContext:
        if self._context is None:
            raise WebforestError("No forest specification has been loaded")
        return self._context

    @property
    def collapsed(self) -> frozenset[str]:
        return frozenset(self._collapsed)

    @property
    def column_widths(self) -> Mapping[str, float]:
        return dict(self._column_widths)

    @property
    def plot_width(self) -> Optional[float]:
        return self._plot_width

    @property
    def measurer(self) -> TextMeasurer:
        return self._measurer

    # -------------------- actions --------------------
    def set_spec(self, spec: ForestSpec | Mapping[str, Any]) -> ForestContext:
        """Load ``spec`` and seed the collapsed set from its groups.

        When the theme of ``spec`` carries no name it starts from the
        configured ``default_theme``.
        """

        self._spec = apply_default_theme(validate_spec(spec), self._settings, self._themes)
        self._collapsed = {group.id for group in self._spec.data.groups if group.collapsed}
        return self._recompute("spec")

    def set_dimensions(self, width: Optional[float], height: Optional[float] = None) -> Optional[ForestContext]:
        self._width = width
        self._height = height
        return self._recompute("dimensions")

    def toggle_group(self, group_id: str, collapsed: Optional[bool] = None) -> Optional[ForestContext]:
        """Flip ``group_id`` or force it to ``collapsed`` when given."""

        should_collapse = (group_id not in self._collapsed) if collapsed is None else collapsed
        if should_collapse:
            self._collapsed.add(group_id)
        else:
            self._collapsed.discard(group_id)
        return self._recompute("collapse")

    def set_filter(
        self, field: Optional[str], operator: str = "eq", value: Any = None
    ) -> Optional[ForestContext]:
        """Filter rows on ``field``; ``None`` clears the filter."""

        if field is None:
            self._filter = None
        else:
            if operator not in FILTER_OPERATORS:
                raise ValueError(f"Unknown filter operator {operator!r}")
            self._filter = FilterConfig(field, operator, value)  # type: ignore[arg-type]
        return self._recompute("filter")

    def sort_by(self, field: str, direction: str = "asc") -> Optional[ForestContext]:
        """Sort rows on ``field``; direction ``"none"`` clears the sort."""

        if direction == "none":
            self._sort = None
        elif direction in {"asc", "desc"}:
            self._sort = SortConfig(field, direction)  # type: ignore[arg-type]
        else:
            raise ValueError(f"Unknown sort direction {direction!r}")
        return self._recompute("sort")

    def set_column_width(self, column_id: str, width: float) -> Optional[ForestContext]:
        self._column_widths[column_id] = max(MIN_COLUMN_WIDTH, float(width))
        return self._recompute("column width")

    def set_plot_width(self, width: Optional[float]) -> Optional[ForestContext]:
        self._plot_width = None if width is None else max(MIN_PLOT_WIDTH, float(width))
        return self._recompute("plot width")

    def set_theme(self, name: str) -> Optional[ForestContext]:
        """Swap the specification's theme for the registered theme ``name``."""

        theme = self._themes.get(name)
        if self._spec is None:
            return None
        self._spec = self._spec.model_copy(update={"theme": theme})
        return self._recompute("theme")

    def reset_state(self) -> Optional[ForestContext]:
        """Clear every user override; the loaded spec and theme are kept."""

        self._collapsed = set()
        self._filter = None
        self._sort = None
        self._column_widths = {}
        self._plot_width = None
        return self._recompute("reset")

    def measure(self) -> Optional[ForestContext]:
        """Re-derive widths with the current measurer."""

        return self._recompute("measure")

    def fonts_ready(self, measurer: TextMeasurer) -> Optional[ForestContext]:
        """Replace the measurer once real fonts load and measure again.

        Calling this repeatedly with equivalent measurers yields equal
        contexts.
        """

        self._measurer = measurer
        return self._recompute("fonts ready")

    def export_options(self, *, scale: float = 1.0, background_color: Optional[str] = None) -> ExportOptions:
        """Overrides that make a static export match the current view."""

        context = self.context
        layout = context.layout
        return ExportOptions(
            width=layout.total_width,
            height=self._height,
            column_widths=dict(layout.column_widths),
            forest_width=layout.forest_width,
            x_domain=layout.axis.limits,
            scale=scale,
            background_color=background_color,
        )

    # -------------------- derivation --------------------
    def visible_rows(self) -> List[Row]:
        if self._spec is None:
            return []
        return apply_sort(apply_filter(self._spec.data.rows, self._filter), self._sort)

    def _recompute(self, reason: str) -> Optional[ForestContext]:
        spec = self._spec
        if spec is None:
            return None
        visible = self.visible_rows()
        display_rows = build_display_rows(visible, spec.data.groups, self._collapsed)
        options = LayoutOptions(
            width=self._width,
            height=self._height,
            column_widths=dict(self._column_widths) or None,
            forest_width=self._plot_width,
        )
        layout = compute_layout(spec, options, self._measurer, display_rows=display_rows)
        self._context = ForestContext(
            spec=spec,
            layout=layout,
            width=self._width,
            height=self._height,
            column_widths=dict(self._column_widths),
            plot_width=self._plot_width,
            collapsed=frozenset(self._collapsed),
            filter=self._filter,
            sort=self._sort,
            visible_rows=tuple(visible),
        )
        LOG.debug("Recomputed forest context after %s (%d display rows)", reason, len(display_rows))
        return self._context
