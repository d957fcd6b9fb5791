"""Immutable snapshot of everything a live forest view draws from."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, FrozenSet, Literal, Mapping, Optional, Tuple

from ..layout.calculator import AxisLayout, Layout
from ..layout.rows import DisplayRow
from ..spec.models import ForestSpec, Row

__all__ = ["FilterConfig", "ForestContext", "SortConfig"]

FilterOperator = Literal["eq", "neq", "gt", "lt", "contains"]
SortDirection = Literal["asc", "desc"]


@dataclass(frozen=True)
class FilterConfig:
    field: str
    operator: FilterOperator
    value: Any = None


@dataclass(frozen=True)
class SortConfig:
    field: str
    direction: SortDirection = "asc"


@dataclass(frozen=True)
class ForestContext:
    """One published state of a :class:`~webforest.render.store.ForestStore`.

    A new context replaces the previous one on every change; nothing here is
    mutated after construction.
    """

    spec: ForestSpec
    layout: Layout
    width: Optional[float] = None
    height: Optional[float] = None
    column_widths: Mapping[str, float] = field(default_factory=dict)
    plot_width: Optional[float] = None
    collapsed: FrozenSet[str] = frozenset()
    filter: Optional[FilterConfig] = None
    sort: Optional[SortConfig] = None
    visible_rows: Tuple[Row, ...] = ()

    @property
    def display_rows(self) -> Tuple[DisplayRow, ...]:
        return self.layout.display_rows

    @property
    def axis(self) -> AxisLayout:
        return self.layout.axis
