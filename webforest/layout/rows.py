"""Flatten the row/group hierarchy into an ordered display sequence."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Collection, Dict, Iterable, List, Optional, Sequence, Union

from webforest.spec.models import MAX_GROUP_DEPTH, Group, Row

__all__ = [
    "DataRow",
    "DisplayRow",
    "GroupHeaderRow",
    "build_display_rows",
    "descendant_counts",
    "row_depth",
]


@dataclass(frozen=True)
class GroupHeaderRow:
    group: Group
    depth: int
    row_count: int
    collapsed: bool = False

    type = "group_header"


@dataclass(frozen=True)
class DataRow:
    row: Row
    depth: int

    type = "data"

    @property
    def is_spacer(self) -> bool:
        return self.row.row_type == "spacer"


DisplayRow = Union[GroupHeaderRow, DataRow]


def row_depth(row: Row, groups_by_id: Dict[str, Group]) -> int:
    """Data rows sit one level below their group header; ungrouped rows at 0."""

    if not row.group_id:
        return 0
    group = groups_by_id.get(row.group_id)
    return (group.depth if group else 0) + 1


def _bucket(rows: Iterable[Row]) -> Dict[Optional[str], List[Row]]:
    buckets: Dict[Optional[str], List[Row]] = defaultdict(list)
    for row in rows:
        buckets[row.group_id or None].append(row)
    return buckets


def _headed_groups(buckets: Dict[Optional[str], List[Row]], groups_by_id: Dict[str, Group]) -> set[str]:
    headed: set[str] = set()
    for group_id in buckets:
        hops = 0
        current = group_id
        while current and current not in headed and hops <= MAX_GROUP_DEPTH:
            if current not in groups_by_id:
                break
            headed.add(current)
            current = groups_by_id[current].parent_id
            hops += 1
    return headed


def _under_collapsed(group: Group, groups_by_id: Dict[str, Group], collapsed: Collection[str]) -> bool:
    current = group.parent_id
    seen = {group.id}
    while current in groups_by_id and current not in seen:
        if current in collapsed:
            return True
        seen.add(current)
        current = groups_by_id[current].parent_id
    return False


def descendant_counts(rows: Sequence[Row], groups: Sequence[Group]) -> Dict[str, int]:
    """Rows nested beneath each group, transitively."""

    groups_by_id = {group.id: group for group in groups}
    counts: Dict[str, int] = {group.id: 0 for group in groups}
    for row in rows:
        current = row.group_id
        seen: set[str] = set()
        while current in groups_by_id and current not in seen:
            seen.add(current)
            counts[current] += 1
            current = groups_by_id[current].parent_id
    return counts


def build_display_rows(
    rows: Sequence[Row],
    groups: Sequence[Group],
    collapsed: Optional[Collection[str]] = None,
) -> List[DisplayRow]:
    """Interleave group headers with their rows in pre-order.

    ``collapsed`` defaults to the groups flagged ``collapsed`` in the input.
    A collapsed group shows its header only; groups below a collapsed
    ancestor are skipped entirely.
    """

    if collapsed is None:
        collapsed = {group.id for group in groups if group.collapsed}
    collapsed = set(collapsed)

    groups_by_id = {group.id: group for group in groups}
    buckets = _bucket(rows)
    headed = _headed_groups(buckets, groups_by_id)
    counts = descendant_counts(rows, groups)

    children: Dict[Optional[str], List[Group]] = defaultdict(list)
    for group in groups:
        if group.id not in headed:
            continue
        parent = group.parent_id if group.parent_id in groups_by_id else None
        children[parent].append(group)

    result: List[DisplayRow] = []
    visited: set[str] = set()

    def emit(group_id: Optional[str]) -> None:
        if group_id is not None:
            if group_id in visited:
                return
            visited.add(group_id)
            group = groups_by_id[group_id]
            is_collapsed = group_id in collapsed
            result.append(
                GroupHeaderRow(group, group.depth, counts.get(group_id, 0), collapsed=is_collapsed)
            )
            if is_collapsed:
                return
        for child in children.get(group_id, ()):
            emit(child.id)
        for row in buckets.get(group_id, ()):
            result.append(DataRow(row, row_depth(row, groups_by_id)))

    emit(None)
    # Groups caught in a parent cycle are unreachable from the root.
    for group in groups:
        if group.id in headed and group.id not in visited and not _under_collapsed(group, groups_by_id, collapsed):
            emit(group.id)

    # Rows pointing at an undeclared group still render, ungrouped.
    for group_id, bucket in buckets.items():
        if group_id is not None and group_id not in groups_by_id:
            result.extend(DataRow(row, 0) for row in bucket)
    return result
