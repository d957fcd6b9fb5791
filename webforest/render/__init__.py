"""Consumers of the layout engine: the live view store and the SVG exporter."""

from .context import FilterConfig, ForestContext, SortConfig
from .store import ForestStore, apply_filter, apply_sort
from .svg_export import ExportOptions, generate_image

__all__ = [
    "ExportOptions",
    "FilterConfig",
    "ForestContext",
    "ForestStore",
    "SortConfig",
    "apply_filter",
    "apply_sort",
    "generate_image",
]
