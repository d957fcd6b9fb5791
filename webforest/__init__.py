"""Forest-plot layout engine and static SVG exporter.

``webforest`` turns a :class:`~webforest.spec.models.ForestSpec` into a
deterministic :class:`~webforest.layout.Layout` (axis domain, ticks, column
widths, row positions) and draws it as SVG. The live view store and the
static exporter share the same calculators, so an export seeded with the
store's :meth:`~webforest.render.ForestStore.export_options` matches the
on-screen geometry.
"""

from __future__ import annotations

from .exceptions import InvalidSpecificationError, UnknownElementWarning, WebforestError
from .layout import Layout, LayoutOptions, compute_layout
from .render import ExportOptions, ForestContext, ForestStore, generate_image
from .spec import ForestSpec, validate_spec
from .viz import ThemeManager

__version__ = "0.4.0"

__all__ = [
    "ExportOptions",
    "ForestContext",
    "ForestSpec",
    "ForestStore",
    "InvalidSpecificationError",
    "Layout",
    "LayoutOptions",
    "ThemeManager",
    "UnknownElementWarning",
    "WebforestError",
    "__version__",
    "compute_layout",
    "generate_image",
    "validate_spec",
]
