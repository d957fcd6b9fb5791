"""Small SVG scene graph used by the static exporter.

Nodes keep their attribute values unformatted; numbers are rendered at
serialisation time with a fixed precision so identical layouts always
produce byte-identical markup.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

SVG_NS = "http://www.w3.org/2000/svg"

# Attribute names that cannot be spelled as Python keywords.
_ATTR_ALIASES = {
    "class_": "class",
    "stroke_width": "stroke-width",
    "stroke_dasharray": "stroke-dasharray",
    "stroke_linecap": "stroke-linecap",
    "stroke_opacity": "stroke-opacity",
    "fill_opacity": "fill-opacity",
    "font_family": "font-family",
    "font_size": "font-size",
    "font_weight": "font-weight",
    "font_style": "font-style",
    "text_anchor": "text-anchor",
    "dominant_baseline": "dominant-baseline",
    "clip_path": "clip-path",
}


def format_number(value: float, precision: int = 3) -> str:
    """Render ``value`` with at most ``precision`` decimals and no trailing zeros."""

    if not math.isfinite(value):
        return "0"
    text = f"{value:.{precision}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in {"-0", ""}:
        return "0"
    return text


@dataclass
class SvgElement:
    """A single SVG node with ordered children."""

    tag: str
    attributes: Dict[str, object] = field(default_factory=dict)
    children: List["SvgElement"] = field(default_factory=list)
    text: Optional[str] = None

    def set(self, **attrs: object) -> "SvgElement":
        """Assign attributes, skipping ``None`` values, and return ``self``."""

        for key, value in attrs.items():
            if value is None:
                continue
            self.attributes[_ATTR_ALIASES.get(key, key)] = value
        return self

    def add(self, *children: "SvgElement") -> "SvgElement":
        self.children.extend(children)
        return self

    # Child factories ---------------------------------------------------
    def group(self, **attrs: object) -> "SvgElement":
        el = SvgElement("g").set(**attrs)
        self.add(el)
        return el

    def rect(self, x: float, y: float, width: float, height: float, **attrs: object) -> "SvgElement":
        el = SvgElement("rect").set(x=x, y=y, width=width, height=height, **attrs)
        self.add(el)
        return el

    def line(self, x1: float, y1: float, x2: float, y2: float, **attrs: object) -> "SvgElement":
        el = SvgElement("line").set(x1=x1, y1=y1, x2=x2, y2=y2, **attrs)
        self.add(el)
        return el

    def circle(self, cx: float, cy: float, r: float, **attrs: object) -> "SvgElement":
        el = SvgElement("circle").set(cx=cx, cy=cy, r=r, **attrs)
        self.add(el)
        return el

    def path(self, d: str, **attrs: object) -> "SvgElement":
        el = SvgElement("path").set(d=d, **attrs)
        self.add(el)
        return el

    def polygon(self, points: Iterable[Tuple[float, float]], **attrs: object) -> "SvgElement":
        el = SvgElement("polygon").set(points=tuple(points), **attrs)
        self.add(el)
        return el

    def polyline(self, points: Iterable[Tuple[float, float]], **attrs: object) -> "SvgElement":
        el = SvgElement("polyline").set(points=tuple(points), **attrs)
        self.add(el)
        return el

    def text_node(self, x: float, y: float, value: str, **attrs: object) -> "SvgElement":
        el = SvgElement("text", text=value).set(x=x, y=y, **attrs)
        self.add(el)
        return el

    # Serialisation -----------------------------------------------------
    def to_string(self, indent: int = 0, pretty: bool = True, precision: int = 3) -> str:
        pad = "  " * indent if pretty else ""
        attrs = "".join(
            f" {name}={_quote(_format_value(value, precision))}"
            for name, value in sorted(self.attributes.items())
        )
        if not self.children and self.text is None:
            return f"{pad}<{self.tag}{attrs}/>"
        if not self.children:
            return f"{pad}<{self.tag}{attrs}>{_escape(self.text or '')}</{self.tag}>"

        separator = "\n" if pretty else ""
        parts: List[str] = [f"{pad}<{self.tag}{attrs}>"]
        if self.text is not None:
            parts.append(_escape(self.text))
        for child in self.children:
            parts.append(child.to_string(indent + 1, pretty=pretty, precision=precision))
        parts.append(f"{pad}</{self.tag}>")
        return separator.join(parts)


def _format_value(value: object, precision: int) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return format_number(float(value), precision)
    if isinstance(value, tuple):
        return " ".join(
            f"{format_number(x, precision)},{format_number(y, precision)}" for x, y in value
        )
    return str(value)


def _quote(value: str) -> str:
    return f'"{_escape(value)}"'


def _escape(value: str) -> str:
    return (
        value.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


@dataclass
class SvgDocument:
    """Root ``<svg>`` element plus its outer size and view box."""

    width: float
    height: float
    viewbox: Optional[Tuple[float, float, float, float]] = None
    background: Optional[str] = None
    font_family: Optional[str] = None
    root: SvgElement = field(init=False)

    def __post_init__(self) -> None:
        self.root = SvgElement("svg").set(
            xmlns=SVG_NS,
            width=self.width,
            height=self.height,
            viewBox=" ".join(format_number(float(v)) for v in self.viewbox_tuple()),
            font_family=self.font_family,
        )
        if self.background:
            vx, vy, vw, vh = self.viewbox_tuple()
            self.root.rect(vx, vy, vw, vh, fill=self.background)

    def group(self, **attrs: object) -> SvgElement:
        return self.root.group(**attrs)

    def add(self, element: SvgElement) -> SvgElement:
        self.root.add(element)
        return element

    def extend(self, elements: Iterable[SvgElement]) -> None:
        for element in elements:
            self.add(element)

    def to_string(self, pretty: bool = True, precision: int = 3) -> str:
        return self.root.to_string(indent=0, pretty=pretty, precision=precision)

    def to_bytes(self, pretty: bool = True, precision: int = 3) -> bytes:
        return self.to_string(pretty=pretty, precision=precision).encode("utf-8")

    def viewbox_tuple(self) -> Tuple[float, float, float, float]:
        if self.viewbox is not None:
            return self.viewbox
        return (0.0, 0.0, self.width, self.height)
