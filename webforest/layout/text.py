"""Text width measurement: a font-backed measurer and a heuristic estimator."""

from __future__ import annotations

import logging
from typing import Dict, Optional, Protocol, Tuple, Union, runtime_checkable

from PIL import ImageFont

from .constants import DEFAULT_FONT_SIZE, PT_PX, REM_PX

__all__ = [
    "ELLIPSIS",
    "EstimatingMeasurer",
    "PillowMeasurer",
    "TextMeasurer",
    "estimate_text_width",
    "parse_font_size",
    "resolve_measurer",
    "truncate_text",
]

LOG = logging.getLogger(__name__)

ELLIPSIS = "…"

_NARROW = frozenset("il1.,;:|!()[]{}' ")
_WIDE = frozenset("mwMW@%")


def parse_font_size(value: Union[str, float, int, None], default: float = DEFAULT_FONT_SIZE) -> float:
    """Convert a CSS-like font size (``"0.875rem"``, ``"14px"``, ``"10pt"``) to pixels."""

    if value is None:
        return default
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value) if value > 0 else default
    text = str(value).strip().lower()
    try:
        if text.endswith("rem"):
            return float(text[:-3]) * REM_PX
        if text.endswith("px"):
            return float(text[:-2])
        if text.endswith("pt"):
            return float(text[:-2]) * PT_PX
        return float(text)
    except ValueError:
        return default


def estimate_text_width(text: str, font_size: float) -> float:
    """Character-class width estimate used when no font engine is available."""

    width = 0.0
    for char in text:
        if char in _NARROW:
            width += font_size * 0.35
        elif char in _WIDE:
            width += font_size * 0.85
        elif "0" <= char <= "9":
            width += font_size * 0.6
        else:
            width += font_size * 0.55
    return width


@runtime_checkable
class TextMeasurer(Protocol):
    def measure(self, text: str, font_size: float, *, weight: int = 400) -> float:
        ...


class EstimatingMeasurer:
    """Measurer backed by :func:`estimate_text_width`; ignores weight."""

    name = "estimate"

    def measure(self, text: str, font_size: float, *, weight: int = 400) -> float:
        return estimate_text_width(text, font_size)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, EstimatingMeasurer)

    def __hash__(self) -> int:
        return hash(self.name)


class PillowMeasurer:
    """Measure text with FreeType fonts loaded through Pillow.

    Raises :class:`OSError` on construction when the regular font cannot be
    opened, so callers can fall back to the estimator.
    """

    name = "pillow"

    def __init__(self, font_path: str = "DejaVuSans.ttf", bold_font_path: Optional[str] = None) -> None:
        self.font_path = font_path
        self.bold_font_path = bold_font_path
        self._fonts: Dict[Tuple[str, int], ImageFont.FreeTypeFont] = {}
        self._font(font_path, int(DEFAULT_FONT_SIZE))

    def _font(self, path: str, size: int) -> ImageFont.FreeTypeFont:
        key = (path, size)
        font = self._fonts.get(key)
        if font is None:
            font = ImageFont.truetype(path, size=size)
            self._fonts[key] = font
        return font

    def measure(self, text: str, font_size: float, *, weight: int = 400) -> float:
        if not text:
            return 0.0
        size = max(1, round(font_size))
        path = self.font_path
        if weight >= 600 and self.bold_font_path:
            path = self.bold_font_path
        try:
            font = self._font(path, size)
        except OSError:
            font = self._font(self.font_path, size)
        # Fonts load at integer sizes; rescale to the requested size.
        return float(font.getlength(text)) * font_size / size


def resolve_measurer(settings=None, measurer: Optional[TextMeasurer] = None) -> TextMeasurer:
    """Pick the measurer to use for one render.

    An explicit ``measurer`` wins. Otherwise ``settings.measurement`` selects
    Pillow or the estimator; an unavailable font degrades to the estimator.
    """

    if measurer is not None:
        return measurer
    if settings is None or getattr(settings, "measurement", "estimate") != "pillow":
        return EstimatingMeasurer()
    font_path = settings.font_path or "DejaVuSans.ttf"
    try:
        return PillowMeasurer(font_path, settings.bold_font_path)
    except OSError as exc:
        LOG.info("Font %s unavailable (%s); falling back to width estimation", font_path, exc)
        return EstimatingMeasurer()


def truncate_text(text: str, max_width: float, font_size: float, padding: float = 0.0) -> str:
    """Shorten ``text`` with an ellipsis so its estimated width fits ``max_width``."""

    available = max_width - padding * 2
    if estimate_text_width(text, font_size) <= available:
        return text

    ellipsis_width = font_size * 0.55
    left, right = 0, len(text)
    while left < right:
        mid = (left + right + 1) // 2
        if estimate_text_width(text[:mid], font_size) + ellipsis_width <= available:
            left = mid
        else:
            right = mid - 1
    if left == 0:
        return ELLIPSIS
    return text[:left] + ELLIPSIS
