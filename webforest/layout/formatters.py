"""Cell formatting for every supported column kind.

Each :class:`ColumnKind` has exactly one formatter in :data:`FORMATTERS`.
A formatter answers two questions about a cell: the text used to size the
column (:meth:`ColumnFormatter.display_text`) and the text drawn into the
cell (:meth:`ColumnFormatter.cell_text`). Visual kinds (bars, sparklines,
icons, ...) measure as empty text and rely on their type minimum width.
"""

from __future__ import annotations

import logging
import math
import re
import warnings
from enum import StrEnum
from typing import Any, Iterable, Mapping, Optional

from webforest.exceptions import UnknownElementWarning
from webforest.spec.models import ColumnOptions, ColumnSpec, PercentOptions, Row

__all__ = [
    "ColumnFormatter",
    "ColumnKind",
    "FORMATTERS",
    "abbreviate_number",
    "add_thousands_sep",
    "bar_label",
    "format_events",
    "format_interval",
    "format_number",
    "format_pvalue",
    "format_tick",
    "formatter_for",
    "known_columns",
    "to_precision",
]

LOG = logging.getLogger(__name__)


class ColumnKind(StrEnum):
    TEXT = "text"
    NUMERIC = "numeric"
    PERCENT = "percent"
    INTERVAL = "interval"
    PVALUE = "pvalue"
    CUSTOM = "custom"
    EVENTS = "events"
    BAR = "bar"
    SPARKLINE = "sparkline"
    ICON = "icon"
    BADGE = "badge"
    STARS = "stars"
    IMG = "img"
    REFERENCE = "reference"
    RANGE = "range"


# -------------------- Number helpers --------------------

_THOUSANDS = re.compile(r"\B(?=(\d{3})+(?!\d))")
_SUPERSCRIPT = str.maketrans("0123456789-+", "⁰¹²³⁴⁵⁶⁷⁸⁹⁻⁺")


def _number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    numeric = float(value)
    return numeric if math.isfinite(numeric) else None


def _plain(value: Any) -> str:
    """``str`` that prints integral floats without a trailing ``.0``."""

    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _fixed(value: float, decimals: int) -> str:
    text = f"{value:.{max(decimals, 0)}f}"
    if text.startswith("-") and float(text) == 0:
        text = text[1:]
    return text


def to_precision(value: float, digits: int) -> str:
    """Format ``value`` with ``digits`` significant digits, keeping trailing zeros."""

    digits = min(max(int(digits), 1), 21)
    text = f"{value:#.{digits}g}"
    if "e" in text:
        mantissa, exponent = text.split("e")
        return f"{mantissa.rstrip('.')}e{int(exponent):+d}"
    return text.rstrip(".")


def add_thousands_sep(text: str, separator: str) -> str:
    head, dot, tail = text.partition(".")
    return _THOUSANDS.sub(separator, head) + dot + tail


def _abbreviated(scaled: float) -> str:
    rounded = round(scaled * 10) / 10
    if rounded == math.floor(rounded):
        return f"{rounded:.0f}"
    return f"{rounded:.1f}"


def abbreviate_number(value: float) -> str:
    """Abbreviate with K/M/B suffixes: ``5300 -> "5.3K"``, ``1000 -> "1K"``.

    Raises :class:`ValueError` for magnitudes of one trillion or more.
    """

    magnitude = abs(value)
    sign = "-" if value < 0 else ""
    if magnitude >= 1e12:
        raise ValueError(f"Cannot abbreviate value >= 1 trillion: {value}")
    for threshold, suffix in ((1e9, "B"), (1e6, "M"), (1e3, "K")):
        if magnitude >= threshold:
            return sign + _abbreviated(magnitude / threshold) + suffix
    return sign + str(int(round(magnitude)))


def format_number(value: Any, options: Optional[ColumnOptions] = None) -> str:
    numeric = _number(value)
    if numeric is None:
        return (options.na_text if options else None) or ""

    if options is not None and options.percent is not None:
        pct = options.percent
        shown = numeric * 100 if pct.multiply else numeric
        if pct.digits is not None:
            text = to_precision(shown, pct.digits)
        else:
            text = _fixed(shown, 1 if pct.decimals is None else pct.decimals)
        return f"{text}%" if pct.symbol else text

    numeric_opts = options.numeric if options else None
    if numeric_opts is not None and numeric_opts.abbreviate and abs(numeric) >= 1000:
        return abbreviate_number(numeric)

    separator = None
    if numeric_opts is not None and isinstance(numeric_opts.thousands_sep, str):
        separator = numeric_opts.thousands_sep or None

    if numeric_opts is not None and numeric_opts.digits is not None:
        text = to_precision(numeric, numeric_opts.digits)
    elif numeric_opts is not None and numeric_opts.decimals is not None:
        text = _fixed(numeric, numeric_opts.decimals)
    elif abs(numeric - round(numeric)) < 0.0001:
        text = str(int(round(numeric)))
    else:
        text = _fixed(numeric, 2)

    if separator:
        text = add_thousands_sep(text, separator)
    return text


def format_events(row: Row, options: ColumnOptions) -> str:
    """``events/n`` with optional abbreviation, separators and percentage."""

    opts = options.events
    if opts is None:
        return ""
    events = _number(row.value(opts.events_field))
    total = _number(row.value(opts.n_field))
    if events is None or total is None:
        return options.na_text or ""

    if opts.abbreviate and (events >= 1000 or total >= 1000):
        events_text = abbreviate_number(events) if events >= 1000 else _plain(events)
        total_text = abbreviate_number(total) if total >= 1000 else _plain(total)
    else:
        events_text, total_text = _plain(events), _plain(total)
        if isinstance(opts.thousands_sep, str) and opts.thousands_sep:
            events_text = add_thousands_sep(events_text, opts.thousands_sep)
            total_text = add_thousands_sep(total_text, opts.thousands_sep)

    text = f"{events_text}{opts.separator}{total_text}"
    if opts.show_pct and total > 0:
        text += f" ({_fixed(events / total * 100, 1)}%)"
    return text


def format_interval(
    point: Any, lower: Any, upper: Any, options: Optional[ColumnOptions] = None
) -> str:
    """``"0.80 (0.61, 1.05)"``; ``"—"`` when the bounds are too imprecise."""

    point = _number(point)
    if point is None:
        return ""
    opts = options.interval if options else None
    decimals = opts.decimals if opts else 2
    sep = opts.sep if opts else " "
    lower, upper = _number(lower), _number(upper)
    if lower is None or upper is None:
        return _fixed(point, decimals)
    threshold = opts.imprecise_threshold if opts else None
    if threshold is not None and lower > 0 and upper / lower > threshold:
        return "—"
    return f"{_fixed(point, decimals)}{sep}({_fixed(lower, decimals)}, {_fixed(upper, decimals)})"


def format_pvalue(value: Any, options: Optional[ColumnOptions] = None) -> str:
    numeric = _number(value)
    if numeric is None:
        return (options.na_text if options else None) or ""

    opts = options.pvalue if options and options.pvalue else None
    digits = opts.digits if opts else 2
    exp_threshold = opts.exp_threshold if opts else 0.001
    abbrev_threshold = opts.abbrev_threshold if opts else None
    style = opts.format if opts else "auto"

    stars = ""
    if opts and opts.stars:
        first, second, third = opts.thresholds
        if numeric < third:
            stars = "***"
        elif numeric < second:
            stars = "**"
        elif numeric < first:
            stars = "*"

    if abbrev_threshold is not None and numeric < abbrev_threshold:
        return f"<{_plain(abbrev_threshold)}{stars}"

    if numeric > 0 and (style == "scientific" or (style == "auto" and numeric < exp_threshold)):
        exponent = math.floor(math.log10(numeric))
        mantissa = numeric / 10 ** exponent
        return f"{to_precision(mantissa, digits)}×10{str(exponent).translate(_SUPERSCRIPT)}{stars}"

    if numeric >= 0.1:
        text = _fixed(numeric, digits)
    elif numeric >= 0.01:
        text = _fixed(numeric, digits + 1)
    else:
        text = _fixed(numeric, digits + 2)
    return f"{text}{stars}"


def bar_label(value: float) -> str:
    if value >= 100:
        return _fixed(value, 0)
    if value >= 10:
        return _fixed(value, 1)
    return _fixed(value, 2)


def format_tick(value: float) -> str:
    """Axis tick label: fewer decimals for larger magnitudes."""

    magnitude = abs(value)
    if magnitude == 0:
        return "0"
    if magnitude < 0.01:
        return f"{value:.2g}"
    if magnitude >= 100:
        return _fixed(value, 0)
    if magnitude >= 10:
        return _fixed(value, 1)
    return _fixed(value, 2)


# -------------------- Formatters --------------------


class ColumnFormatter:
    """Base formatter: the raw field value as text, or ``na_text``."""

    kind: ColumnKind = ColumnKind.TEXT
    visual = False

    def raw(self, row: Row, column: ColumnSpec) -> Any:
        return row.value(column.source_field)

    def cell_text(self, row: Row, column: ColumnSpec) -> str:
        value = self.raw(row, column)
        if value is None:
            return column.options.na_text or ""
        return _plain(value)

    def display_text(self, row: Row, column: ColumnSpec) -> str:
        if self.visual:
            return ""
        return self.cell_text(row, column)


class TextFormatter(ColumnFormatter):
    kind = ColumnKind.TEXT


class NumericFormatter(ColumnFormatter):
    kind = ColumnKind.NUMERIC

    def cell_text(self, row: Row, column: ColumnSpec) -> str:
        return format_number(self.raw(row, column), column.options)


_DEFAULT_PERCENT = PercentOptions()


class PercentFormatter(NumericFormatter):
    kind = ColumnKind.PERCENT

    def cell_text(self, row: Row, column: ColumnSpec) -> str:
        options = column.options
        if options.percent is None:
            options = options.model_copy(update={"percent": _DEFAULT_PERCENT})
        return format_number(self.raw(row, column), options)


class IntervalFormatter(ColumnFormatter):
    kind = ColumnKind.INTERVAL

    def cell_text(self, row: Row, column: ColumnSpec) -> str:
        opts = column.options.interval
        point = row.value(opts.point) if opts and opts.point else row.point
        lower = row.value(opts.lower) if opts and opts.lower else row.lower
        upper = row.value(opts.upper) if opts and opts.upper else row.upper
        return format_interval(point, lower, upper, column.options)


class PvalueFormatter(ColumnFormatter):
    kind = ColumnKind.PVALUE

    def cell_text(self, row: Row, column: ColumnSpec) -> str:
        return format_pvalue(self.raw(row, column), column.options)


class EventsFormatter(ColumnFormatter):
    kind = ColumnKind.EVENTS

    def cell_text(self, row: Row, column: ColumnSpec) -> str:
        if column.options.events is None:
            return super().cell_text(row, column)
        return format_events(row, column.options)


class CustomFormatter(EventsFormatter):
    kind = ColumnKind.CUSTOM


class BarFormatter(ColumnFormatter):
    kind = ColumnKind.BAR

    def cell_text(self, row: Row, column: ColumnSpec) -> str:
        opts = column.options.bar
        value = _number(self.raw(row, column))
        if value is None or (opts is not None and not opts.show_label):
            return ""
        return bar_label(value)


class SparklineFormatter(ColumnFormatter):
    kind = ColumnKind.SPARKLINE
    visual = True

    def cell_text(self, row: Row, column: ColumnSpec) -> str:
        return ""

    def series(self, row: Row, column: ColumnSpec) -> list[float]:
        value = self.raw(row, column)
        if not isinstance(value, (list, tuple)):
            return []
        return [v for v in (_number(item) for item in value) if v is not None]


class IconFormatter(ColumnFormatter):
    kind = ColumnKind.ICON
    visual = True

    def cell_text(self, row: Row, column: ColumnSpec) -> str:
        value = self.raw(row, column)
        if value is None:
            return ""
        key = _plain(value)
        mapping = column.options.icon.mapping if column.options.icon else {}
        return mapping.get(key, key)


class BadgeFormatter(ColumnFormatter):
    kind = ColumnKind.BADGE
    visual = True

    def cell_text(self, row: Row, column: ColumnSpec) -> str:
        value = self.raw(row, column)
        return "" if value is None else _plain(value)


class StarsFormatter(ColumnFormatter):
    kind = ColumnKind.STARS
    visual = True

    def cell_text(self, row: Row, column: ColumnSpec) -> str:
        value = _number(self.raw(row, column))
        if value is None:
            return ""
        max_stars = column.options.stars.max_stars if column.options.stars else 5
        filled = int(math.floor(min(max(value, 0), max_stars)))
        return "★" * filled + "☆" * (max_stars - filled)


class ImgFormatter(ColumnFormatter):
    kind = ColumnKind.IMG
    visual = True

    def cell_text(self, row: Row, column: ColumnSpec) -> str:
        return column.options.img.fallback if column.options.img else "[IMG]"


class ReferenceFormatter(ColumnFormatter):
    kind = ColumnKind.REFERENCE

    def cell_text(self, row: Row, column: ColumnSpec) -> str:
        value = self.raw(row, column)
        if value is None:
            return ""
        text = _plain(value)
        max_chars = column.options.reference.max_chars if column.options.reference else 30
        if len(text) <= max_chars:
            return text
        return text[:max_chars] + "..."


class RangeFormatter(ColumnFormatter):
    kind = ColumnKind.RANGE
    visual = True

    def cell_text(self, row: Row, column: ColumnSpec) -> str:
        opts = column.options.range
        if opts is None:
            return ""
        low = row.value(opts.min_field)
        high = row.value(opts.max_field)

        def fmt(value: Any) -> str:
            numeric = _number(value)
            if numeric is None:
                return ""
            if opts.decimals is None:
                return _plain(value) if numeric.is_integer() else _fixed(numeric, 1)
            return _fixed(numeric, opts.decimals)

        if low is None and high is None:
            return ""
        if low is None:
            return fmt(high)
        if high is None:
            return fmt(low)
        return f"{fmt(low)}{opts.separator}{fmt(high)}"


FORMATTERS: Mapping[ColumnKind, ColumnFormatter] = {
    formatter.kind: formatter
    for formatter in (
        TextFormatter(),
        NumericFormatter(),
        PercentFormatter(),
        IntervalFormatter(),
        PvalueFormatter(),
        CustomFormatter(),
        EventsFormatter(),
        BarFormatter(),
        SparklineFormatter(),
        IconFormatter(),
        BadgeFormatter(),
        StarsFormatter(),
        ImgFormatter(),
        ReferenceFormatter(),
        RangeFormatter(),
    )
}

_missing = set(ColumnKind) - set(FORMATTERS)
if _missing:  # pragma: no cover - guarded at import
    raise RuntimeError(f"Column kinds without a formatter: {sorted(_missing)}")


def formatter_for(column: ColumnSpec) -> Optional[ColumnFormatter]:
    """Return the formatter for ``column`` or ``None`` for an unknown type."""

    try:
        return FORMATTERS[ColumnKind(column.type)]
    except ValueError:
        return None


def known_columns(columns: Iterable[ColumnSpec]) -> list[ColumnSpec]:
    """Drop columns with an unknown type, warning once for each."""

    kept: list[ColumnSpec] = []
    for column in columns:
        if formatter_for(column) is None:
            LOG.warning("Skipping column %r with unknown type %r", column.id, column.type)
            warnings.warn(
                f"Unknown column type {column.type!r} for column {column.id!r}; column skipped",
                UnknownElementWarning,
                stacklevel=2,
            )
            continue
        kept.append(column)
    return kept
