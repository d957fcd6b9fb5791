"""Exception and warning types raised by :mod:`webforest`."""

from __future__ import annotations

from typing import Iterable, List

__all__ = [
    "InvalidSpecificationError",
    "UnknownElementWarning",
    "WebforestError",
]


class WebforestError(RuntimeError):
    """Base class for errors raised by the layout engine and exporters."""


class InvalidSpecificationError(WebforestError):
    """Raised when a forest specification is structurally unusable.

    The exporter raises this before any drawing happens so a malformed
    specification never produces a partial image.
    """

    def __init__(self, errors: Iterable[str]):
        self.errors: List[str] = list(errors)
        super().__init__("; ".join(self.errors))


class UnknownElementWarning(UserWarning):
    """Emitted when a column or annotation type has no renderer.

    The offending element is skipped and rendering continues.
    """
