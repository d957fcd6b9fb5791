"""Root logger setup for scripts and services that export forest plots."""

from __future__ import annotations

import logging
from typing import Any

from webforest.runtime_config import RuntimeSettings

__all__ = ["configure_logging", "resolve_level"]

LOG_FORMAT = "%(asctime)s [%(levelname)-8s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%H:%M:%S"


def resolve_level(value: str | int | None) -> int:
    """Map a level name or number onto a :mod:`logging` level.

    Blank, missing and unrecognised names fall back to ``INFO``.
    """

    if isinstance(value, int):
        return value
    name = (value or "").strip().upper()
    if name.isdigit():
        return int(name)
    level = logging.getLevelName(name) if name else None
    return level if isinstance(level, int) else logging.INFO


def configure_logging(*, level: str | int | None = None, **kwargs: Any) -> int:
    """Install a root handler and return the level it was given.

    Without ``level`` the value comes from :class:`RuntimeSettings`, which
    reads ``WEBFOREST_LOG_LEVEL`` and falls back to ``LOG_LEVEL``. Extra
    keyword arguments go to :func:`logging.basicConfig`; existing root
    handlers are replaced unless ``force=False`` is passed.
    """

    if level is None:
        level = RuntimeSettings().log_level
    effective = resolve_level(level)
    kwargs.setdefault("format", LOG_FORMAT)
    kwargs.setdefault("datefmt", LOG_DATE_FORMAT)
    kwargs.setdefault("force", True)
    logging.basicConfig(level=effective, **kwargs)
    return effective
