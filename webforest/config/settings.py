"""Persisted render settings and YAML helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, field_validator

CURRENT_SETTINGS_SCHEMA_VERSION = 1

# -------------------- Settings Schema --------------------


class RenderSettings(BaseModel):
    """Top level settings persisted to ``config.yaml``.

    ``measurement`` selects how text widths are measured when columns are
    auto-sized: ``"estimate"`` uses the character-class estimator,
    ``"pillow"`` measures with a TrueType font loaded from ``font_path``.
    """

    schema_version: int = CURRENT_SETTINGS_SCHEMA_VERSION
    measurement: Literal["estimate", "pillow"] = "estimate"
    font_path: Optional[str] = None
    bold_font_path: Optional[str] = None
    default_width: float = 800.0
    default_theme: str = "default"
    pretty_svg: bool = True
    svg_precision: int = 3

    @field_validator("default_width", mode="before")
    @classmethod
    def _cap_default_width(cls, value: float) -> float:
        numeric = float(value)
        return max(200.0, min(10000.0, numeric))

    @field_validator("svg_precision", mode="before")
    @classmethod
    def _cap_svg_precision(cls, value: int) -> int:
        return max(0, min(6, int(value)))


# -------------------- I/O Helpers --------------------

CONFIG_FILENAME = "config.yaml"


def get_config_home() -> Path:
    """Return the directory where settings should be stored."""

    override = os.environ.get("WEBFOREST_HOME")
    if override:
        return Path(override)
    if os.name == "nt":
        base = Path(
            os.environ.get(
                "LOCALAPPDATA", str(Path.home() / "AppData" / "Local")
            )
        )
        return base / "webforest"
    return Path.home() / ".webforest"


def config_path() -> Path:
    """Return the full path to the configuration file, creating directories as needed."""

    home = get_config_home()
    home.mkdir(parents=True, exist_ok=True)
    return home / CONFIG_FILENAME


def default_settings() -> RenderSettings:
    """Instantiate render settings populated with defaults."""

    return RenderSettings()


def save_settings(settings: RenderSettings, path: Optional[Path] = None) -> Path:
    """Persist the given settings to disk as YAML."""

    target_path = Path(path) if path else config_path()
    target_path.parent.mkdir(parents=True, exist_ok=True)
    data = settings.model_dump()
    with target_path.open("w", encoding="utf-8") as handle:
        yaml.safe_dump(data, handle, sort_keys=False, allow_unicode=True)
    return target_path


def load_settings(path: Optional[Path] = None) -> RenderSettings:
    """Load settings from disk, creating defaults if missing.

    A file that lacks the current ``schema_version`` is stamped with it and
    written back.
    """

    source_path = Path(path) if path else config_path()
    if not source_path.exists():
        settings = default_settings()
        save_settings(settings, source_path)
        return settings
    with source_path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}
    if not isinstance(raw, dict):
        raw = {}
    stale = raw.get("schema_version") != CURRENT_SETTINGS_SCHEMA_VERSION
    settings = RenderSettings(**{**raw, "schema_version": CURRENT_SETTINGS_SCHEMA_VERSION})
    if stale:
        save_settings(settings, source_path)
    return settings
