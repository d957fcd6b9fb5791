"""Runtime configuration loaded from environment variables and .env files."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import AliasChoices, Field, PrivateAttr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

if TYPE_CHECKING:  # pragma: no cover - imported for type checking only
    from webforest.config.settings import RenderSettings


def _default_home() -> Path:
    from webforest.config.settings import get_config_home

    return get_config_home()


class RuntimeSettings(BaseSettings):
    """Runtime configuration resolved from the process environment."""

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    webforest_home: Path = Field(default_factory=_default_home, alias="WEBFOREST_HOME")
    log_level: str = Field(
        default="INFO",
        validation_alias=AliasChoices("WEBFOREST_LOG_LEVEL", "LOG_LEVEL"),
    )
    settings_file: Path | None = Field(default=None, alias="WEBFOREST_SETTINGS_FILE")

    _persisted_cache: RenderSettings | None = PrivateAttr(default=None)

    @field_validator("webforest_home", mode="before")
    @classmethod
    def _validate_home(cls, value: Path | str | None) -> Path:
        if value is None or value == "":
            return _default_home()
        return Path(value).expanduser()

    @field_validator("settings_file", mode="before")
    @classmethod
    def _expand_optional_path(cls, value: Path | str | None) -> Path | None:
        if value in {None, ""}:
            return None
        return Path(value).expanduser()

    def config_file_path(self) -> Path:
        """Return the effective path to the persisted settings file."""

        if self.settings_file is not None:
            return self.settings_file
        from webforest.config.settings import CONFIG_FILENAME

        return self.webforest_home / CONFIG_FILENAME

    def persisted(self, *, fresh: bool = False) -> "RenderSettings":
        """Return a copy of the persisted render settings, loading from disk once."""

        from webforest.config.settings import load_settings

        if fresh or self._persisted_cache is None:
            self._persisted_cache = load_settings(self.config_file_path())
        return self._persisted_cache.model_copy(deep=True)

    def clear_persisted_cache(self) -> None:
        """Clear any cached persisted settings forcing a reload on next access."""

        self._persisted_cache = None


__all__ = ["RuntimeSettings"]
