"""Pytest configuration for webforest."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict

import pytest

from webforest.spec.models import ForestSpec


def _theme_payload() -> Dict[str, Any]:
    return {
        "name": "test",
        "colors": {},
        "typography": {},
        "spacing": {},
    }


@pytest.fixture
def theme_payload() -> Dict[str, Any]:
    """Minimal theme mapping carrying the three required sections."""

    return _theme_payload()


@pytest.fixture
def make_spec() -> Callable[..., ForestSpec]:
    """Build a validated :class:`ForestSpec` from row mappings and overrides."""

    def _build(rows=None, *, data=None, theme=None, **extra: Any) -> ForestSpec:
        payload_data = {"rows": rows or []}
        payload_data.update(data or {})
        payload_theme = _theme_payload()
        for key, value in (theme or {}).items():
            if isinstance(value, dict):
                payload_theme[key] = {**payload_theme.get(key, {}), **value}
            else:
                payload_theme[key] = value
        return ForestSpec.model_validate({"data": payload_data, "theme": payload_theme, **extra})

    return _build


@pytest.fixture(autouse=True)
def _isolate_config_home(tmp_path_factory, monkeypatch):
    """Keep persisted settings out of the real home directory."""

    monkeypatch.setenv("WEBFOREST_HOME", str(tmp_path_factory.mktemp("webforest-home")))
    yield


@pytest.fixture
def caplog_debug(caplog):
    caplog.set_level(logging.DEBUG, logger="webforest")
    return caplog


@pytest.fixture
def forest_payload() -> Dict[str, Any]:
    """Raw camelCase payload with two log-scale rows in one group."""

    return {
        "data": {
            "rows": [
                {
                    "id": "a",
                    "label": "Alpha",
                    "point": 0.8,
                    "lower": 0.6,
                    "upper": 1.1,
                    "groupId": "eu",
                    "metadata": {"n": 120, "site": "Oslo"},
                },
                {
                    "id": "b",
                    "label": "Beta",
                    "point": 1.2,
                    "lower": 0.9,
                    "upper": 1.7,
                    "groupId": "eu",
                    "metadata": {"n": 85, "site": "lyon"},
                },
                {
                    "id": "c",
                    "label": "Gamma",
                    "point": 1.05,
                    "lower": 0.7,
                    "upper": 1.5,
                    "metadata": {"n": 230, "site": "Boston"},
                },
            ],
            "groups": [{"id": "eu", "label": "Europe"}],
            "scale": "log",
            "axisLabel": "Hazard ratio",
        },
        "columns": [{"id": "n", "header": "N", "type": "numeric", "position": "right"}],
        "theme": _theme_payload(),
        "labels": {"title": "Main & secondary outcomes"},
    }
