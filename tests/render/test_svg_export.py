"""Tests for the static SVG exporter."""

from __future__ import annotations

import logging
import re

import pytest

from webforest.config.settings import RenderSettings, config_path, save_settings
from webforest.exceptions import InvalidSpecificationError, UnknownElementWarning
from webforest.layout import EstimatingMeasurer, compute_layout
from webforest.render import ExportOptions, ForestStore, generate_image


def _root_size(svg: str) -> tuple[float, float, str]:
    head = svg.split(">", 1)[0]
    width = float(re.search(r' width="([\d.]+)"', head).group(1))
    height = float(re.search(r' height="([\d.]+)"', head).group(1))
    viewbox = re.search(r' viewBox="([^"]+)"', head).group(1)
    return width, height, viewbox


def test_invalid_specification_raises_before_drawing(forest_payload) -> None:
    del forest_payload["theme"]["spacing"]
    with pytest.raises(InvalidSpecificationError, match="theme.spacing"):
        generate_image(forest_payload)


def test_document_contains_the_plot(forest_payload) -> None:
    svg = generate_image(forest_payload)

    assert svg.startswith("<svg")
    assert svg.rstrip().endswith("</svg>")
    assert "Main &amp; secondary outcomes" in svg
    assert "Hazard ratio" in svg
    assert "Europe" in svg
    assert "(2)" in svg
    assert 'class="forest"' in svg
    assert 'class="axis"' in svg


def test_width_defaults_to_settings(forest_payload) -> None:
    svg = generate_image(forest_payload, settings=RenderSettings(default_width=1000))
    width, _, _ = _root_size(svg)
    assert width == 1000


def test_scale_multiplies_outer_size_only(forest_payload) -> None:
    base = generate_image(forest_payload, ExportOptions(width=700))
    doubled = generate_image(forest_payload, ExportOptions(width=700, scale=2))

    width, height, viewbox = _root_size(base)
    width2, height2, viewbox2 = _root_size(doubled)
    assert (width2, height2) == (width * 2, height * 2)
    assert viewbox2 == viewbox


def test_non_positive_scale_is_rejected(forest_payload) -> None:
    with pytest.raises(ValueError):
        generate_image(forest_payload, ExportOptions(scale=0))


def test_background_override(forest_payload) -> None:
    svg = generate_image(forest_payload, ExportOptions(background_color="#000000"))
    assert '<rect fill="#000000"' in svg


def test_export_is_deterministic(forest_payload) -> None:
    assert generate_image(forest_payload) == generate_image(forest_payload)


def test_clipped_intervals_draw_arrows(forest_payload) -> None:
    forest_payload["theme"]["axis"] = {"rangeMin": 0.7, "rangeMax": 1.4}
    svg = generate_image(forest_payload)
    assert '<path d="M ' in svg


def test_unknown_elements_warn_and_are_skipped(forest_payload) -> None:
    forest_payload["columns"].append({"id": "holo", "header": "Holo", "type": "hologram"})
    forest_payload["annotations"] = [{"type": "shaded_band", "id": "band"}]

    with pytest.warns(UnknownElementWarning) as record:
        svg = generate_image(forest_payload)

    messages = " ".join(str(w.message) for w in record)
    assert "hologram" in messages
    assert "shaded_band" in messages
    assert "Holo" not in svg


def test_reference_lines_and_overall_summary(forest_payload) -> None:
    forest_payload["annotations"] = [{"type": "reference_line", "x": 0.9, "label": "Target", "color": "#ff0000"}]
    forest_payload["data"]["overall"] = {"point": 1.0, "lower": 0.85, "upper": 1.2}
    svg = generate_image(forest_payload)

    assert 'stroke="#ff0000"' in svg
    assert "Target" in svg
    assert "Overall" in svg


def test_export_reproduces_the_live_view(forest_payload) -> None:
    """Options taken from a live store give an identical layout."""

    store = ForestStore(forest_payload, width=900)
    live = store.context.layout
    options = store.export_options()

    exported = compute_layout(store.spec, options, EstimatingMeasurer())
    assert exported.total_width == live.total_width
    assert exported.column_widths == live.column_widths
    assert exported.forest_width == live.forest_width
    assert exported.axis == live.axis

    width, _, _ = _root_size(generate_image(store.spec, options))
    assert width == live.total_width


def test_persisted_settings_drive_the_default_export(forest_payload) -> None:
    save_settings(RenderSettings(default_width=1000), config_path())

    width, _, _ = _root_size(generate_image(forest_payload))
    assert width == 1000


def test_unnamed_theme_exports_with_the_configured_default(forest_payload) -> None:
    del forest_payload["theme"]["name"]
    svg = generate_image(forest_payload, settings=RenderSettings(default_theme="dark"))
    assert '<rect fill="#1e1e2e"' in svg


def test_unknown_configured_theme_is_logged(forest_payload, caplog) -> None:
    del forest_payload["theme"]["name"]
    with caplog.at_level(logging.WARNING, logger="webforest"):
        svg = generate_image(forest_payload, settings=RenderSettings(default_theme="neon"))

    assert "neon" in caplog.text
    assert svg.startswith("<svg")
