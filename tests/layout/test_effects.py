from __future__ import annotations

import pytest

from webforest.layout.constants import DEFAULT_EFFECT_COLORS
from webforest.layout.effects import (
    ResolvedEffect,
    effect_style,
    effect_y_offset,
    point_size,
    resolve_effects,
)
from webforest.spec.models import EffectSpec, MarkerStyle, Row


@pytest.fixture
def theme(make_spec):
    return make_spec().theme


EFFECTS = [
    EffectSpec(id="itt", point_col="point", lower_col="lower", upper_col="upper"),
    EffectSpec(id="pp", point_col="pp_est", lower_col="pp_lo", upper_col="pp_hi", color="#ff0000"),
    EffectSpec(id="at", point_col="at_est", lower_col="at_lo", upper_col="at_hi"),
]


def test_primary_interval_without_configured_effects():
    row = Row(id="1", point=1.2, lower=0.9, upper=1.6)
    assert resolve_effects(row) == [ResolvedEffect(0, 1.2, 0.9, 1.6)]


def test_log_scale_drops_non_positive_bounds():
    row = Row(id="1", point=1.2, lower=0.0, upper=1.6)
    assert resolve_effects(row, log_scale=True) == []
    assert len(resolve_effects(row)) == 1


def test_incomplete_effects_are_skipped():
    row = Row(
        id="1",
        point=1.0,
        lower=0.5,
        upper=2.0,
        metadata={"pp_est": 1.1, "pp_lo": 0.7, "pp_hi": 1.8, "at_est": 0.9},
    )
    resolved = resolve_effects(row, EFFECTS)
    assert [r.index for r in resolved] == [0, 1]
    assert resolved[1].point == 1.1


def test_metadata_values_shadow_primary_fields():
    row = Row(id="1", point=1.0, lower=0.5, upper=2.0, metadata={"point": 3.0})
    (resolved,) = resolve_effects(row, EFFECTS[:1])
    assert resolved.point == 3.0


def test_row_marker_style_wins_for_the_primary_effect(theme):
    row = Row(id="1", marker_style=MarkerStyle(color="#111111", shape="diamond", opacity=0.5))
    style = effect_style(row, ResolvedEffect(0, 1, 0, 2, EFFECTS[0]), theme)
    assert (style.color, style.shape, style.opacity) == ("#111111", "diamond", 0.5)


def test_secondary_effects_ignore_the_row_marker(theme):
    row = Row(id="1", marker_style=MarkerStyle(color="#111111"))
    explicit = effect_style(row, ResolvedEffect(1, 1, 0, 2, EFFECTS[1]), theme)
    assert explicit.color == "#ff0000"
    assert explicit.shape == "circle"

    cycled = effect_style(row, ResolvedEffect(2, 1, 0, 2, EFFECTS[2]), theme)
    assert cycled.color == DEFAULT_EFFECT_COLORS[2]
    assert cycled.shape == "diamond"
    assert cycled.opacity == 1.0


def test_primary_effect_falls_back_to_theme_primary(theme):
    style = effect_style(Row(id="1"), ResolvedEffect(0, 1, 0, 2), theme)
    assert style.color == theme.colors.primary
    assert style.shape == "square"


def test_point_size_from_marker_and_weight():
    base = 6.0
    assert point_size(Row(id="1"), base) == base
    assert point_size(Row(id="1", marker_style=MarkerStyle(size=2)), base) == 12.0
    assert point_size(Row(id="1", metadata={"w": 100}), base, "w") == pytest.approx(12.0)
    assert point_size(Row(id="1", metadata={"w": 10_000}), base, "w") == base * 2.5
    assert point_size(Row(id="1", metadata={"w": 0}), base, "w") == base


def test_stacked_effects_are_centred():
    assert effect_y_offset(0, 1) == 0.0
    assert [effect_y_offset(i, 3) for i in range(3)] == [-6.0, 0.0, 6.0]
    assert [effect_y_offset(i, 2) for i in range(2)] == [-3.0, 3.0]
