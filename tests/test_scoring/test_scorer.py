"""
Tests for carne_madeira/scoring/scorer.py.

What we test
------------
normalize() / combined_index():
  - Zero or negative max yields 0; combined index is the symmetric mean.
color_for_combined_index():
  - Bucket = floor(index * 7), clamped so index 1.0 is the 7th colour.
color_for_single_metric():
  - Zero value → neutral gray; timber green-channel and cattle lightness
    formulas at full and half intensity; values above max are clamped.
feature_style():
  - Mode selects the colouring function; fixed stroke; opacity 0.7 for
    scored features and 0.5 for features without a code.
popup_text() / legend_for_mode():
  - Content per map mode.
"""

from __future__ import annotations

import pytest

from carne_madeira.scoring.scorer import (
    FILL_OPACITY,
    ILPF_PALETTE,
    MISSING_DATA_COLOR,
    MISSING_DATA_STYLE,
    MISSING_FILL_OPACITY,
    ZERO_VALUE_COLOR,
    FeatureStyle,
    color_for_combined_index,
    color_for_single_metric,
    combined_index,
    feature_style,
    legend_for_mode,
    normalize,
    popup_text,
)
from carne_madeira.taxonomy.datasets import DatasetKind, MapMode


# ── Normalization ─────────────────────────────────────────────────────────────

class TestNormalize:
    def test_scales_against_max(self) -> None:
        assert normalize(50.0, 200.0) == pytest.approx(0.25)

    def test_zero_max_is_zero(self) -> None:
        assert normalize(123.0, 0.0) == 0.0

    def test_negative_max_is_zero(self) -> None:
        assert normalize(5.0, -1.0) == 0.0

    def test_combined_index_is_mean(self) -> None:
        assert combined_index(1.0, 0.5) == pytest.approx(0.75)

    def test_combined_index_symmetric(self) -> None:
        assert combined_index(0.2, 0.9) == combined_index(0.9, 0.2)


# ── Colours ───────────────────────────────────────────────────────────────────

class TestCombinedColour:
    def test_palette_has_seven_colours(self) -> None:
        assert len(ILPF_PALETTE) == 7

    def test_index_one_is_last_colour(self) -> None:
        assert color_for_combined_index(1.0) == ILPF_PALETTE[6]

    def test_index_zero_is_first_colour(self) -> None:
        assert color_for_combined_index(0.0) == ILPF_PALETTE[0]

    @pytest.mark.parametrize(
        "index, bucket",
        [(0.14, 0), (0.15, 1), (0.5, 3), (0.75, 5), (0.99, 6)],
    )
    def test_bucket_is_floor_of_index_times_seven(self, index: float, bucket: int) -> None:
        assert color_for_combined_index(index) == ILPF_PALETTE[bucket]

    def test_custom_palette(self) -> None:
        palette = tuple(f"#00000{i}" for i in range(7))
        assert color_for_combined_index(1.0, palette) == "#000006"


class TestSingleMetricColour:
    def test_zero_value_is_neutral_gray(self) -> None:
        assert color_for_single_metric(0, 100, DatasetKind.MADEIRA) == ZERO_VALUE_COLOR
        assert ZERO_VALUE_COLOR == "#f0f0f0"

    def test_zero_value_gray_for_cattle_too(self) -> None:
        assert color_for_single_metric(0, 100, DatasetKind.CARNE) == "#f0f0f0"

    def test_madeira_full_intensity(self) -> None:
        assert color_for_single_metric(100, 100, DatasetKind.MADEIRA) == "rgb(44, 122, 62)"

    def test_madeira_half_intensity(self) -> None:
        # 122 + 133 * 0.5 = 188.5 -> 188
        assert color_for_single_metric(50, 100, DatasetKind.MADEIRA) == "rgb(44, 188, 62)"

    def test_carne_full_intensity(self) -> None:
        assert color_for_single_metric(60, 60, DatasetKind.CARNE) == "hsl(6, 56%, 55%)"

    def test_carne_half_intensity(self) -> None:
        # 100 - 45 * 0.5 = 77.5 -> 77
        assert color_for_single_metric(30, 60, DatasetKind.CARNE) == "hsl(6, 56%, 77%)"

    def test_value_above_max_is_clamped(self) -> None:
        assert color_for_single_metric(500, 100, DatasetKind.MADEIRA) == "rgb(44, 122, 62)"

    def test_positive_value_with_zero_max_is_full_intensity(self) -> None:
        assert color_for_single_metric(5, 0, DatasetKind.CARNE) == "hsl(6, 56%, 55%)"


# ── Feature style ─────────────────────────────────────────────────────────────

_MADEIRA = {"A": 100.0, "B": 50.0, "C": 0.0}
_CARNE = {"A": 30.0, "B": 0.0, "D": 60.0}


class TestFeatureStyle:
    def test_ilpf_mode_uses_combined_palette(self) -> None:
        # (100/100 + 30/60) / 2 = 0.75 -> bucket 5
        style = feature_style("A", MapMode.ILPF, _MADEIRA, _CARNE)
        assert style.fill_color == ILPF_PALETTE[5]

    def test_madeira_mode_uses_timber_gradient(self) -> None:
        style = feature_style("B", MapMode.MADEIRA, _MADEIRA, _CARNE)
        assert style.fill_color == "rgb(44, 188, 62)"

    @pytest.mark.parametrize("mode", [MapMode.MADEIRA, MapMode.CARNE])
    def test_single_mode_colours_its_own_dataset(self, mode) -> None:
        lookups = {DatasetKind.MADEIRA: _MADEIRA, DatasetKind.CARNE: _CARNE}
        values = lookups[mode.dataset]
        style = feature_style("A", mode, _MADEIRA, _CARNE)
        assert style.fill_color == color_for_single_metric(
            values["A"], max(values.values()), mode.dataset
        )

    def test_carne_mode_absent_code_is_gray(self) -> None:
        style = feature_style("C", MapMode.CARNE, _MADEIRA, _CARNE)
        assert style.fill_color == ZERO_VALUE_COLOR
        assert style.fill_opacity == FILL_OPACITY

    def test_unknown_code_in_ilpf_is_first_colour(self) -> None:
        style = feature_style("Z", MapMode.ILPF, _MADEIRA, _CARNE)
        assert style.fill_color == ILPF_PALETTE[0]

    def test_empty_year_does_not_fail(self) -> None:
        style = feature_style("A", MapMode.ILPF, {}, {})
        assert style.fill_color == ILPF_PALETTE[0]

    def test_missing_code_gets_missing_style(self) -> None:
        style = feature_style(None, MapMode.ILPF, _MADEIRA, _CARNE)
        assert style is MISSING_DATA_STYLE
        assert style.fill_color == MISSING_DATA_COLOR
        assert style.fill_opacity == MISSING_FILL_OPACITY == 0.5

    def test_precomputed_max_matches_derived(self) -> None:
        derived = feature_style("B", MapMode.ILPF, _MADEIRA, _CARNE)
        explicit = feature_style(
            "B", MapMode.ILPF, _MADEIRA, _CARNE, max_madeira=100.0, max_carne=60.0
        )
        assert derived == explicit

    def test_to_leaflet_keys(self) -> None:
        leaflet = FeatureStyle(fill_color="#123456").to_leaflet()
        assert leaflet == {
            "fillColor": "#123456",
            "weight": 1,
            "color": "white",
            "opacity": 1.0,
            "fillOpacity": 0.7,
        }


# ── Popup and legend ──────────────────────────────────────────────────────────

def test_popup_ilpf_shows_both_values() -> None:
    text = popup_text("Alpha", MapMode.ILPF, 1234.5, 30.0)
    assert text == "<strong>Alpha</strong><br>Madeira: R$ 1.234,5 mil<br>Carne: R$ 30 mil"


def test_popup_single_mode_shows_one_value() -> None:
    text = popup_text("Delta", MapMode.CARNE, 0.0, 60.0)
    assert text == "<strong>Delta</strong><br>Valor: R$ 60 mil"


def test_legend_ilpf_samples_palette() -> None:
    legend = legend_for_mode(MapMode.ILPF)
    assert legend.title == "Índice ILPF"
    assert [c for _, c in legend.entries] == [ILPF_PALETTE[0], ILPF_PALETTE[3], ILPF_PALETTE[6]]


def test_legend_single_metric_titles() -> None:
    assert "Madeira" in legend_for_mode(MapMode.MADEIRA).title
    assert "Carne" in legend_for_mode(MapMode.CARNE).title
