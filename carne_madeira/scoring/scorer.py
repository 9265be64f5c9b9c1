"""
Choropleth scoring: converts per-municipality values into normalized indices,
then into fill colours and a Leaflet style for the selected map mode.

Normalization
-------------
    normalize(value, max) = value / max   if max > 0
                          = 0             otherwise

``max`` is the largest value of the dataset's lookup for the selected year
(0 for an empty lookup), so an empty or all-zero year colours every
municipality at index 0 instead of failing.

Combined (ILPF) index
---------------------
    index = (normalize(madeira) + normalize(carne)) / 2        range [0, 1]

The index picks one of 7 palette buckets with ``floor(index * 7)``, clamped
to the last bucket so ``index == 1`` maps to the 7th colour.

Single-metric gradients
-----------------------
value == 0 → neutral gray ``#f0f0f0``.  Otherwise
``intensity = min(value / max, 1)`` and:

    madeira: rgb(44, floor(122 + (255 - 122) * (1 - intensity)), 62)
    carne:   hsl(6, 56%, floor(100 - 45 * intensity)%)

Feature style
-------------
Fixed stroke (weight 1, white, opacity 1).  Fill opacity is 0.7 for every
scored municipality and 0.5 for the missing-data gray used when a feature
carries no municipality code.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

from carne_madeira.aggregation.aggregator import max_value
from carne_madeira.reporting.formatters import format_brl_mil
from carne_madeira.taxonomy.datasets import DatasetKind, MapMode

ILPF_PALETTE: tuple[str, ...] = (
    "#ffffcc", "#c7e9b4", "#7fcdbb", "#41b6c4", "#1d91c0", "#225ea8", "#0c2c84",
)
ZERO_VALUE_COLOR = "#f0f0f0"
MISSING_DATA_COLOR = "#cccccc"

STROKE_WEIGHT = 1
STROKE_COLOR = "white"
STROKE_OPACITY = 1.0
FILL_OPACITY = 0.7
MISSING_FILL_OPACITY = 0.5

# Timber gradient: fixed red/blue, green channel runs 255 → 122.
_MADEIRA_RED = 44
_MADEIRA_BLUE = 62
_MADEIRA_GREEN_MIN = 122
_MADEIRA_GREEN_MAX = 255

# Cattle gradient: fixed hue/saturation, lightness runs 100% → 55%.
_CARNE_HUE = 6
_CARNE_SATURATION = 56
_CARNE_LIGHTNESS_SPAN = 45


def normalize(value: float, max_value: float) -> float:
    """Scale ``value`` into [0, 1] against ``max_value``; 0 when max is not positive."""
    if max_value > 0:
        return value / max_value
    return 0.0


def combined_index(norm_a: float, norm_b: float) -> float:
    """Arithmetic mean of two normalized values."""
    return (norm_a + norm_b) / 2


def color_for_combined_index(
    index: float,
    palette: Sequence[str] = ILPF_PALETTE,
) -> str:
    """Palette colour for a combined index in [0, 1]."""
    n = len(palette)
    bucket = min(math.floor(index * n), n - 1)
    return palette[max(bucket, 0)]


def color_for_single_metric(value: float, max_value: float, kind: DatasetKind) -> str:
    """Gradient colour for one dataset's value; gray when the value is 0."""
    if value == 0:
        return ZERO_VALUE_COLOR
    intensity = min(value / max_value, 1.0) if max_value > 0 else 1.0

    if kind == DatasetKind.MADEIRA:
        span = _MADEIRA_GREEN_MAX - _MADEIRA_GREEN_MIN
        green = math.floor(_MADEIRA_GREEN_MIN + span * (1 - intensity))
        return f"rgb({_MADEIRA_RED}, {green}, {_MADEIRA_BLUE})"

    lightness = math.floor(100 - _CARNE_LIGHTNESS_SPAN * intensity)
    return f"hsl({_CARNE_HUE}, {_CARNE_SATURATION}%, {lightness}%)"


# ── Feature style ─────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class FeatureStyle:
    """Style of one municipality polygon.

    Attributes:
        fill_color:     CSS colour of the polygon fill.
        weight:         Stroke width in pixels.
        stroke_color:   CSS colour of the border.
        stroke_opacity: Border opacity.
        fill_opacity:   Fill opacity (0.7 scored, 0.5 missing data).
    """

    fill_color:     str
    weight:         int = STROKE_WEIGHT
    stroke_color:   str = STROKE_COLOR
    stroke_opacity: float = STROKE_OPACITY
    fill_opacity:   float = FILL_OPACITY

    def to_leaflet(self) -> dict[str, object]:
        """Leaflet path options, as consumed by ``folium.GeoJson(style_function=...)``."""
        return {
            "fillColor":   self.fill_color,
            "weight":      self.weight,
            "color":       self.stroke_color,
            "opacity":     self.stroke_opacity,
            "fillOpacity": self.fill_opacity,
        }


MISSING_DATA_STYLE = FeatureStyle(
    fill_color=MISSING_DATA_COLOR,
    fill_opacity=MISSING_FILL_OPACITY,
)


def feature_style(
    code:           str | None,
    mode:           MapMode,
    madeira_lookup: dict[str, float],
    carne_lookup:   dict[str, float],
    max_madeira:    float | None = None,
    max_carne:      float | None = None,
    palette:        Sequence[str] = ILPF_PALETTE,
) -> FeatureStyle:
    """Resolve the polygon style of one municipality for ``mode``.

    Args:
        code:           Municipality code of the feature (``None`` if absent).
        mode:           Selected map mode.
        madeira_lookup: Timber ``code -> value`` for the selected year.
        carne_lookup:   Cattle ``code -> value`` for the selected year.
        max_madeira:    Precomputed timber max; computed from the lookup if None.
        max_carne:      Precomputed cattle max; computed from the lookup if None.
        palette:        7-colour combined palette.

    Returns:
        FeatureStyle for the feature.
    """
    if code is None:
        return MISSING_DATA_STYLE

    madeira = madeira_lookup.get(code, 0.0)
    carne = carne_lookup.get(code, 0.0)
    if max_madeira is None:
        max_madeira = max_value(madeira_lookup)
    if max_carne is None:
        max_carne = max_value(carne_lookup)

    kind = mode.dataset
    if kind is None:
        index = combined_index(normalize(madeira, max_madeira), normalize(carne, max_carne))
        fill = color_for_combined_index(index, palette)
    elif kind == DatasetKind.MADEIRA:
        fill = color_for_single_metric(madeira, max_madeira, kind)
    else:
        fill = color_for_single_metric(carne, max_carne, kind)

    return FeatureStyle(fill_color=fill)


def popup_text(name: str, mode: MapMode, madeira: float, carne: float) -> str:
    """HTML popup for one municipality: both values in ILPF mode, one otherwise."""
    lines = [f"<strong>{name}</strong>"]
    if mode == MapMode.ILPF:
        lines.append(f"Madeira: {format_brl_mil(madeira)}")
        lines.append(f"Carne: {format_brl_mil(carne)}")
    elif mode == MapMode.MADEIRA:
        lines.append(f"Valor: {format_brl_mil(madeira)}")
    else:
        lines.append(f"Valor: {format_brl_mil(carne)}")
    return "<br>".join(lines)


# ── Legend ────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Legend:
    """Map legend: a title plus ``(label, colour)`` swatches, low to high."""

    title:   str
    entries: tuple[tuple[str, str], ...]


def legend_for_mode(mode: MapMode, palette: Sequence[str] = ILPF_PALETTE) -> Legend:
    """Legend shown next to the map for ``mode``."""
    if mode == MapMode.ILPF:
        return Legend(
            title="Índice ILPF",
            entries=(
                ("Baixo", palette[0]),
                ("Médio", palette[len(palette) // 2]),
                ("Alto", palette[-1]),
            ),
        )
    if mode == MapMode.MADEIRA:
        return Legend(
            title="Valor - Madeira (R$ mil)",
            entries=(("Baixo", "#a6d96a"), ("Alto", "#2c7a3e")),
        )
    return Legend(
        title="Valor - Carne (R$ mil)",
        entries=(("Baixo", "#fc8d59"), ("Alto", "#c44536")),
    )
