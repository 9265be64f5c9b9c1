"""
View models: everything the presentation collaborators render, computed
purely from a ``DashboardState`` snapshot.

The dashboard never pokes at map layers or chart objects from business
logic.  Instead each render builds fresh plain-data objects here and hands
them over as-is:

  - ``MapView``         → folium ``GeoJson`` (style + popup per feature, legend)
  - ``TimeSeriesView``  → altair dual line chart (yearly totals, R$ million)
  - ``BothCountsView``  → altair bar chart (municipalities with both, axis 0–400)
  - ``RankingRowView``  → three ordered leaderboard lists

``build_dashboard_view`` bundles them.  Views for hidden tabs are still
cheap to build (datasets are municipality count × year count), but the
chart series are only built for the series tab, matching what the UI shows.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

from carne_madeira.aggregation.aggregator import (
    YearMetrics,
    count_municipalities_in_both_by_year,
    filter_by_year,
    max_value,
    sum_by_year,
    to_lookup,
    year_metrics,
)
from carne_madeira.config import AppConfig
from carne_madeira.models.record import ProductionRecord
from carne_madeira.ranking.ranker import RankingEntry, Rankings, build_rankings
from carne_madeira.reporting.formatters import (
    format_brl_mil,
    format_brl_millions,
    format_combined_value,
)
from carne_madeira.scoring.scorer import (
    ILPF_PALETTE,
    Legend,
    feature_style,
    legend_for_mode,
    popup_text,
)
from carne_madeira.state.store import DashboardData, DashboardState
from carne_madeira.taxonomy.datasets import DashboardTab, DatasetKind, MapMode

logger = logging.getLogger(__name__)


# ── Map ───────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class FeatureView:
    """Render data for one municipality polygon."""

    code:  Optional[str]
    name:  str
    style: dict[str, object]
    popup: str


@dataclass(frozen=True)
class MapView:
    """Choropleth for one (year, mode)."""

    year:     str
    mode:     MapMode
    features: list[FeatureView]
    legend:   Legend

    def style_by_code(self) -> dict[Optional[str], dict[str, object]]:
        return {f.code: f.style for f in self.features}

    def popup_by_code(self) -> dict[Optional[str], str]:
        return {f.code: f.popup for f in self.features}


def build_map_view(
    data:    DashboardData,
    year:    str,
    mode:    MapMode,
    palette: Sequence[str] = ILPF_PALETTE,
) -> MapView | None:
    """Compute style and popup for every boundary feature.

    Returns ``None`` (after logging) when no geometry is loaded; the rest of
    the dashboard stays usable.
    """
    if data.geometry is None:
        logger.warning("GeoJSON not loaded; skipping map update.")
        return None

    madeira_lookup = to_lookup(filter_by_year(data.records(DatasetKind.MADEIRA), year))
    carne_lookup = to_lookup(filter_by_year(data.records(DatasetKind.CARNE), year))
    max_madeira = max_value(madeira_lookup)
    max_carne = max_value(carne_lookup)

    logger.debug(
        "Map update | year=%s mode=%s madeira=%d carne=%d",
        year, mode, len(madeira_lookup), len(carne_lookup),
    )

    features: list[FeatureView] = []
    for geom in data.geometry.features:
        style = feature_style(
            geom.code, mode, madeira_lookup, carne_lookup,
            max_madeira=max_madeira, max_carne=max_carne, palette=palette,
        )
        features.append(
            FeatureView(
                code=geom.code,
                name=geom.name,
                style=style.to_leaflet(),
                popup=popup_text(
                    geom.name,
                    mode,
                    madeira_lookup.get(geom.code, 0.0),
                    carne_lookup.get(geom.code, 0.0),
                ),
            )
        )

    return MapView(year=year, mode=mode, features=features, legend=legend_for_mode(mode, palette))


# ── Charts ────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class TimeSeriesView:
    """Yearly totals of both datasets in the derived unit (raw ÷ divisor)."""

    years:   list[str]
    madeira: list[float]
    carne:   list[float]

    def to_rows(self) -> list[dict[str, object]]:
        """Long-format rows (``Ano, Produção, Valor, Rótulo``) for altair.

        ``Rótulo`` is the pt-BR tooltip text, e.g. ``"R$ 12,5M"``.
        """
        rows: list[dict[str, object]] = []
        for year, m, c in zip(self.years, self.madeira, self.carne):
            for label, value in (("Madeira", m), ("Carne", c)):
                rows.append(
                    {"Ano": year, "Produção": label, "Valor": value, "Rótulo": format_brl_millions(value)}
                )
        return rows


def build_time_series(
    madeira: Sequence[ProductionRecord],
    carne:   Sequence[ProductionRecord],
    years:   Sequence[str],
    divisor: float = 1000.0,
) -> TimeSeriesView:
    """Yearly totals for the fixed year range; missing years read as 0."""
    madeira_by_year = sum_by_year(madeira)
    carne_by_year = sum_by_year(carne)
    return TimeSeriesView(
        years=list(years),
        madeira=[madeira_by_year.get(y, 0.0) / divisor for y in years],
        carne=[carne_by_year.get(y, 0.0) / divisor for y in years],
    )


@dataclass(frozen=True)
class BothCountsView:
    """Municipalities with both productions, per year, plus axis settings."""

    years:    list[str]
    counts:   list[int]
    axis_max: int = 400
    step:     int = 50

    def to_rows(self) -> list[dict[str, object]]:
        return [
            {"Ano": y, "Municípios": c, "Exibido": min(c, self.axis_max)}
            for y, c in zip(self.years, self.counts)
        ]


def build_both_counts_series(
    madeira:  Sequence[ProductionRecord],
    carne:    Sequence[ProductionRecord],
    years:    Sequence[str],
    axis_max: int = 400,
    step:     int = 50,
) -> BothCountsView:
    """Per-year count of municipalities with positive value in both datasets."""
    return BothCountsView(
        years=list(years),
        counts=count_municipalities_in_both_by_year(madeira, carne, years),
        axis_max=axis_max,
        step=step,
    )


# ── Rankings ──────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class RankingRowView:
    """One rendered leaderboard row."""

    position: int
    name:     str
    value:    str
    podium:   bool


@dataclass(frozen=True)
class RankingsView:
    year:     str
    madeira:  list[RankingRowView]
    carne:    list[RankingRowView]
    combined: list[RankingRowView]


def _value_rows(entries: Sequence[RankingEntry], single_value: bool) -> list[RankingRowView]:
    rows: list[RankingRowView] = []
    for e in entries:
        value = format_brl_mil(e.score) if single_value else format_combined_value(e)
        rows.append(
            RankingRowView(position=e.position, name=e.name, value=value, podium=e.position <= 3)
        )
    return rows


def build_ranking_view(rankings: Rankings) -> RankingsView:
    """Format the three leaderboards for display."""
    return RankingsView(
        year=rankings.year,
        madeira=_value_rows(rankings.madeira, single_value=True),
        carne=_value_rows(rankings.carne, single_value=True),
        combined=_value_rows(rankings.combined, single_value=False),
    )


# ── Whole dashboard ───────────────────────────────────────────────────────────


@dataclass(frozen=True)
class DashboardView:
    """Everything rendered for one state snapshot."""

    year:         str
    metrics:      YearMetrics
    map:          MapView | None
    rankings:     RankingsView
    time_series:  TimeSeriesView | None = None
    both_counts:  BothCountsView | None = None
    notices:      list[str] = field(default_factory=list)


def build_dashboard_view(state: DashboardState, config: AppConfig) -> DashboardView:
    """Build every view for ``state``.

    Raises:
        ValueError: If the state has no loaded data.
    """
    if state.data is None:
        raise ValueError("Dashboard data not loaded; cannot build views.")
    data = state.data
    notices: list[str] = []

    map_view = build_map_view(data, state.year, state.map_mode, config.palette.ilpf)
    if map_view is None:
        notices.append("Mapa indisponível: GeoJSON não carregado.")

    time_series = None
    both_counts = None
    if state.tab == DashboardTab.SERIES:
        time_series = build_time_series(
            data.madeira, data.carne, state.years, config.charts.unit_divisor
        )
        both_counts = build_both_counts_series(
            data.madeira, data.carne, state.years,
            config.charts.both_axis_max, config.charts.both_axis_step,
        )

    rankings = build_rankings(data.madeira, data.carne, state.year, config.rankings.top_n)

    return DashboardView(
        year=state.year,
        metrics=year_metrics(data.madeira, data.carne, state.year),
        map=map_view,
        rankings=build_ranking_view(rankings),
        time_series=time_series,
        both_counts=both_counts,
        notices=notices,
    )
