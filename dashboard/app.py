"""
Painel Madeira & Carne — Streamlit Dashboard
============================================

Interactive view of timber (madeira) and cattle (carne) production values
across the municipalities of Paraná, 2013–2022.

App structure
-------------
  Sidebar   — year slider and map-mode selector.
  Metrics   — totals of both datasets (R$ million) and the number of
              municipalities producing both, for the selected year.
  Mapa      — choropleth (ILPF combined index, timber only, or cattle only)
              with popups and a legend.
  Séries    — yearly totals line chart and "municipalities with both" bars.
  Rankings  — top 10 timber, top 10 cattle, top 10 combined.

Every widget change is turned into an event and applied with
``carne_madeira.state.reduce``; the views are then rebuilt from the new
snapshot.  Nothing in the data layer is mutated after startup.

Usage
-----
    pip install -e ".[dashboard]"
    streamlit run dashboard/app.py

    # Or through the CLI:
    carne-madeira dashboard
"""

from __future__ import annotations

import sys
from pathlib import Path

# ── Ensure project root is importable ────────────────────────────────────────
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import streamlit as st

# ── Must be the first Streamlit call ─────────────────────────────────────────
st.set_page_config(
    page_title="Madeira & Carne - Paraná",
    page_icon="🌲",
    layout="wide",
    initial_sidebar_state="expanded",
)

import altair as alt
import folium
import pandas as pd
from streamlit_folium import st_folium

from carne_madeira.ingestion.loader import USER_LOAD_ERROR, DataLoadError
from carne_madeira.reporting.formatters import format_thousands_br
from carne_madeira.state.store import (
    DashboardState,
    DataLoaded,
    MapModeSelected,
    TabSelected,
    YearSelected,
    initial_state,
    reduce,
)
from carne_madeira.taxonomy.datasets import DashboardTab, MapMode
from carne_madeira.views.view_model import DashboardView, MapView, RankingRowView, build_dashboard_view
from dashboard.data_loader import clear_cache, get_config, load_data

# ── Config ────────────────────────────────────────────────────────────────────

try:
    config = get_config()
except (OSError, ValueError) as exc:
    st.error(f"Erro na configuração: {exc}")
    st.stop()

# ── Startup load (all-or-nothing) ─────────────────────────────────────────────

try:
    data = load_data(config)
except DataLoadError:
    st.error(USER_LOAD_ERROR)
    st.stop()

_STATE_KEY = "dashboard_state"

if _STATE_KEY not in st.session_state:
    st.session_state[_STATE_KEY] = reduce(
        initial_state(config.years.years), DataLoaded(data=data)
    )


def _dispatch(event) -> DashboardState:
    st.session_state[_STATE_KEY] = reduce(st.session_state[_STATE_KEY], event)
    return st.session_state[_STATE_KEY]


# ── Sidebar ───────────────────────────────────────────────────────────────────

state: DashboardState = st.session_state[_STATE_KEY]

with st.sidebar:
    st.title("Madeira & Carne")
    st.caption("Produção por município - Paraná")
    st.divider()

    year = st.select_slider(
        "Ano",
        options=list(state.years),
        value=state.year,
    )
    if year != state.year:
        state = _dispatch(YearSelected(year=year))

    modes = list(MapMode)
    mode = st.selectbox(
        "Modo do mapa",
        options=modes,
        index=modes.index(state.map_mode),
        format_func=lambda m: m.label,
    )
    if mode != state.map_mode:
        state = _dispatch(MapModeSelected(mode=mode))

    st.divider()
    if st.button("Recarregar dados", help="Relê os três arquivos de dados."):
        clear_cache()
        del st.session_state[_STATE_KEY]
        st.rerun()

# ── Tab selector ──────────────────────────────────────────────────────────────
# A radio instead of st.tabs: only the active tab is built and rendered.

_TAB_LABELS = {
    DashboardTab.MAPA:     "Mapa",
    DashboardTab.SERIES:   "Séries",
    DashboardTab.RANKINGS: "Rankings",
}
tabs = list(DashboardTab)
tab = st.radio(
    "Visualização",
    options=tabs,
    index=tabs.index(state.tab),
    format_func=lambda t: _TAB_LABELS[t],
    horizontal=True,
    label_visibility="collapsed",
)
if tab != state.tab:
    state = _dispatch(TabSelected(tab=tab))

view: DashboardView = build_dashboard_view(state, config)

# ── Metric cards ──────────────────────────────────────────────────────────────

divisor = config.charts.unit_divisor
col_m, col_c, col_b = st.columns(3)
col_m.metric("🌲 Madeira (R$ milhões)", format_thousands_br(view.metrics.total_madeira / divisor))
col_c.metric("🥩 Carne (R$ milhões)", format_thousands_br(view.metrics.total_carne / divisor))
col_b.metric("Municípios com ambas", view.metrics.municipalities_both)

for notice in view.notices:
    st.warning(notice)


# ══════════════════════════════════════════════════════════════════════════════
# Mapa
# ══════════════════════════════════════════════════════════════════════════════


def _legend_html(map_view: MapView) -> str:
    items = "".join(
        f'<div><span style="display:inline-block;width:14px;height:14px;'
        f'background:{colour};margin-right:6px;"></span>{label}</div>'
        for label, colour in map_view.legend.entries
    )
    return (
        '<div style="position:fixed;bottom:30px;right:10px;z-index:9999;'
        'background:white;padding:8px 10px;border-radius:4px;font-size:12px;'
        'box-shadow:0 0 4px rgba(0,0,0,0.3);">'
        f"<strong>{map_view.legend.title}</strong>{items}</div>"
    )


def _render_map(map_view: MapView) -> None:
    geojson = dict(data.geometry.raw)
    features = []
    for raw_feature, feature_view in zip(geojson["features"], map_view.features):
        props = dict(raw_feature.get("properties") or {})
        props["_style"] = feature_view.style
        props["_popup"] = feature_view.popup
        features.append({**raw_feature, "properties": props})
    geojson["features"] = features

    fmap = folium.Map(
        location=list(config.map.center),
        zoom_start=config.map.zoom,
        tiles=config.map.tiles,
        attr=config.map.attribution,
    )
    folium.GeoJson(
        geojson,
        style_function=lambda f: f["properties"]["_style"],
        popup=folium.GeoJsonPopup(fields=["_popup"], labels=False),
    ).add_to(fmap)
    fmap.get_root().html.add_child(folium.Element(_legend_html(map_view)))

    st_folium(fmap, use_container_width=True, height=600, returned_objects=[])


if state.tab == DashboardTab.MAPA:
    st.subheader(f"{state.map_mode.label} - {state.year}")
    if view.map is not None:
        _render_map(view.map)


# ══════════════════════════════════════════════════════════════════════════════
# Séries
# ══════════════════════════════════════════════════════════════════════════════

if state.tab == DashboardTab.SERIES and view.time_series is not None:
    st.subheader("Evolução do valor da produção (R$ milhões)")
    df_series = pd.DataFrame(view.time_series.to_rows())
    line = (
        alt.Chart(df_series)
        .mark_line(point=True)
        .encode(
            x=alt.X("Ano:O", title="Ano"),
            y=alt.Y("Valor:Q", title="R$ milhões", axis=alt.Axis(labelExpr=_BRL_MILLIONS_AXIS)),
            color=alt.Color(
                "Produção:N",
                scale=alt.Scale(
                    domain=["Madeira", "Carne"],
                    range=[config.palette.madeira, config.palette.carne],
                ),
            ),
            tooltip=["Ano", "Produção", alt.Tooltip("Rótulo:N", title="Valor")],
        )
    )
    st.altair_chart(line, use_container_width=True)

if state.tab == DashboardTab.SERIES and view.both_counts is not None:
    both = view.both_counts
    st.subheader("Municípios com produção de madeira e carne")
    df_both = pd.DataFrame(both.to_rows())
    base = alt.Chart(df_both).encode(
        x=alt.X("Ano:O", title="Ano"),
        y=alt.Y(
            "Exibido:Q",
            title="Municípios",
            scale=alt.Scale(domain=[0, both.axis_max]),
            axis=alt.Axis(values=list(range(0, both.axis_max + 1, both.step))),
        ),
    )
    bars = base.mark_bar(color=config.palette.ilpf[4]).encode(tooltip=["Ano", "Municípios"])
    labels = base.mark_text(dy=-5).encode(text="Municípios:Q")
    st.altair_chart(bars + labels, use_container_width=True)


# ══════════════════════════════════════════════════════════════════════════════
# Rankings
# ══════════════════════════════════════════════════════════════════════════════

_MEDALS = {1: "🥇", 2: "🥈", 3: "🥉"}


def _render_ranking(title: str, rows: list[RankingRowView]) -> None:
    st.markdown(f"**{title}**")
    if not rows:
        st.info("Sem dados para o ano selecionado.")
        return
    for row in rows:
        badge = _MEDALS.get(row.position, f"{row.position}.")
        name = f"**{row.name}**" if row.podium else row.name
        st.markdown(f"{badge} {name}  \n<small>{row.value}</small>", unsafe_allow_html=True)


if state.tab == DashboardTab.RANKINGS:
    top_n = config.rankings.top_n
    col_rm, col_rc, col_rb = st.columns(3)
    with col_rm:
        _render_ranking(f"Top {top_n} Madeira - {state.year}", view.rankings.madeira)
    with col_rc:
        _render_ranking(f"Top {top_n} Carne - {state.year}", view.rankings.carne)
    with col_rb:
        _render_ranking(f"Top {top_n} Madeira + Carne - {state.year}", view.rankings.combined)
