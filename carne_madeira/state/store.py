"""
Dashboard state — an immutable snapshot plus a pure reducer.

``DashboardData`` is the write-once data store: the two raw record
collections and the boundary geometry, set once at startup and read-only
afterwards.

``DashboardState`` is the UI selection (year, map mode, tab) plus a
reference to the loaded data.  It is never mutated: every user event goes
through ``reduce(state, event)``, which returns a NEW snapshot.  Views are
then rebuilt from the snapshot (see ``carne_madeira.views``).

Events
------
  DataLoaded(data)        — startup load finished
  YearSelected(year)      — year slider moved
  MapModeSelected(mode)   — map-mode selector changed
  TabSelected(tab)        — tab switched

Usage::

    state = initial_state(config.years.years)
    state = reduce(state, DataLoaded(data=data))
    state = reduce(state, YearSelected(year="2017"))
"""

from __future__ import annotations

import logging
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator

from carne_madeira.aggregation.aggregator import YEARS
from carne_madeira.models.geometry import BoundaryCollection
from carne_madeira.models.record import ProductionRecord
from carne_madeira.taxonomy.datasets import DashboardTab, DatasetKind, MapMode

logger = logging.getLogger(__name__)

DEFAULT_YEARS: tuple[str, ...] = YEARS


class DashboardData(BaseModel):
    """The three loaded collections.  Immutable once constructed."""

    model_config = ConfigDict(frozen=True)

    madeira: tuple[ProductionRecord, ...] = ()
    carne: tuple[ProductionRecord, ...] = ()
    geometry: Optional[BoundaryCollection] = None

    def records(self, kind: DatasetKind) -> tuple[ProductionRecord, ...]:
        return self.madeira if kind == DatasetKind.MADEIRA else self.carne


class DashboardState(BaseModel):
    """Immutable UI snapshot.

    Attributes:
        year:     Selected year (string, one of ``years``).
        map_mode: Selected choropleth mode.
        tab:      Active tab.
        years:    The selectable year range, ascending.
        data:     Loaded data, or ``None`` before startup completes.
    """

    model_config = ConfigDict(frozen=True)

    year: str = "2013"
    map_mode: MapMode = MapMode.ILPF
    tab: DashboardTab = DashboardTab.MAPA
    years: tuple[str, ...] = DEFAULT_YEARS
    data: Optional[DashboardData] = None

    @field_validator("year", mode="before")
    @classmethod
    def coerce_year(cls, v: object) -> object:
        return str(v) if isinstance(v, int) and not isinstance(v, bool) else v

    @property
    def is_loaded(self) -> bool:
        return self.data is not None


# ── Events ────────────────────────────────────────────────────────────────────


class DataLoaded(BaseModel):
    model_config = ConfigDict(frozen=True)

    data: DashboardData


class YearSelected(BaseModel):
    model_config = ConfigDict(frozen=True)

    year: str

    @field_validator("year", mode="before")
    @classmethod
    def coerce_year(cls, v: object) -> object:
        return str(v) if isinstance(v, int) and not isinstance(v, bool) else v


class MapModeSelected(BaseModel):
    model_config = ConfigDict(frozen=True)

    mode: MapMode


class TabSelected(BaseModel):
    model_config = ConfigDict(frozen=True)

    tab: DashboardTab


DashboardEvent = Union[DataLoaded, YearSelected, MapModeSelected, TabSelected]


# ── Reducer ───────────────────────────────────────────────────────────────────


def initial_state(years: tuple[str, ...] = DEFAULT_YEARS) -> DashboardState:
    """Startup snapshot: first year, combined map mode, map tab, no data."""
    return DashboardState(year=years[0], years=years)


def reduce(state: DashboardState, event: DashboardEvent) -> DashboardState:
    """Apply ``event`` to ``state`` and return the next snapshot.

    Raises:
        ValueError: If a selected year is outside ``state.years``, or the
            event type is unknown.
    """
    if isinstance(event, DataLoaded):
        if state.data is not None:
            logger.warning("DataLoaded received twice; replacing loaded data.")
        return state.model_copy(update={"data": event.data})

    if isinstance(event, YearSelected):
        if event.year not in state.years:
            raise ValueError(
                f"Year {event.year} outside the dashboard range "
                f"{state.years[0]}-{state.years[-1]}."
            )
        return state.model_copy(update={"year": event.year})

    if isinstance(event, MapModeSelected):
        return state.model_copy(update={"map_mode": event.mode})

    if isinstance(event, TabSelected):
        return state.model_copy(update={"tab": event.tab})

    raise ValueError(f"Unknown dashboard event: {type(event).__name__}")
