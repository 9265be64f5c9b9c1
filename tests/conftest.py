"""
Shared pytest fixtures for the carne/madeira test suite.

Provides:
  - Raw (source-shaped) record lists and GeoJSON for two small years.
  - Parsed ``ProductionRecord`` tuples and a ``DashboardData`` bundle.
  - ``data_dir``: the three sources written to ``tmp_path`` as JSON files.
  - ``app_config``: an ``AppConfig`` pointing at ``data_dir``.

Sample data (R$ thousand)
-------------------------
    madeira 2013:  A=100  B=50  C=0
    madeira 2014:  A=200
    carne   2013:  A=30   B=0   D=60
    carne   2014:  B=10

Municipality A produces both in 2013; nobody produces both in 2014.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from carne_madeira.config import AppConfig, DataConfig
from carne_madeira.models.geometry import BoundaryCollection
from carne_madeira.models.record import ProductionRecord
from carne_madeira.state.store import DashboardData


def _row(year: str, code: str, name: str, value: float) -> dict:
    return {"ano": year, "cod_ibge": code, "municipio": name, "valor": value}


def _feature(code: str | None, name: str) -> dict:
    props = {"Municipio": name}
    if code is not None:
        props["CodIbge"] = code
    return {
        "type": "Feature",
        "properties": props,
        "geometry": {
            "type": "Polygon",
            "coordinates": [[[-51.0, -24.0], [-51.1, -24.0], [-51.1, -24.1], [-51.0, -24.0]]],
        },
    }


# ── Raw source documents ──────────────────────────────────────────────────────

@pytest.fixture
def madeira_rows() -> list[dict]:
    return [
        _row("2013", "A", "Alpha", 100.0),
        _row("2013", "B", "Beta", 50.0),
        _row("2013", "C", "Gama", 0.0),
        _row("2014", "A", "Alpha", 200.0),
    ]


@pytest.fixture
def carne_rows() -> list[dict]:
    return [
        _row("2013", "A", "Alpha", 30.0),
        _row("2013", "B", "Beta", 0.0),
        _row("2013", "D", "Delta", 60.0),
        _row("2014", "B", "Beta", 10.0),
    ]


@pytest.fixture
def geojson_doc() -> dict:
    """Five features: A–D plus one without ``CodIbge``."""
    return {
        "type": "FeatureCollection",
        "features": [
            _feature("A", "Alpha"),
            _feature("B", "Beta"),
            _feature("C", "Gama"),
            _feature("D", "Delta"),
            _feature(None, "Sem código"),
        ],
    }


# ── Parsed domain objects ─────────────────────────────────────────────────────

@pytest.fixture
def madeira_records(madeira_rows: list[dict]) -> tuple[ProductionRecord, ...]:
    return tuple(ProductionRecord.model_validate(r) for r in madeira_rows)


@pytest.fixture
def carne_records(carne_rows: list[dict]) -> tuple[ProductionRecord, ...]:
    return tuple(ProductionRecord.model_validate(r) for r in carne_rows)


@pytest.fixture
def boundaries(geojson_doc: dict) -> BoundaryCollection:
    return BoundaryCollection.from_geojson(geojson_doc)


@pytest.fixture
def dashboard_data(
    madeira_records: tuple[ProductionRecord, ...],
    carne_records: tuple[ProductionRecord, ...],
    boundaries: BoundaryCollection,
) -> DashboardData:
    return DashboardData(madeira=madeira_records, carne=carne_records, geometry=boundaries)


# ── On-disk sources and config ────────────────────────────────────────────────

@pytest.fixture
def data_dir(
    tmp_path: Path,
    madeira_rows: list[dict],
    carne_rows: list[dict],
    geojson_doc: dict,
) -> Path:
    """``tmp_path/data`` holding madeira.json, carne.json and mun_PR.json."""
    d = tmp_path / "data"
    d.mkdir()
    (d / "madeira.json").write_text(json.dumps(madeira_rows), encoding="utf-8")
    (d / "carne.json").write_text(json.dumps(carne_rows), encoding="utf-8")
    (d / "mun_PR.json").write_text(json.dumps(geojson_doc), encoding="utf-8")
    return d


@pytest.fixture
def app_config(data_dir: Path) -> AppConfig:
    return AppConfig(data=DataConfig(data_dir=str(data_dir)))
