"""
Tests for carne_madeira/ingestion/loader.py.

What we test
------------
parse_records():
  - Valid rows parse with numeric year/code coerced to strings.
  - A non-list document or any invalid row raises DataLoadError.
parse_geometry():
  - FeatureCollection parses; missing ``features`` raises DataLoadError.
  - Features whose ``properties`` is not an object raise DataLoadError.
load_dashboard_data():
  - Loads all three files from ``data_dir``.
  - Loads URL sources through httpx (MockTransport).
  - All-or-nothing: one missing file, one bad JSON document, a malformed
    boundary file, or one HTTP error fails the whole load with DataLoadError.
  - Strict mode rejects duplicate (year, code) pairs; default mode keeps them.
"""

from __future__ import annotations

import json
from pathlib import Path

import httpx
import pytest

from carne_madeira.config import AppConfig, DataConfig
from carne_madeira.ingestion.loader import (
    USER_LOAD_ERROR,
    DataLoadError,
    DuplicateRecordError,
    check_duplicates,
    load_dashboard_data,
    parse_geometry,
    parse_records,
)
from carne_madeira.taxonomy.datasets import DatasetKind


# ── parse_records ─────────────────────────────────────────────────────────────

class TestParseRecords:
    def test_parses_rows(self, madeira_rows) -> None:
        records = parse_records(madeira_rows, "madeira.json")
        assert len(records) == 4
        assert records[0].municipality_name == "Alpha"

    def test_numeric_year_and_code_become_strings(self) -> None:
        records = parse_records(
            [{"ano": 2015, "cod_ibge": 4100103, "municipio": "Abatiá", "valor": 10}]
        )
        assert records[0].year == "2015"
        assert records[0].municipality_code == "4100103"

    def test_non_list_raises(self) -> None:
        with pytest.raises(DataLoadError, match="Expected a JSON array"):
            parse_records({"ano": "2013"}, "madeira.json")

    def test_invalid_row_raises_with_row_index(self) -> None:
        rows = [
            {"ano": "2013", "cod_ibge": "A", "municipio": "Alpha", "valor": 1.0},
            {"ano": "2013", "cod_ibge": "B", "municipio": "Beta", "valor": -5.0},
        ]
        with pytest.raises(DataLoadError, match="row 1"):
            parse_records(rows, "carne.json")

    def test_missing_field_raises(self) -> None:
        with pytest.raises(DataLoadError):
            parse_records([{"ano": "2013", "valor": 1.0}])


class TestParseGeometry:
    def test_parses_feature_collection(self, geojson_doc) -> None:
        geometry = parse_geometry(geojson_doc, "mun_PR.json")
        assert len(geometry) == 5
        assert geometry.features[0].code == "A"

    def test_feature_without_code_is_kept(self, geojson_doc) -> None:
        geometry = parse_geometry(geojson_doc)
        assert geometry.features[-1].code is None

    def test_missing_features_raises(self) -> None:
        with pytest.raises(DataLoadError, match="Invalid GeoJSON"):
            parse_geometry({"type": "FeatureCollection"}, "mun_PR.json")

    def test_non_object_feature_raises(self) -> None:
        with pytest.raises(DataLoadError):
            parse_geometry({"type": "FeatureCollection", "features": ["oops"]})

    def test_non_object_properties_raises(self) -> None:
        doc = {"type": "FeatureCollection", "features": [{"type": "Feature", "properties": ["CodIbge"]}]}
        with pytest.raises(DataLoadError, match="Invalid GeoJSON"):
            parse_geometry(doc, "mun_PR.json")


def test_check_duplicates_raises(madeira_records) -> None:
    with pytest.raises(DuplicateRecordError, match="2013/A"):
        check_duplicates(madeira_records + madeira_records[:1], DatasetKind.MADEIRA)


# ── load_dashboard_data (files) ───────────────────────────────────────────────

class TestLoadFromFiles:
    def test_loads_all_three(self, app_config: AppConfig) -> None:
        data = load_dashboard_data(app_config)
        assert len(data.madeira) == 4
        assert len(data.carne) == 4
        assert data.geometry is not None
        assert len(data.geometry) == 5

    def test_missing_file_fails_everything(self, app_config: AppConfig, data_dir: Path) -> None:
        (data_dir / "carne.json").unlink()
        with pytest.raises(DataLoadError) as exc_info:
            load_dashboard_data(app_config)
        assert USER_LOAD_ERROR in str(exc_info.value)

    def test_malformed_json_fails(self, app_config: AppConfig, data_dir: Path) -> None:
        (data_dir / "mun_PR.json").write_text("{not json", encoding="utf-8")
        with pytest.raises(DataLoadError):
            load_dashboard_data(app_config)

    def test_boundary_with_list_properties_fails(self, app_config: AppConfig, data_dir: Path) -> None:
        doc = {"type": "FeatureCollection", "features": [{"type": "Feature", "properties": ["CodIbge"]}]}
        (data_dir / "mun_PR.json").write_text(json.dumps(doc), encoding="utf-8")
        with pytest.raises(DataLoadError, match="mun_PR.json"):
            load_dashboard_data(app_config)

    def test_invalid_record_fails(self, app_config: AppConfig, data_dir: Path) -> None:
        (data_dir / "madeira.json").write_text(
            json.dumps([{"ano": "2013", "cod_ibge": "A", "valor": "muito"}]), encoding="utf-8"
        )
        with pytest.raises(DataLoadError):
            load_dashboard_data(app_config)

    def test_duplicates_kept_by_default(self, app_config: AppConfig, data_dir: Path, madeira_rows) -> None:
        (data_dir / "madeira.json").write_text(
            json.dumps(madeira_rows + madeira_rows[:1]), encoding="utf-8"
        )
        data = load_dashboard_data(app_config)
        assert len(data.madeira) == 5

    def test_duplicates_rejected_in_strict_mode(self, data_dir: Path, madeira_rows) -> None:
        (data_dir / "madeira.json").write_text(
            json.dumps(madeira_rows + madeira_rows[:1]), encoding="utf-8"
        )
        config = AppConfig(data=DataConfig(data_dir=str(data_dir), reject_duplicates=True))
        with pytest.raises(DuplicateRecordError):
            load_dashboard_data(config)


# ── load_dashboard_data (URLs) ────────────────────────────────────────────────

_BASE = "https://dados.example.org"


def _url_config() -> AppConfig:
    return AppConfig(
        data=DataConfig(
            madeira_source=f"{_BASE}/madeira.json",
            carne_source=f"{_BASE}/carne.json",
            geojson_source=f"{_BASE}/mun_PR.json",
        )
    )


class TestLoadFromUrls:
    def test_fetches_all_sources(self, madeira_rows, carne_rows, geojson_doc) -> None:
        docs = {
            "/madeira.json": madeira_rows,
            "/carne.json": carne_rows,
            "/mun_PR.json": geojson_doc,
        }
        requested: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requested.append(request.url.path)
            return httpx.Response(200, json=docs[request.url.path])

        data = load_dashboard_data(_url_config(), transport=httpx.MockTransport(handler))
        assert sorted(requested) == sorted(docs)
        assert len(data.madeira) == 4
        assert len(data.geometry) == 5

    def test_http_error_fails_everything(self, madeira_rows, geojson_doc) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/carne.json":
                return httpx.Response(404)
            body = madeira_rows if request.url.path == "/madeira.json" else geojson_doc
            return httpx.Response(200, json=body)

        with pytest.raises(DataLoadError):
            load_dashboard_data(_url_config(), transport=httpx.MockTransport(handler))

    def test_mixed_url_and_file_sources(self, data_dir: Path, carne_rows) -> None:
        config = AppConfig(
            data=DataConfig(data_dir=str(data_dir), carne_source=f"{_BASE}/carne.json")
        )

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=carne_rows)

        data = load_dashboard_data(config, transport=httpx.MockTransport(handler))
        assert len(data.carne) == 4
        assert len(data.madeira) == 4
