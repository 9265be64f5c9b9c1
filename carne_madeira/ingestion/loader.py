"""
Startup data loading — the three input documents, fetched concurrently.

Sources
-------
  madeira  — JSON array of timber records   (``ano, cod_ibge, municipio, valor``)
  carne    — JSON array of cattle records   (same shape)
  geojson  — FeatureCollection of municipality boundaries
             (properties ``CodIbge``, ``Municipio``)

Each source is a local path or an ``http(s)`` URL (see
``DataConfig.resolve``).  URLs are fetched with ``httpx.AsyncClient``;
files are read in a worker thread via ``asyncio.to_thread``.

All-or-nothing
--------------
The three loads are fanned out with ``asyncio.gather`` and joined before
anything is parsed.  If ANY load or parse fails, ``DataLoadError`` is
raised and nothing is returned: there is no partial-data mode and no retry.
The caller surfaces the single error message to the user.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from carne_madeira.aggregation.aggregator import find_duplicate_codes
from carne_madeira.config import AppConfig
from carne_madeira.models.geometry import BoundaryCollection
from carne_madeira.models.record import ProductionRecord
from carne_madeira.state.store import DashboardData
from carne_madeira.taxonomy.datasets import DatasetKind

logger = logging.getLogger(__name__)

USER_LOAD_ERROR = (
    "Erro ao carregar dados. Verifique se os arquivos JSON estão no diretório correto."
)


class DataLoadError(Exception):
    """Raised when any of the three startup sources cannot be loaded or parsed."""


class DuplicateRecordError(DataLoadError):
    """Raised in strict mode when a dataset repeats a (year, municipality) pair."""


# ── Parsing ───────────────────────────────────────────────────────────────────


def parse_records(raw: Any, source: str = "") -> tuple[ProductionRecord, ...]:
    """Validate a JSON array into ``ProductionRecord`` objects.

    All rows are validated before any are returned.  If any row fails, a
    single :class:`DataLoadError` lists the first 10 failures.

    Args:
        raw:    Decoded JSON document (must be a list of objects).
        source: Source label for error messages.

    Returns:
        Tuple of records in file order.

    Raises:
        DataLoadError: If ``raw`` is not a list or any row is invalid.
    """
    if not isinstance(raw, list):
        raise DataLoadError(
            f"Expected a JSON array of records in {source or 'input'}, "
            f"got {type(raw).__name__}."
        )

    records: list[ProductionRecord] = []
    errors: list[str] = []
    for i, row in enumerate(raw):
        try:
            records.append(ProductionRecord.model_validate(row))
        except ValidationError as exc:
            errors.append(f"row {i}: {exc.errors()[0]['msg']}")

    if errors:
        shown = "\n  ".join(errors[:10])
        raise DataLoadError(
            f"{len(errors)} invalid record(s) in {source or 'input'}:\n  {shown}"
        )
    return tuple(records)


def parse_geometry(raw: Any, source: str = "") -> BoundaryCollection:
    """Validate a GeoJSON FeatureCollection.

    Raises:
        DataLoadError: If ``raw`` is not a FeatureCollection whose features
            are objects.
    """
    try:
        return BoundaryCollection.from_geojson(raw)
    except (ValueError, TypeError, AttributeError, ValidationError) as exc:
        raise DataLoadError(f"Invalid GeoJSON in {source or 'input'}: {exc}") from exc


def check_duplicates(records: tuple[ProductionRecord, ...], kind: DatasetKind) -> None:
    """Raise :class:`DuplicateRecordError` if ``records`` repeat a (year, code) pair."""
    dupes = find_duplicate_codes(records)
    if dupes:
        shown = ", ".join(f"{year}/{code}" for year, code in dupes[:10])
        raise DuplicateRecordError(
            f"{len(dupes)} duplicate (year, municipality) pair(s) in {kind}: {shown}"
        )


# ── Reading ───────────────────────────────────────────────────────────────────


def _is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def _read_file(path: str) -> Any:
    return json.loads(Path(path).read_text(encoding="utf-8"))


async def _read_source(client: httpx.AsyncClient, source: str) -> Any:
    """Fetch and decode one JSON document from a URL or file path."""
    if _is_url(source):
        resp = await client.get(source)
        resp.raise_for_status()
        return resp.json()
    return await asyncio.to_thread(_read_file, source)


async def _read_all(
    sources:   tuple[str, str, str],
    timeout_s: float,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> list[Any]:
    async with httpx.AsyncClient(timeout=timeout_s, transport=transport) as client:
        return await asyncio.gather(*(_read_source(client, s) for s in sources))


async def load_dashboard_data_async(
    config:    AppConfig,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> DashboardData:
    """Load timber, cattle and geometry concurrently; all-or-nothing.

    Args:
        config:    Application config (``config.data`` supplies the sources).
        transport: Optional httpx transport (tests inject ``MockTransport``).

    Returns:
        Fully populated ``DashboardData``.

    Raises:
        DataLoadError: If any source fails to load or parse.
    """
    data_cfg = config.data
    sources = (
        data_cfg.source_for(DatasetKind.MADEIRA),
        data_cfg.source_for(DatasetKind.CARNE),
        data_cfg.geojson_location,
    )
    logger.info("Loading data sources: %s", ", ".join(sources))

    try:
        madeira_raw, carne_raw, geojson_raw = await _read_all(
            sources, data_cfg.request_timeout_s, transport
        )
    except (OSError, ValueError, httpx.HTTPError) as exc:
        logger.error("Error loading data: %s", exc)
        raise DataLoadError(f"{USER_LOAD_ERROR} ({exc})") from exc

    madeira = parse_records(madeira_raw, sources[0])
    carne = parse_records(carne_raw, sources[1])
    geometry = parse_geometry(geojson_raw, sources[2])

    if data_cfg.reject_duplicates:
        check_duplicates(madeira, DatasetKind.MADEIRA)
        check_duplicates(carne, DatasetKind.CARNE)

    logger.info("Data loaded successfully")
    logger.info("Madeira: %d records", len(madeira))
    logger.info("Carne: %d records", len(carne))
    logger.info("GeoJSON: %d municipalities", len(geometry))

    return DashboardData(madeira=madeira, carne=carne, geometry=geometry)


def load_dashboard_data(
    config:    AppConfig,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> DashboardData:
    """Synchronous entry point for the CLI and the Streamlit app."""
    return asyncio.run(load_dashboard_data_async(config, transport))
