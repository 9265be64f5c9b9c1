"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``      — committed static defaults
  2. ``config/local.toml``        — optional local overrides (gitignored)
  3. ``.env``                     — local env overrides (gitignored)
  4. Environment variables        — ``CARNE_MADEIRA_*`` prefix

Entry point: ``load_config(config_path=None) -> AppConfig``

The CLI and the Streamlit dashboard both receive an ``AppConfig`` instance —
never raw dicts or individual env var lookups scattered through the codebase.
"""

from __future__ import annotations

import os
import re
import tomllib
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator

from carne_madeira.taxonomy.datasets import DatasetKind

_HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}$")

# ── Sub-config models ─────────────────────────────────────────────────────────


class DataConfig(BaseModel):
    """Input sources for the two production datasets and the boundary GeoJSON.

    Each ``*_source`` is either an ``http(s)`` URL, an absolute path, or a
    path relative to ``data_dir``.
    """

    model_config = ConfigDict(frozen=True)

    data_dir: str = "data"
    madeira_source: str = "madeira.json"
    carne_source: str = "carne.json"
    geojson_source: str = "mun_PR.json"
    request_timeout_s: float = 30.0
    reject_duplicates: bool = False

    def resolve(self, source: str) -> str:
        """Return ``source`` as a URL or a filesystem path string."""
        if source.startswith(("http://", "https://")):
            return source
        path = Path(source)
        if path.is_absolute():
            return str(path)
        return str(Path(self.data_dir) / path)

    def source_for(self, kind: DatasetKind) -> str:
        """Resolved source of the records file for ``kind``."""
        if kind == DatasetKind.MADEIRA:
            return self.resolve(self.madeira_source)
        return self.resolve(self.carne_source)

    @property
    def geojson_location(self) -> str:
        return self.resolve(self.geojson_source)


class YearsConfig(BaseModel):
    """The fixed range of years shown on the slider and in every series."""

    model_config = ConfigDict(frozen=True)

    base_year: int = 2013
    count: int = 10

    @field_validator("count")
    @classmethod
    def validate_count(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"years.count must be positive, got {v}.")
        return v

    @property
    def years(self) -> tuple[str, ...]:
        return tuple(str(self.base_year + i) for i in range(self.count))


class MapConfig(BaseModel):
    """Initial map viewport and base layer."""

    model_config = ConfigDict(frozen=True)

    center: tuple[float, float] = (-24.7, -51.5)
    zoom: int = 7
    tiles: str = "CartoDB positron"
    attribution: str = "© OpenStreetMap © CARTO"


class PaletteConfig(BaseModel):
    """Series colours and the 7-step combined (ILPF) palette."""

    model_config = ConfigDict(frozen=True)

    madeira: str = "#2c7a3e"
    carne: str = "#c44536"
    ilpf: tuple[str, ...] = (
        "#ffffcc", "#c7e9b4", "#7fcdbb", "#41b6c4", "#1d91c0", "#225ea8", "#0c2c84",
    )

    @field_validator("madeira", "carne")
    @classmethod
    def validate_hex(cls, v: str) -> str:
        if not _HEX_COLOR.match(v):
            raise ValueError(f"Expected a #rrggbb colour, got '{v}'.")
        return v

    @field_validator("ilpf")
    @classmethod
    def validate_ilpf(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        if len(v) != 7:
            raise ValueError(f"ILPF palette must have exactly 7 colours, got {len(v)}.")
        bad = [c for c in v if not _HEX_COLOR.match(c)]
        if bad:
            raise ValueError(f"Invalid ILPF palette colours: {bad}.")
        return v


class ChartConfig(BaseModel):
    """Time-series and bar chart parameters."""

    model_config = ConfigDict(frozen=True)

    unit_divisor: float = 1000.0
    both_axis_max: int = 400
    both_axis_step: int = 50

    @field_validator("unit_divisor")
    @classmethod
    def validate_divisor(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"charts.unit_divisor must be positive, got {v}.")
        return v


class RankingConfig(BaseModel):
    """Leaderboard length."""

    model_config = ConfigDict(frozen=True)

    top_n: int = 10


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = "data/logs/dashboard.log"
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class AppConfig(BaseModel):
    """Complete application configuration — the single source of truth."""

    model_config = ConfigDict(frozen=True)

    data: DataConfig = DataConfig()
    years: YearsConfig = YearsConfig()
    map: MapConfig = MapConfig()
    palette: PaletteConfig = PaletteConfig()
    charts: ChartConfig = ChartConfig()
    rankings: RankingConfig = RankingConfig()
    logging: LoggingConfig = LoggingConfig()
    debug: bool = False


# ── Loader ────────────────────────────────────────────────────────────────────

_PROJECT_ROOT = Path(__file__).parent.parent


def _find_project_root() -> Path:
    """Walk up from this file to find the project root (contains pyproject.toml)."""
    candidate = Path(__file__).parent
    for _ in range(5):
        if (candidate / "pyproject.toml").exists():
            return candidate
        candidate = candidate.parent
    return _PROJECT_ROOT


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Load and merge application configuration.

    Args:
        config_path: Explicit path to a TOML config file. Defaults to
            ``<project_root>/config/default.toml``.

    Returns:
        Fully validated ``AppConfig`` instance.

    Raises:
        FileNotFoundError: If the specified ``config_path`` does not exist.
        pydantic.ValidationError: If merged config values fail validation.
    """
    root = _find_project_root()

    load_dotenv(dotenv_path=root / ".env", override=False)

    if config_path is None:
        config_path = root / "config" / "default.toml"

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Config file not found: {config_path}\n"
            "Create config/default.toml or pass --config."
        )

    with open(config_path, "rb") as f:
        raw: dict[str, Any] = tomllib.load(f)

    local_config_path = config_path.parent / "local.toml"
    if local_config_path.exists():
        with open(local_config_path, "rb") as f:
            local_raw: dict[str, Any] = tomllib.load(f)
        raw = _deep_merge(raw, local_raw)

    raw = _apply_env_overrides(raw)

    return _build_app_config(raw)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into ``base``."""
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Apply CARNE_MADEIRA_* env vars to the raw config dict.

    Supported overrides:
      CARNE_MADEIRA_DATA_DIR   → raw["data"]["data_dir"]
      CARNE_MADEIRA_LOG_LEVEL  → raw["logging"]["level"]
      CARNE_MADEIRA_DEBUG      → raw["debug"]
    """
    if data_dir := os.environ.get("CARNE_MADEIRA_DATA_DIR"):
        raw.setdefault("data", {})["data_dir"] = data_dir

    if log_level := os.environ.get("CARNE_MADEIRA_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    if debug := os.environ.get("CARNE_MADEIRA_DEBUG"):
        raw["debug"] = debug.lower() in ("1", "true", "yes")

    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map raw TOML dict to ``AppConfig`` model structure."""
    project = raw.pop("project", {})

    return AppConfig(
        data=DataConfig(**raw.get("data", {})),
        years=YearsConfig(**raw.get("years", {})),
        map=MapConfig(**raw.get("map", {})),
        palette=PaletteConfig(**raw.get("palette", {})),
        charts=ChartConfig(**raw.get("charts", {})),
        rankings=RankingConfig(**raw.get("rankings", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        debug=raw.get("debug", project.get("debug", False)),
    )
