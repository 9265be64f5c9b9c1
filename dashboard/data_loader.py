"""
Dashboard data loader.

Streamlit re-runs the whole script on every widget interaction, so the
startup load is wrapped in ``@st.cache_data``: the three sources are read
once per server process (or until "Recarregar dados" clears the cache).

Config is cached with ``@st.cache_resource`` since ``AppConfig`` is frozen
and shared by every session.

``load_data`` raises ``DataLoadError`` on any failure; ``app.py`` turns that
into a single ``st.error`` and stops the script.
"""

from __future__ import annotations

import logging
from pathlib import Path

import streamlit as st

from carne_madeira.config import AppConfig, load_config
from carne_madeira.ingestion.loader import load_dashboard_data
from carne_madeira.state.store import DashboardData
from carne_madeira.utils.logging import configure_logging

logger = logging.getLogger(__name__)


@st.cache_resource
def get_config(config_path: str | None = None) -> AppConfig:
    """Load config and configure logging once per server process."""
    config = load_config(Path(config_path) if config_path else None)
    configure_logging(config.logging, debug=config.debug)
    logger.info("Dashboard config loaded (data_dir=%s)", config.data.data_dir)
    return config


@st.cache_data(show_spinner="Carregando dados...")
def _load_data_cached(_config: AppConfig, cache_key: str) -> DashboardData:
    # ``_config`` is unhashable for st.cache_data; ``cache_key`` stands in for it.
    return load_dashboard_data(_config)


def load_data(config: AppConfig) -> DashboardData:
    """Load all three sources (cached).  Raises ``DataLoadError`` on failure."""
    return _load_data_cached(config, config.model_dump_json(include={"data"}))


def clear_cache() -> None:
    """Drop cached data so the next run re-reads every source."""
    _load_data_cached.clear()
