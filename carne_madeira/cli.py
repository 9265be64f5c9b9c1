"""
carne-madeira — CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Validate inputs (year within the configured range).
  4. Load the three data sources (all-or-nothing).
  5. Report result to stdout.

Install and run::

    pip install -e .[dashboard]
    carne-madeira --help
    carne-madeira validate-config
    carne-madeira summary --year 2017
    carne-madeira rankings --year 2017 --top 5
    carne-madeira series
    carne-madeira export --year 2017 --out-dir data/exports
    carne-madeira dashboard
"""

from __future__ import annotations

import json
import subprocess
import sys
from pathlib import Path
from typing import Optional

import typer

app = typer.Typer(
    name="carne-madeira",
    help="Produção de madeira e carne nos municípios do Paraná — painel e relatórios.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from carne_madeira.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except Exception as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from carne_madeira.utils.logging import configure_logging
    configure_logging(config.logging, debug=config.debug)


def _check_year_or_exit(config, year: Optional[int]) -> str:
    """Return ``year`` as a string (first configured year when omitted)."""
    years = config.years.years
    if year is None:
        return years[0]
    if str(year) not in years:
        typer.echo(
            f"[ERROR] Year {year} outside range {years[0]}-{years[-1]}.", err=True
        )
        raise typer.Exit(code=1)
    return str(year)


def _load_data_or_exit(config):
    """Load all three sources, exiting with code 1 on any failure."""
    from carne_madeira.ingestion.loader import DataLoadError, load_dashboard_data

    try:
        return load_dashboard_data(config)
    except DataLoadError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file (default: config/default.toml).",
    ),
    show_full: bool = typer.Option(
        False,
        "--full",
        help="Print full config including all fields.",
    ),
) -> None:
    """Validate the configuration file and print parsed values.

    Exits with code 1 if the config fails validation.
    """
    from carne_madeira.taxonomy.datasets import DatasetKind

    config = _load_config_or_exit(config_path)
    years = config.years.years

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  Madeira source:   {config.data.source_for(DatasetKind.MADEIRA)}")
    typer.echo(f"  Carne source:     {config.data.source_for(DatasetKind.CARNE)}")
    typer.echo(f"  GeoJSON source:   {config.data.geojson_location}")
    typer.echo(f"  Years:            {years[0]}-{years[-1]} ({len(years)})")
    typer.echo(f"  Ranking size:     {config.rankings.top_n}")
    typer.echo(f"  Log level:        {config.logging.level}")
    typer.echo(f"  Debug mode:       {config.debug}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config valid.")


@app.command("summary")
def summary(
    year: Optional[int] = typer.Option(None, "--year", "-y", help="Year to summarize."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Print the metric cards (totals and municipalities with both) for a year."""
    from carne_madeira.aggregation.aggregator import year_metrics
    from carne_madeira.reporting.formatters import format_year_summary

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    selected = _check_year_or_exit(config, year)
    data = _load_data_or_exit(config)

    metrics = year_metrics(data.madeira, data.carne, selected)
    typer.echo(format_year_summary(metrics, config.charts.unit_divisor))


@app.command("rankings")
def rankings(
    year: Optional[int] = typer.Option(None, "--year", "-y", help="Year to rank."),
    top: Optional[int] = typer.Option(
        None, "--top", "-n", min=1, help="Entries per leaderboard (default from config)."
    ),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Print the timber, cattle and combined leaderboards for a year."""
    from carne_madeira.ranking.ranker import build_rankings
    from carne_madeira.reporting.formatters import (
        format_brl_mil,
        format_combined_value,
        format_ranking_table,
    )

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    selected = _check_year_or_exit(config, year)
    data = _load_data_or_exit(config)

    top_n = top or config.rankings.top_n
    boards = build_rankings(data.madeira, data.carne, selected, top_n)

    typer.echo(format_ranking_table(
        f"Top {top_n} Madeira - {selected}", boards.madeira, lambda e: format_brl_mil(e.score)
    ))
    typer.echo(format_ranking_table(
        f"Top {top_n} Carne - {selected}", boards.carne, lambda e: format_brl_mil(e.score)
    ))
    typer.echo(format_ranking_table(
        f"Top {top_n} Madeira + Carne - {selected}", boards.combined, format_combined_value
    ))


@app.command("series")
def series(
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Print yearly totals (R$ million) and municipalities with both productions."""
    from carne_madeira.reporting.formatters import format_series_table
    from carne_madeira.views.view_model import build_both_counts_series, build_time_series

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    data = _load_data_or_exit(config)

    years = config.years.years
    totals = build_time_series(data.madeira, data.carne, years, config.charts.unit_divisor)
    both = build_both_counts_series(data.madeira, data.carne, years)
    typer.echo(format_series_table(totals.years, totals.madeira, totals.carne, both.counts))


@app.command("export")
def export(
    year: Optional[int] = typer.Option(None, "--year", "-y", help="Year to export."),
    out_dir: str = typer.Option("data/exports", "--out-dir", "-o", help="Output directory."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Write the year's rankings (CSV + JSON) and the yearly series (CSV)."""
    from carne_madeira.aggregation.aggregator import year_metrics
    from carne_madeira.ranking.ranker import build_rankings
    from carne_madeira.reporting.export import (
        RANKING_COLUMNS,
        build_year_report,
        export_to_csv,
        export_to_json,
        flatten_rankings_for_export,
        series_rows,
    )
    from carne_madeira.views.view_model import build_both_counts_series, build_time_series

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    selected = _check_year_or_exit(config, year)
    data = _load_data_or_exit(config)

    out = Path(out_dir)
    boards = build_rankings(data.madeira, data.carne, selected, config.rankings.top_n)
    metrics = year_metrics(data.madeira, data.carne, selected)

    years = config.years.years
    totals = build_time_series(data.madeira, data.carne, years, config.charts.unit_divisor)
    both = build_both_counts_series(data.madeira, data.carne, years)

    written = [
        export_to_csv(
            flatten_rankings_for_export(boards),
            out / f"rankings_{selected}.csv",
            fieldnames=RANKING_COLUMNS,
        ),
        export_to_json(build_year_report(metrics, boards), out / f"resumo_{selected}.json"),
        export_to_csv(series_rows(totals, both), out / "serie_historica.csv"),
    ]

    for path in written:
        typer.echo(f"  Wrote {path}")
    typer.echo("[OK] Export complete.")


@app.command("dashboard")
def dashboard(
    port: int = typer.Option(8501, "--port", help="Streamlit server port."),
) -> None:
    """Launch the Streamlit dashboard (requires the ``dashboard`` extra)."""
    app_path = Path(__file__).resolve().parent.parent / "dashboard" / "app.py"
    if not app_path.exists():
        typer.echo(f"[ERROR] Dashboard script not found: {app_path}", err=True)
        raise typer.Exit(code=1)

    cmd = [sys.executable, "-m", "streamlit", "run", str(app_path), "--server.port", str(port)]
    raise typer.Exit(code=subprocess.call(cmd))


if __name__ == "__main__":
    app()
