"""
Flat-file export of the per-year rankings and the yearly series.

Every writer creates parent directories and returns the written ``Path``.
CSV exports are flat (one row per leaderboard entry) so they open directly
in a spreadsheet or ``pandas.read_csv`` without unpivoting.
"""

from __future__ import annotations

import csv
import json
from dataclasses import asdict
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from carne_madeira.aggregation.aggregator import YearMetrics
    from carne_madeira.ranking.ranker import Rankings
    from carne_madeira.views.view_model import BothCountsView, TimeSeriesView

RANKING_COLUMNS = [
    "year",
    "board",
    "position",
    "code",
    "name",
    "score",
    "madeira_value",
    "carne_value",
    "madeira_scaled",
    "carne_scaled",
]


def export_to_csv(
    records: list[dict],
    path: Path,
    fieldnames: list[str] | None = None,
) -> Path:
    """Write ``records`` to a UTF-8 CSV file.

    An empty ``records`` list still writes the header when ``fieldnames``
    is given, otherwise an empty file.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    cols = fieldnames or (list(records[0].keys()) if records else [])
    if not cols:
        path.write_text("", encoding="utf-8")
        return path
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=cols, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(records)
    return path


def export_to_json(data: dict | list, path: Path) -> Path:
    """Write ``data`` as pretty-printed UTF-8 JSON."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(data, indent=2, ensure_ascii=False, default=str), encoding="utf-8"
    )
    return path


def flatten_rankings_for_export(rankings: "Rankings") -> list[dict]:
    """One row per entry of the three leaderboards, tagged with ``board``.

    ``board`` is ``"madeira"``, ``"carne"`` or ``"combinado"``; columns
    follow ``RANKING_COLUMNS``.
    """
    rows: list[dict] = []
    boards = (
        ("madeira", rankings.madeira),
        ("carne", rankings.carne),
        ("combinado", rankings.combined),
    )
    for board, entries in boards:
        for e in entries:
            rows.append({"year": rankings.year, "board": board, **asdict(e)})
    return rows


def series_rows(
    time_series: "TimeSeriesView",
    both_counts: "BothCountsView",
) -> list[dict]:
    """Wide yearly rows: ``year, madeira, carne, municipalities_both``."""
    return [
        {
            "year":                year,
            "madeira":             m,
            "carne":               c,
            "municipalities_both": b,
        }
        for year, m, c, b in zip(
            time_series.years, time_series.madeira, time_series.carne, both_counts.counts
        )
    ]


def build_year_report(metrics: "YearMetrics", rankings: "Rankings") -> dict:
    """JSON-ready summary of one year: metric cards plus all three boards."""
    return {
        "year":     metrics.year,
        "metrics":  asdict(metrics),
        "madeira":  [asdict(e) for e in rankings.madeira],
        "carne":    [asdict(e) for e in rankings.carne],
        "combined": [asdict(e) for e in rankings.combined],
    }
