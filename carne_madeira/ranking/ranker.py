"""
Leaderboard ranking: orders municipalities for one year and returns
``RankingEntry`` objects with 1-based positions.

Usage flow
----------
1. rank_single_metric(year_records, top_n=10)
   -> list[RankingEntry]  (descending by value)

2. rank_combined(codes, madeira_lookup, carne_lookup, max_madeira, max_carne,
                 madeira_names, carne_names, top_n=10)
   -> list[RankingEntry]  (descending by normA + normB)

3. build_rankings(madeira, carne, year, top_n=10)
   -> Rankings  (all three leaderboards for the selected year)

Ordering
--------
All sorts are stable: ties keep the encounter order of the input (the order
of the records in the source file, or of ``codes`` for the combined board).
Python's ``sorted`` is stable, so sorting by ``-score`` alone gives that.

Combined score
--------------
    score = normalize(madeira, max_madeira) + normalize(carne, max_carne)

Range [0, 2].  It is deliberately NOT divided by 2 (unlike the map's
combined index): a municipality at the top of both datasets scores 2.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterable, Sequence

from carne_madeira.aggregation.aggregator import (
    filter_by_year,
    max_value,
    to_lookup,
    to_name_lookup,
    union_codes,
)
from carne_madeira.models.geometry import UNKNOWN_MUNICIPALITY
from carne_madeira.models.record import ProductionRecord
from carne_madeira.scoring.scorer import normalize
from carne_madeira.taxonomy.datasets import DatasetKind

DEFAULT_TOP_N = 10


@dataclass(frozen=True)
class RankingEntry:
    """One leaderboard row.

    Attributes:
        position:       1-based rank.
        code:           Municipality code.
        name:           Display name (``"Desconhecido"`` when unresolved).
        score:          Sort key: raw value for single-metric boards,
                        normA + normB for the combined board.
        madeira_value:  Timber value (R$ thousand), 0 when absent.
        carne_value:    Cattle value (R$ thousand), 0 when absent.
        madeira_scaled: Normalized timber value in [0, 1].
        carne_scaled:   Normalized cattle value in [0, 1].
    """

    position:       int
    code:           str
    name:           str
    score:          float
    madeira_value:  float = 0.0
    carne_value:    float = 0.0
    madeira_scaled: float = 0.0
    carne_scaled:   float = 0.0


def rank_single_metric(
    records: Iterable[ProductionRecord],
    kind:    DatasetKind = DatasetKind.MADEIRA,
    top_n:   int | None = None,
) -> list[RankingEntry]:
    """Rank one dataset's records by value, descending.

    Args:
        records: Year-filtered records of one dataset.
        kind:    Which dataset the records belong to (fills the matching
                 ``*_value`` field of each entry).
        top_n:   Truncate to this many entries; ``None`` keeps all.

    Returns:
        Ordered ``RankingEntry`` list with positions 1..n.
    """
    ordered = sorted(records, key=lambda r: -r.value)
    if top_n is not None:
        ordered = ordered[:top_n]

    entries: list[RankingEntry] = []
    for pos, r in enumerate(ordered, start=1):
        values = (
            {"madeira_value": r.value}
            if kind == DatasetKind.MADEIRA
            else {"carne_value": r.value}
        )
        entries.append(
            RankingEntry(
                position=pos,
                code=r.municipality_code,
                name=r.municipality_name or UNKNOWN_MUNICIPALITY,
                score=r.value,
                **values,
            )
        )
    return entries


def rank_combined(
    codes:          Iterable[str],
    madeira_lookup: dict[str, float],
    carne_lookup:   dict[str, float],
    max_madeira:    float,
    max_carne:      float,
    madeira_names:  dict[str, str] | None = None,
    carne_names:    dict[str, str] | None = None,
    top_n:          int | None = DEFAULT_TOP_N,
) -> list[RankingEntry]:
    """Rank municipalities by the sum of both normalized values.

    Args:
        codes:          Every code present in either dataset's year view, in
                        encounter order (see ``aggregator.union_codes``).
        madeira_lookup: Timber ``code -> value``.
        carne_lookup:   Cattle ``code -> value``.
        max_madeira:    Timber max for the year (0 → all timber scores 0).
        max_carne:      Cattle max for the year (0 → all cattle scores 0).
        madeira_names:  Timber ``code -> name``; preferred for display.
        carne_names:    Cattle ``code -> name``; fallback.
        top_n:          Truncate to this many entries (default 10).

    Returns:
        Ordered ``RankingEntry`` list with positions 1..n.
    """
    madeira_names = madeira_names or {}
    carne_names = carne_names or {}

    scored: list[RankingEntry] = []
    for code in codes:
        madeira = madeira_lookup.get(code, 0.0)
        carne = carne_lookup.get(code, 0.0)
        madeira_scaled = normalize(madeira, max_madeira)
        carne_scaled = normalize(carne, max_carne)
        name = madeira_names.get(code) or carne_names.get(code) or UNKNOWN_MUNICIPALITY
        scored.append(
            RankingEntry(
                position=0,
                code=code,
                name=name,
                score=madeira_scaled + carne_scaled,
                madeira_value=madeira,
                carne_value=carne,
                madeira_scaled=madeira_scaled,
                carne_scaled=carne_scaled,
            )
        )

    ordered = sorted(scored, key=lambda e: -e.score)
    if top_n is not None:
        ordered = ordered[:top_n]
    return [replace(e, position=pos) for pos, e in enumerate(ordered, start=1)]


@dataclass(frozen=True)
class Rankings:
    """The three leaderboards for one year."""

    year:     str
    madeira:  list[RankingEntry] = field(default_factory=list)
    carne:    list[RankingEntry] = field(default_factory=list)
    combined: list[RankingEntry] = field(default_factory=list)


def build_rankings(
    madeira: Sequence[ProductionRecord],
    carne:   Sequence[ProductionRecord],
    year:    str | int,
    top_n:   int = DEFAULT_TOP_N,
) -> Rankings:
    """Build the timber, cattle and combined leaderboards for ``year``.

    Args:
        madeira: All timber records (every year).
        carne:   All cattle records (every year).
        year:    Selected year.
        top_n:   Entries per leaderboard.

    Returns:
        Rankings with up to ``top_n`` entries per board.
    """
    madeira_year = filter_by_year(madeira, year)
    carne_year = filter_by_year(carne, year)

    madeira_lookup = to_lookup(madeira_year)
    carne_lookup = to_lookup(carne_year)

    combined = rank_combined(
        codes=union_codes(madeira_year, carne_year),
        madeira_lookup=madeira_lookup,
        carne_lookup=carne_lookup,
        max_madeira=max_value(madeira_lookup),
        max_carne=max_value(carne_lookup),
        madeira_names=to_name_lookup(madeira_year),
        carne_names=to_name_lookup(carne_year),
        top_n=top_n,
    )

    return Rankings(
        year=str(year),
        madeira=rank_single_metric(madeira_year, DatasetKind.MADEIRA, top_n),
        carne=rank_single_metric(carne_year, DatasetKind.CARNE, top_n),
        combined=combined,
    )
