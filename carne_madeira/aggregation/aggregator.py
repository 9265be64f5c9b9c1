"""
Aggregation of production records into year views, lookups and totals.

Every function here is pure: it takes immutable ``ProductionRecord``
sequences and returns fresh containers. Nothing is cached and nothing is
mutated in place, so each year change simply rebuilds the views it needs.

Key conventions
---------------
1.  **Years are strings.**  ``filter_by_year`` compares with string equality;
    an ``int`` year is converted with ``str()`` first.

2.  **Absence means zero.**  A municipality missing from one dataset's year
    view has value 0 there.  ``to_lookup`` callers read with ``.get(code, 0)``
    and ``sum_by_year`` callers default missing years to 0.

3.  **Duplicate codes: last write wins.**  The source files are expected to
    hold one row per (municipality, year).  When they do not, ``to_lookup``
    keeps the last row (no summing).  ``find_duplicate_codes`` reports the
    offending keys so a strict loader can reject them instead.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Iterable, Sequence

from carne_madeira.models.record import ProductionRecord

BASE_YEAR = 2013
YEAR_COUNT = 10


def year_range(base_year: int = BASE_YEAR, count: int = YEAR_COUNT) -> tuple[str, ...]:
    """Return ``count`` consecutive years starting at ``base_year``, as strings."""
    return tuple(str(base_year + i) for i in range(count))


YEARS: tuple[str, ...] = year_range()


def filter_by_year(
    records: Iterable[ProductionRecord],
    year: str | int,
) -> tuple[ProductionRecord, ...]:
    """Keep the records whose year equals ``year`` (encounter order preserved)."""
    year_str = str(year)
    return tuple(r for r in records if r.year == year_str)


def to_lookup(records: Iterable[ProductionRecord]) -> dict[str, float]:
    """Map municipality code to value.  Last write wins on duplicate codes."""
    lookup: dict[str, float] = {}
    for r in records:
        lookup[r.municipality_code] = r.value
    return lookup


def to_name_lookup(records: Iterable[ProductionRecord]) -> dict[str, str]:
    """Map municipality code to the first non-empty name seen for it."""
    names: dict[str, str] = {}
    for r in records:
        if r.municipality_name and r.municipality_code not in names:
            names[r.municipality_code] = r.municipality_name
    return names


def total_value(records: Iterable[ProductionRecord]) -> float:
    """Sum of ``value`` over ``records``.  Empty input yields 0."""
    return sum((r.value for r in records), 0.0)


def max_value(lookup: dict[str, float]) -> float:
    """Largest value in ``lookup``; 0 when the lookup is empty."""
    return max(lookup.values(), default=0.0)


def municipalities_with_positive_value(records: Iterable[ProductionRecord]) -> set[str]:
    """Codes of the municipalities with ``value > 0``."""
    return {r.municipality_code for r in records if r.value > 0}


def municipalities_in_both(set_a: set[str], set_b: set[str]) -> set[str]:
    """Intersection of two code sets."""
    return set_a & set_b


def union_codes(
    records_a: Iterable[ProductionRecord],
    records_b: Iterable[ProductionRecord],
) -> list[str]:
    """Codes present in either sequence, in encounter order (A first)."""
    seen: dict[str, None] = {}
    for r in records_a:
        seen.setdefault(r.municipality_code, None)
    for r in records_b:
        seen.setdefault(r.municipality_code, None)
    return list(seen)


def count_municipalities_in_both_by_year(
    records_a: Sequence[ProductionRecord],
    records_b: Sequence[ProductionRecord],
    years: Sequence[str] = YEARS,
) -> list[int]:
    """Per year, the number of municipalities with positive value in both datasets.

    Args:
        records_a: All records of the first dataset (every year).
        records_b: All records of the second dataset (every year).
        years:     Year range, ascending.

    Returns:
        One count per entry of ``years``, same order.
    """
    counts: list[int] = []
    for year in years:
        pos_a = municipalities_with_positive_value(filter_by_year(records_a, year))
        pos_b = municipalities_with_positive_value(filter_by_year(records_b, year))
        counts.append(len(municipalities_in_both(pos_a, pos_b)))
    return counts


def sum_by_year(records: Iterable[ProductionRecord]) -> dict[str, float]:
    """Group by year and sum values.  Years with no records are absent."""
    totals: dict[str, float] = defaultdict(float)
    for r in records:
        totals[r.year] += r.value
    return dict(totals)


def find_duplicate_codes(records: Iterable[ProductionRecord]) -> list[tuple[str, str]]:
    """Return ``(year, code)`` pairs that occur more than once, in encounter order."""
    seen: set[tuple[str, str]] = set()
    dupes: dict[tuple[str, str], None] = {}
    for r in records:
        key = (r.year, r.municipality_code)
        if key in seen:
            dupes.setdefault(key, None)
        seen.add(key)
    return list(dupes)


# ── Year metrics ──────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class YearMetrics:
    """Headline numbers for the selected year.

    Attributes:
        year:               Selected year.
        total_madeira:      Sum of timber values (R$ thousand).
        total_carne:        Sum of cattle values (R$ thousand).
        municipalities_both: Municipalities with positive value in both.
    """

    year: str
    total_madeira: float
    total_carne: float
    municipalities_both: int


def year_metrics(
    madeira: Sequence[ProductionRecord],
    carne: Sequence[ProductionRecord],
    year: str | int,
) -> YearMetrics:
    """Compute the metric cards for ``year``."""
    madeira_year = filter_by_year(madeira, year)
    carne_year = filter_by_year(carne, year)
    both = municipalities_in_both(
        municipalities_with_positive_value(madeira_year),
        municipalities_with_positive_value(carne_year),
    )
    return YearMetrics(
        year=str(year),
        total_madeira=total_value(madeira_year),
        total_carne=total_value(carne_year),
        municipalities_both=len(both),
    )
