"""
Number formatting (pt-BR) and ASCII terminal formatters.

Number formats
--------------
The dashboard is Brazilian-Portuguese facing, so every displayed number
uses ``.`` as the thousands separator and ``,`` as the decimal mark::

    format_thousands_br(1234567.6)   -> "1.234.568"
    format_number_br(1234.5)         -> "1.234,5"
    format_brl_mil(1234.5)           -> "R$ 1.234,5 mil"

Rounding is half-up on the exact binary value of the float, which is how
browsers round for ``toFixed`` / ``toLocaleString``.

Combined score display
----------------------
The combined ranking score is the SUM of two normalized values, so it runs
from 0 to 2.  It is displayed as points from 0 to 200 (``score * 100``),
never as a percentage; only the two components are percentages.

Terminal tables
---------------
``format_year_summary``, ``format_ranking_table`` and ``format_series_table``
return plain multi-line strings suitable for ``typer.echo()``.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING, Callable, Sequence

if TYPE_CHECKING:
    from carne_madeira.aggregation.aggregator import YearMetrics
    from carne_madeira.ranking.ranker import RankingEntry


# ── Numbers ───────────────────────────────────────────────────────────────────


def _group_br(integer_digits: str) -> str:
    groups: list[str] = []
    while len(integer_digits) > 3:
        groups.insert(0, integer_digits[-3:])
        integer_digits = integer_digits[:-3]
    groups.insert(0, integer_digits)
    return ".".join(groups)


def format_number_br(value: float, max_fraction_digits: int = 3) -> str:
    """Format ``value`` like ``Number.toLocaleString('pt-BR')``.

    Args:
        value:               Number to format.
        max_fraction_digits: Decimal places kept (trailing zeros dropped).

    Returns:
        e.g. ``"1.234,5"`` for 1234.5, ``"0"`` for 0.
    """
    quantum = Decimal(1).scaleb(-max_fraction_digits)
    rounded = Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP)
    sign = "-" if rounded < 0 else ""
    text = f"{abs(rounded):f}"
    int_part, _, frac_part = text.partition(".")
    frac_part = frac_part.rstrip("0")
    out = sign + _group_br(int_part)
    if frac_part:
        out += "," + frac_part
    return out if out != "-0" else "0"


def format_thousands_br(value: float) -> str:
    """Round to an integer and group thousands with ``.``."""
    rounded = Decimal(value).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    sign = "-" if rounded < 0 else ""
    return sign + _group_br(str(abs(int(rounded))))


def format_brl_mil(value: float) -> str:
    """Value in R$ thousand, e.g. ``"R$ 1.520 mil"``."""
    return f"R$ {format_number_br(value)} mil"


def format_brl_millions(value: float) -> str:
    """Chart axis / tooltip label, e.g. ``"R$ 12,5M"``."""
    return f"R$ {format_number_br(value)}M"


def format_percent(fraction: float) -> str:
    """``0.4567`` -> ``"46%"``."""
    return f"{format_thousands_br(fraction * 100)}%"


def format_combined_value(entry: "RankingEntry") -> str:
    """``🌲 A% + 🥩 B% = S pts`` for a combined ranking entry."""
    return (
        f"🌲 {format_percent(entry.madeira_scaled)} + "
        f"🥩 {format_percent(entry.carne_scaled)} = "
        f"{format_thousands_br(entry.score * 100)} pts"
    )


# ── Terminal tables ───────────────────────────────────────────────────────────


def format_year_summary(metrics: "YearMetrics", unit_divisor: float = 1000.0) -> str:
    """Metric cards for one year as text.

    Totals are shown in R$ million (raw R$ thousand ÷ ``unit_divisor``).
    """
    lines: list[str] = []
    lines.append("")
    lines.append(f"=== Resumo {metrics.year} ===")
    lines.append(
        f"  Madeira (R$ milhões):        {format_thousands_br(metrics.total_madeira / unit_divisor):>12}"
    )
    lines.append(
        f"  Carne (R$ milhões):          {format_thousands_br(metrics.total_carne / unit_divisor):>12}"
    )
    lines.append(f"  Municípios com ambas:        {metrics.municipalities_both:>12}")
    return "\n".join(lines)


def format_ranking_table(
    title:     str,
    entries:   Sequence["RankingEntry"],
    formatter: Callable[["RankingEntry"], str],
) -> str:
    """Format one leaderboard as an ASCII table.

    Args:
        title:     Block heading (e.g. ``"Top 10 Madeira - 2015"``).
        entries:   Ordered ranking entries.
        formatter: Produces the value column for each entry.

    Returns:
        Multi-line string.
    """
    lines: list[str] = ["", f"  [{title}]"]
    if not entries:
        lines.append("    (sem dados para o ano selecionado)")
        return "\n".join(lines)

    header = f"    {'Pos':>3}  {'Município':<32}  Valor"
    lines.append(header)
    lines.append("    " + "-" * (len(header) + 20))
    for e in entries:
        lines.append(f"    {e.position:>3}  {e.name[:32]:<32}  {formatter(e)}")
    return "\n".join(lines)


def format_series_table(
    years:   Sequence[str],
    madeira: Sequence[float],
    carne:   Sequence[float],
    both:    Sequence[int],
) -> str:
    """Yearly totals (R$ million) and municipality counts, one row per year."""
    lines: list[str] = ["", "=== Série histórica ==="]
    header = f"  {'Ano':>4}  {'Madeira (R$ M)':>16}  {'Carne (R$ M)':>16}  {'Ambas':>6}"
    lines.append(header)
    lines.append("  " + "-" * (len(header) - 2))
    for year, m, c, b in zip(years, madeira, carne, both):
        lines.append(
            f"  {year:>4}  {format_number_br(m):>16}  {format_number_br(c):>16}  {b:>6}"
        )
    return "\n".join(lines)
