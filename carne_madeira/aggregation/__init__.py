"""
Aggregation layer: year filters, lookups, totals and per-year counts.

Modules
-------
aggregator : filter_by_year() + to_lookup() + total_value() + sum_by_year()
             + count_municipalities_in_both_by_year() + year_metrics()
             — pure functions over ProductionRecord sequences.
"""
