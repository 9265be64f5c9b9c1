"""
Choropleth scoring: normalization, combined index, colour formulas, styles.

Modules
-------
scorer : normalize() + combined_index() + color_for_combined_index()
         + color_for_single_metric() + feature_style() + legend_for_mode()
         — pure functions, no I/O.
"""
