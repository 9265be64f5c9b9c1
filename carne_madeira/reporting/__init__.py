"""
carne_madeira.reporting — Number formatting and flat-file export.

Modules:
  formatters — pt-BR number formats and ASCII tables for Typer CLI commands.
  export     — CSV/JSON flat-file export helpers.
"""
