"""Carne e Madeira PR — timber and cattle production dashboard for Paraná."""

__version__ = "0.1.0"
