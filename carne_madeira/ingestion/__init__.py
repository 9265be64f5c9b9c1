"""
Ingestion layer — startup loading of the three input documents.

Submodules:
  loader — concurrent all-or-nothing load of timber JSON, cattle JSON and
           the municipality GeoJSON (local paths or http(s) URLs).
"""
