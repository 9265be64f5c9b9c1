"""
Domain models.

Modules:
  record   — ProductionRecord (one dataset row per municipality and year).
  geometry — MunicipalityGeometry + BoundaryCollection (GeoJSON wrapper).
"""
