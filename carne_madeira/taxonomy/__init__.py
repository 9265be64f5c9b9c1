"""
Taxonomy enums shared by every layer.

Modules:
  datasets — DatasetKind, MapMode, DashboardTab.
"""
