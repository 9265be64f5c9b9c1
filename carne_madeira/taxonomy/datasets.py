"""
Dataset and view taxonomy.

Three small enums describe what the dashboard can show:
  - ``DatasetKind``  — which production dataset a record belongs to.
  - ``MapMode``      — which metric colours the choropleth.
  - ``DashboardTab`` — which tab is active (decides which views are built).

This module has NO imports from any other ``carne_madeira`` package.
"""

from enum import StrEnum


class DatasetKind(StrEnum):
    """One of the two annual production datasets."""

    MADEIRA = "madeira"
    """Timber (forestry extraction / silviculture) production value."""

    CARNE = "carne"
    """Cattle / meat production value."""

    @property
    def label(self) -> str:
        return _DATASET_LABELS[self]


class MapMode(StrEnum):
    """Choropleth colouring mode."""

    ILPF = "ilpf"
    """Combined index: mean of both normalized values, 7-step palette."""

    MADEIRA = "madeira"
    """Timber value only, green gradient."""

    CARNE = "carne"
    """Cattle value only, red lightness gradient."""

    @property
    def label(self) -> str:
        return _MODE_LABELS[self]

    @property
    def dataset(self) -> DatasetKind | None:
        """The single dataset this mode shows, or ``None`` for the combined mode."""
        if self == MapMode.ILPF:
            return None
        return DatasetKind(self.value)


class DashboardTab(StrEnum):
    """Dashboard tabs."""

    MAPA = "mapa"
    SERIES = "series"
    RANKINGS = "rankings"


_DATASET_LABELS: dict[DatasetKind, str] = {
    DatasetKind.MADEIRA: "Madeira",
    DatasetKind.CARNE: "Carne",
}

_MODE_LABELS: dict[MapMode, str] = {
    MapMode.ILPF: "Índice ILPF (combinado)",
    MapMode.MADEIRA: "Madeira",
    MapMode.CARNE: "Carne",
}
