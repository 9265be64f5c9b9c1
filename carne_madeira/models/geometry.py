"""
Municipality boundary geometry.

The boundary file is a GeoJSON ``FeatureCollection`` whose feature
properties include ``CodIbge`` (municipality code) and ``Municipio``
(display name). Geometry is used only for rendering; the core never looks
inside ``geometry``.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator

UNKNOWN_MUNICIPALITY = "Desconhecido"


class MunicipalityGeometry(BaseModel):
    """One boundary feature keyed by municipality code.

    ``code`` is ``None`` when the feature carries no ``CodIbge``; such
    features are drawn in the missing-data gray.
    """

    model_config = ConfigDict(frozen=True)

    code: Optional[str] = None
    name: str = UNKNOWN_MUNICIPALITY
    geometry: Optional[dict[str, Any]] = None

    @classmethod
    def from_feature(cls, feature: dict[str, Any]) -> "MunicipalityGeometry":
        if not isinstance(feature, dict):
            raise ValueError(f"GeoJSON feature must be an object, got {type(feature).__name__}.")
        props = feature.get("properties") or {}
        if not isinstance(props, dict):
            raise ValueError(
                f"GeoJSON feature properties must be an object, got {type(props).__name__}."
            )
        code = props.get("CodIbge")
        if isinstance(code, (int, float)) and not isinstance(code, bool):
            code = str(int(code))
        return cls(
            code=None if code is None else str(code),
            name=props.get("Municipio") or UNKNOWN_MUNICIPALITY,
            geometry=feature.get("geometry"),
        )


class BoundaryCollection(BaseModel):
    """The loaded GeoJSON document plus its parsed features.

    ``raw`` is kept verbatim so it can be handed to the map collaborator
    (folium) unchanged.
    """

    model_config = ConfigDict(frozen=True)

    raw: dict[str, Any]
    features: tuple[MunicipalityGeometry, ...]

    @field_validator("raw")
    @classmethod
    def validate_feature_collection(cls, v: dict[str, Any]) -> dict[str, Any]:
        if not isinstance(v.get("features"), list):
            raise ValueError("GeoJSON document has no 'features' list.")
        return v

    @classmethod
    def from_geojson(cls, raw: dict[str, Any]) -> "BoundaryCollection":
        features = raw.get("features") if isinstance(raw, dict) else None
        if not isinstance(features, list):
            raise ValueError("GeoJSON document has no 'features' list.")
        return cls(
            raw=raw,
            features=tuple(MunicipalityGeometry.from_feature(f) for f in features),
        )

    def __len__(self) -> int:
        return len(self.features)
