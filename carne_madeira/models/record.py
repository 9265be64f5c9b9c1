"""
Production record — one row of a timber or cattle dataset.

The source JSON files use Portuguese field names; the model exposes English
attribute names and accepts either via aliases::

    {"ano": "2013", "cod_ibge": "4100103", "municipio": "Abatiá", "valor": 1520.0}

Records are frozen (immutable) after construction. Year and municipality
code are always strings: the files sometimes carry them as numbers, and all
joins (year filter, lookups, GeoJSON ``CodIbge``) use string equality.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProductionRecord(BaseModel):
    """Annual production value of one municipality in one dataset.

    Attributes:
        year: Calendar year as a string (``"2013"``).
        municipality_code: IBGE municipality code, the join key across
            datasets and geometry.
        municipality_name: Display name.
        value: Production value in R$ thousand. Zero means no recorded
            production.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    year: str = Field(alias="ano")
    municipality_code: str = Field(alias="cod_ibge")
    municipality_name: str = Field(default="", alias="municipio")
    value: float = Field(alias="valor")

    @field_validator("year", "municipality_code", mode="before")
    @classmethod
    def coerce_to_str(cls, v: Any) -> Any:
        if isinstance(v, bool):
            return v
        if isinstance(v, (int, float)):
            return str(int(v))
        return v

    @field_validator("municipality_name", mode="before")
    @classmethod
    def coerce_name(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("value", mode="before")
    @classmethod
    def coerce_missing_value(cls, v: Any) -> Any:
        return 0.0 if v is None else v

    @field_validator("value")
    @classmethod
    def validate_non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("Production value must be non-negative.")
        return v
