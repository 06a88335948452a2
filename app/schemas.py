"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from models.records import Coordinates, Temperature


class TemperatureResponse(BaseModel):
    """Current temperature for a postal code in three scales."""

    city: Optional[str] = Field(default=None, description="City resolved from the postal code.")
    temp_C: float
    temp_F: float
    temp_K: float

    @classmethod
    def from_temperature(cls, temperature: Temperature) -> "TemperatureResponse":
        return cls(
            city=temperature.city,
            temp_C=temperature.celsius,
            temp_F=temperature.fahrenheit,
            temp_K=temperature.kelvin,
        )


class CoordinatesResponse(BaseModel):
    """Geocoding result as reported by the provider."""

    latitude: str
    longitude: str
    city: Optional[str] = None

    @classmethod
    def from_coordinates(cls, coordinates: Coordinates) -> "CoordinatesResponse":
        return cls(
            latitude=coordinates.latitude,
            longitude=coordinates.longitude,
            city=coordinates.city,
        )


class ErrorResponse(BaseModel):
    """Structured error body returned for every failure."""

    error: str
