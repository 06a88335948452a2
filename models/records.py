"""Request-scoped value objects shared by both services."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True, slots=True)
class Coordinates:
    """Geocoding result in the provider's native string representation."""

    latitude: str
    longitude: str
    city: Optional[str] = None

    @property
    def resolved(self) -> bool:
        """Both coordinates are present and parse as floating point."""
        if not self.latitude or not self.longitude:
            return False
        try:
            float(self.latitude)
            float(self.longitude)
        except ValueError:
            return False
        return True


@dataclass(frozen=True, slots=True)
class Temperature:
    """A Celsius reading with its derived Fahrenheit and Kelvin values."""

    celsius: float
    city: Optional[str] = None

    @property
    def fahrenheit(self) -> float:
        return self.celsius * 1.8 + 32

    @property
    def kelvin(self) -> float:
        # +273, not +273.15: consumers compare against the integer offset.
        return self.celsius + 273
