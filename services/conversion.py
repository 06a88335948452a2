from __future__ import annotations

from typing import Optional

from models.records import Temperature


def convert(celsius: float, city: Optional[str] = None) -> Temperature:
    """Wrap a Celsius reading so Fahrenheit and Kelvin derive from it."""
    return Temperature(celsius=float(celsius), city=city)
