"""Open-Meteo current weather client."""

from __future__ import annotations

import logging
from typing import Any, Protocol

import httpx

from models.records import Coordinates
from services.deadline import Deadline
from services.errors import InvalidCoordinates, UpstreamUnavailable

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.open-meteo.com"
DEFAULT_TIMEOUT = 3.0


class WeatherResolver(Protocol):
    async def resolve(self, coordinates: Coordinates, deadline: Deadline) -> float:
        ...


def _parse_coordinate(name: str, raw: str) -> float:
    try:
        return float(raw)
    except (TypeError, ValueError) as exc:
        raise InvalidCoordinates(f"invalid {name}: {raw!r}") from exc


class OpenMeteoClient:
    """Fetches the current temperature in Celsius for a coordinate pair."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._client = http_client
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    async def resolve(self, coordinates: Coordinates, deadline: Deadline) -> float:
        latitude = _parse_coordinate("latitude", coordinates.latitude)
        longitude = _parse_coordinate("longitude", coordinates.longitude)

        request = self._client.get(
            f"{self.base_url}/v1/forecast",
            params={
                "latitude": f"{latitude:.4f}",
                "longitude": f"{longitude:.4f}",
                "current_weather": "true",
            },
        )
        try:
            response = await deadline.tighten(self.timeout).bound(request, "weather")
        except httpx.HTTPError as exc:
            logger.warning(
                "weather request failed",
                extra={"upstream": "open-meteo", "reason": type(exc).__name__},
            )
            raise UpstreamUnavailable(f"weather request failed: {exc}") from exc

        if not response.is_success:
            logger.warning(
                "weather returned unexpected status",
                extra={"upstream": "open-meteo", "status_code": response.status_code},
            )
            raise UpstreamUnavailable(
                f"unexpected weather response: {response.status_code} {response.reason_phrase}".rstrip(),
                upstream_status=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamUnavailable("could not decode weather response") from exc
        return _extract_temperature(payload)


def _extract_temperature(payload: Any) -> float:
    current = payload.get("current_weather") if isinstance(payload, dict) else None
    temperature = current.get("temperature") if isinstance(current, dict) else None
    if isinstance(temperature, bool) or not isinstance(temperature, (int, float)):
        raise UpstreamUnavailable("weather response is missing current temperature")
    return float(temperature)
