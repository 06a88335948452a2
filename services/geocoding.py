"""CEP Aberto geocoding client."""

from __future__ import annotations

import logging
from typing import Any, Protocol

import httpx

from models.records import Coordinates
from services.deadline import Deadline
from services.errors import NotFound, UpstreamUnavailable

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://www.cepaberto.com"


class GeocodeResolver(Protocol):
    async def resolve(self, cep: str, credential: str, deadline: Deadline) -> Coordinates:
        ...


class CepAbertoClient:
    """Resolves a postal code to coordinates and a city name.

    CEP Aberto answers unknown postal codes with a success status and an
    empty body (or an object without coordinates), so emptiness is the only
    "not found" signal. Any non-success status is an upstream failure.
    """

    def __init__(self, http_client: httpx.AsyncClient, base_url: str = DEFAULT_BASE_URL) -> None:
        self._client = http_client
        self.base_url = base_url.rstrip("/")

    async def resolve(self, cep: str, credential: str, deadline: Deadline) -> Coordinates:
        request = self._client.get(
            f"{self.base_url}/api/v3/cep",
            params={"cep": cep},
            headers={"Authorization": f"Token {credential}"},
        )
        try:
            response = await deadline.bound(request, "geocoding")
        except httpx.HTTPError as exc:
            logger.warning(
                "geocoding request failed",
                extra={"cep": cep, "upstream": "cepaberto", "reason": type(exc).__name__},
            )
            raise UpstreamUnavailable(f"geocoding request failed: {exc}") from exc

        if not response.is_success:
            logger.warning(
                "geocoding returned unexpected status",
                extra={"cep": cep, "upstream": "cepaberto", "status_code": response.status_code},
            )
            raise UpstreamUnavailable(
                f"unexpected geocoding response: {response.status_code} {response.reason_phrase}".rstrip(),
                upstream_status=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise NotFound() from exc

        coordinates = _parse_coordinates(payload)
        if coordinates is None or not coordinates.resolved:
            logger.info("postal code not found", extra={"cep": cep, "upstream": "cepaberto"})
            raise NotFound()
        return coordinates


def _parse_coordinates(payload: Any) -> Coordinates | None:
    if not isinstance(payload, dict):
        return None
    latitude = payload.get("latitude", "")
    longitude = payload.get("longitude", "")
    if not isinstance(latitude, str) or not isinstance(longitude, str):
        return None

    city = None
    cidade = payload.get("cidade")
    if isinstance(cidade, dict):
        name = cidade.get("nome")
        if isinstance(name, str) and name:
            city = name
    return Coordinates(latitude=latitude, longitude=longitude, city=city)
