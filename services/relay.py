"""HTTP hop from the front service to the back service."""

from __future__ import annotations

import logging
from typing import Any, Dict, Protocol, Type

import httpx

from models.records import Coordinates, Temperature
from services.conversion import convert
from services.deadline import BUDGET_HEADER, Deadline
from services.errors import (
    ConfigurationError,
    InvalidInput,
    LookupFailure,
    NotFound,
    UpstreamUnavailable,
)

logger = logging.getLogger(__name__)

_FAILURES_BY_STATUS: Dict[int, Type[LookupFailure]] = {
    422: InvalidInput,
    404: NotFound,
    500: ConfigurationError,
}


class BackServiceResolver(Protocol):
    async def temperature(self, cep: str, deadline: Deadline) -> Temperature:
        ...

    async def coordinates(self, cep: str, deadline: Deadline) -> Coordinates:
        ...


class BackServiceClient:
    """Forwards lookups to the back service and re-raises its classification."""

    def __init__(self, http_client: httpx.AsyncClient, base_url: str) -> None:
        self._client = http_client
        self.base_url = base_url.rstrip("/")

    async def temperature(self, cep: str, deadline: Deadline) -> Temperature:
        payload = await self._get(f"/temp/{cep}", deadline)
        celsius = payload.get("temp_C")
        if isinstance(celsius, bool) or not isinstance(celsius, (int, float)):
            raise UpstreamUnavailable("back service response is missing temp_C")
        city = payload.get("city")
        return convert(celsius, city=city if isinstance(city, str) and city else None)

    async def coordinates(self, cep: str, deadline: Deadline) -> Coordinates:
        payload = await self._get(f"/coordenadas/{cep}", deadline)
        latitude = payload.get("latitude")
        longitude = payload.get("longitude")
        if not isinstance(latitude, str) or not isinstance(longitude, str):
            raise UpstreamUnavailable("back service response is missing coordinates")
        city = payload.get("city")
        return Coordinates(
            latitude=latitude,
            longitude=longitude,
            city=city if isinstance(city, str) and city else None,
        )

    async def _get(self, path: str, deadline: Deadline) -> Dict[str, Any]:
        try:
            request = self._client.get(
                f"{self.base_url}{path}",
                headers={BUDGET_HEADER: deadline.budget_ms()},
            )
            response = await deadline.bound(request, "back service")
        except httpx.HTTPError as exc:
            logger.warning(
                "back service request failed",
                extra={"upstream": "back", "reason": type(exc).__name__},
            )
            raise UpstreamUnavailable(f"back service request failed: {exc}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamUnavailable(
                f"could not decode back service response ({response.status_code})",
                upstream_status=response.status_code,
            ) from exc
        if not isinstance(payload, dict):
            raise UpstreamUnavailable(
                f"unexpected back service response ({response.status_code})",
                upstream_status=response.status_code,
            )

        if response.status_code == 200:
            return payload
        raise _failure_from_response(response.status_code, payload)


def _failure_from_response(status_code: int, payload: Dict[str, Any]) -> LookupFailure:
    message = payload.get("error")
    if not isinstance(message, str) or not message:
        message = f"back service responded with status {status_code}"
    failure_cls = _FAILURES_BY_STATUS.get(status_code)
    if failure_cls is None:
        return UpstreamUnavailable(message, upstream_status=status_code)
    return failure_cls(message)
