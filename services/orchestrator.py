"""Request orchestration for the front and back services."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Optional

import httpx

from models.records import Coordinates, Temperature
from services.conversion import convert
from services.deadline import Deadline
from services.errors import ConfigurationError, InvalidInput, LookupFailure, UpstreamUnavailable
from services.geocoding import CepAbertoClient, GeocodeResolver
from services.relay import BackServiceClient, BackServiceResolver
from services.tracing import LoggingTracer, NoopTracer, StageTracer
from services.validation import validate
from services.weather import OpenMeteoClient, WeatherResolver
from settings import get_settings

logger = logging.getLogger(__name__)

DEFAULT_REQUEST_TIMEOUT = 6.0


class BackOrchestrator:
    """Validate, geocode, fetch weather and convert, failing fast at each stage."""

    def __init__(
        self,
        geocoder: GeocodeResolver,
        weather: WeatherResolver,
        credential: Optional[str],
        tracer: Optional[StageTracer] = None,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        include_city: bool = True,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.geocoder = geocoder
        self.weather = weather
        self.credential = credential
        self.tracer = tracer or NoopTracer()
        self.request_timeout = request_timeout
        self.include_city = include_city
        self._http_client = http_client

    async def temperature(self, cep: str, deadline: Optional[Deadline] = None) -> Temperature:
        deadline = deadline or Deadline.after(self.request_timeout)
        coordinates = await self._geocode(cep, deadline)

        try:
            with self.tracer.stage("weather", cep=cep):
                celsius = await self.weather.resolve(coordinates, deadline)
        except UpstreamUnavailable:
            raise
        except LookupFailure as exc:
            raise UpstreamUnavailable(exc.message) from exc
        except Exception as exc:
            logger.exception("weather lookup failed unexpectedly", extra={"cep": cep})
            raise UpstreamUnavailable("weather lookup failed") from exc

        with self.tracer.stage("convert", cep=cep):
            city = coordinates.city if self.include_city else None
            return convert(celsius, city=city)

    async def coordinates(self, cep: str, deadline: Optional[Deadline] = None) -> Coordinates:
        deadline = deadline or Deadline.after(self.request_timeout)
        return await self._geocode(cep, deadline)

    async def _geocode(self, cep: str, deadline: Deadline) -> Coordinates:
        with self.tracer.stage("validate", cep=cep):
            if not validate(cep):
                raise InvalidInput()
            if not self.credential:
                logger.error("geocoding credential is not configured", extra={"cep": cep})
                raise ConfigurationError()

        with self.tracer.stage("geocode", cep=cep):
            return await self.geocoder.resolve(cep, self.credential, deadline)

    async def aclose(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()


class FrontOrchestrator:
    """Validating relay: rejects malformed codes before the network hop."""

    def __init__(
        self,
        back: BackServiceResolver,
        tracer: Optional[StageTracer] = None,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.back = back
        self.tracer = tracer or NoopTracer()
        self.request_timeout = request_timeout
        self._http_client = http_client

    async def temperature(self, cep: str) -> Temperature:
        deadline = self._admit(cep)
        with self.tracer.stage("relay", cep=cep):
            return await self.back.temperature(cep, deadline)

    async def coordinates(self, cep: str) -> Coordinates:
        deadline = self._admit(cep)
        with self.tracer.stage("relay", cep=cep):
            return await self.back.coordinates(cep, deadline)

    def _admit(self, cep: str) -> Deadline:
        with self.tracer.stage("validate", cep=cep):
            if not validate(cep):
                raise InvalidInput()
        return Deadline.after(self.request_timeout)

    async def aclose(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()


def _build_tracer(service: str, enabled: bool) -> StageTracer:
    return LoggingTracer(service) if enabled else NoopTracer()


@lru_cache
def build_default_back_orchestrator() -> BackOrchestrator:
    """Factory that wires the back orchestrator to the real upstreams."""
    settings = get_settings()
    http_client = httpx.AsyncClient(timeout=settings.request_timeout)
    return BackOrchestrator(
        geocoder=CepAbertoClient(http_client, base_url=settings.geocode_base_url),
        weather=OpenMeteoClient(
            http_client,
            base_url=settings.weather_base_url,
            timeout=settings.weather_timeout,
        ),
        credential=settings.api_token,
        tracer=_build_tracer("back", settings.trace_stages),
        request_timeout=settings.request_timeout,
        include_city=settings.include_city,
        http_client=http_client,
    )


@lru_cache
def build_default_front_orchestrator() -> FrontOrchestrator:
    """Factory that wires the front orchestrator to the back service."""
    settings = get_settings()
    http_client = httpx.AsyncClient(timeout=settings.request_timeout)
    return FrontOrchestrator(
        back=BackServiceClient(http_client, base_url=settings.back_service_url),
        tracer=_build_tracer("front", settings.trace_stages),
        request_timeout=settings.request_timeout,
        http_client=http_client,
    )
