from __future__ import annotations

import asyncio
from typing import Any, Callable, Iterator, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from conftest import FakeGeocoder, FakeWeather
from app.main import create_back_app, create_front_app
from services.errors import UpstreamUnavailable
from services.orchestrator import (
    BackOrchestrator,
    FrontOrchestrator,
    build_default_back_orchestrator,
    build_default_front_orchestrator,
)
from services.relay import BackServiceClient


def _as_factory(instance: Any) -> Callable[[], Any]:
    def factory() -> Any:
        return instance

    factory.cache_clear = lambda: None  # type: ignore[attr-defined]
    return factory


def _install_back(monkeypatch: pytest.MonkeyPatch, orchestrator: BackOrchestrator) -> None:
    factory = _as_factory(orchestrator)
    monkeypatch.setattr("app.main.build_default_back_orchestrator", factory)
    monkeypatch.setattr("app.api.build_default_back_orchestrator", factory)


def _install_front(monkeypatch: pytest.MonkeyPatch, orchestrator: Any) -> None:
    factory = _as_factory(orchestrator)
    monkeypatch.setattr("app.main.build_default_front_orchestrator", factory)
    monkeypatch.setattr("app.api.build_default_front_orchestrator", factory)


def _back_orchestrator(
    geocoder: FakeGeocoder,
    weather: FakeWeather,
    credential: Optional[str] = "secret-token",
    include_city: bool = True,
) -> BackOrchestrator:
    return BackOrchestrator(
        geocoder=geocoder,
        weather=weather,
        credential=credential,
        include_city=include_city,
    )


@pytest.fixture
def back_client(monkeypatch, geocoder, weather) -> Iterator[TestClient]:
    _install_back(monkeypatch, _back_orchestrator(geocoder, weather))
    with TestClient(create_back_app()) as client:
        yield client


@pytest.fixture
def front_client(monkeypatch, geocoder, weather) -> Iterator[TestClient]:
    """Front service relaying to an in-process back service."""
    _install_back(monkeypatch, _back_orchestrator(geocoder, weather))
    http_client = httpx.AsyncClient(transport=httpx.ASGITransport(app=create_back_app()))
    front = FrontOrchestrator(
        back=BackServiceClient(http_client, base_url="http://back.test"),
        http_client=http_client,
    )
    _install_front(monkeypatch, front)
    with TestClient(create_front_app()) as client:
        yield client


def test_lifespan_closes_http_client_and_clears_cache() -> None:
    app = create_back_app()

    with TestClient(app):
        during = build_default_back_orchestrator()
        http_client = during._http_client
        assert http_client is not None
        assert http_client.is_closed is False

    assert http_client.is_closed is True
    after = build_default_back_orchestrator()
    try:
        assert after is not during
    finally:
        asyncio.run(after.aclose())
        build_default_back_orchestrator.cache_clear()


def test_front_lifespan_clears_cache() -> None:
    with TestClient(create_front_app()):
        during = build_default_front_orchestrator()

    after = build_default_front_orchestrator()
    try:
        assert after is not during
    finally:
        asyncio.run(after.aclose())
        build_default_front_orchestrator.cache_clear()


@pytest.mark.parametrize("method", ["GET", "POST"])
def test_back_temperature_success(back_client: TestClient, method: str) -> None:
    response = back_client.request(method, "/temp/41830460")

    assert response.status_code == 200
    assert response.json() == {
        "city": "Salvador",
        "temp_C": 25.0,
        "temp_F": 77.0,
        "temp_K": 298.0,
    }


def test_back_rejects_short_code_without_upstream_calls(
    back_client: TestClient, geocoder: FakeGeocoder, weather: FakeWeather
) -> None:
    response = back_client.get("/temp/123")

    assert response.status_code == 422
    assert response.json() == {"error": "invalid zipcode."}
    assert geocoder.calls == []
    assert weather.calls == []


def test_back_unknown_code_returns_not_found(
    back_client: TestClient, geocoder: FakeGeocoder, weather: FakeWeather
) -> None:
    geocoder.result = None

    response = back_client.get("/temp/00000000")

    assert response.status_code == 404
    assert response.json() == {"error": "can not find zipcode"}
    assert weather.calls == []


def test_back_weather_failure_returns_bad_gateway(back_client: TestClient, weather: FakeWeather) -> None:
    weather.error = UpstreamUnavailable("weather deadline exceeded")

    response = back_client.get("/temp/41830460")

    assert response.status_code == 502
    assert response.json() == {"error": "weather deadline exceeded"}


def test_back_missing_credential_returns_server_error(monkeypatch, geocoder, weather) -> None:
    _install_back(monkeypatch, _back_orchestrator(geocoder, weather, credential=None))

    with TestClient(create_back_app()) as client:
        response = client.get("/temp/41830460")

    assert response.status_code == 500
    assert response.json() == {"error": "API token not configured"}
    assert geocoder.calls == []


def test_back_without_city_omits_field(monkeypatch, geocoder, weather) -> None:
    _install_back(monkeypatch, _back_orchestrator(geocoder, weather, include_city=False))

    with TestClient(create_back_app()) as client:
        response = client.get("/temp/41830460")

    assert response.status_code == 200
    assert response.json() == {"temp_C": 25.0, "temp_F": 77.0, "temp_K": 298.0}


def test_back_coordinates(back_client: TestClient, weather: FakeWeather) -> None:
    response = back_client.get("/coordenadas/41830460")

    assert response.status_code == 200
    assert response.json() == {
        "latitude": "-23.5505",
        "longitude": "-46.6333",
        "city": "Salvador",
    }
    assert weather.calls == []


def test_front_relays_to_back(front_client: TestClient, geocoder: FakeGeocoder) -> None:
    response = front_client.post("/temp/41830460")

    assert response.status_code == 200
    assert response.json() == {
        "city": "Salvador",
        "temp_C": 25.0,
        "temp_F": 77.0,
        "temp_K": 298.0,
    }
    assert geocoder.calls[0][0] == "41830460"


def test_front_rejects_short_code_without_network_hop(
    front_client: TestClient, geocoder: FakeGeocoder
) -> None:
    response = front_client.post("/temp/123")

    assert response.status_code == 422
    assert response.json() == {"error": "invalid zipcode."}
    assert geocoder.calls == []


def test_front_passes_not_found_through(
    front_client: TestClient, geocoder: FakeGeocoder, weather: FakeWeather
) -> None:
    geocoder.result = None

    response = front_client.post("/temp/00000000")

    assert response.status_code == 404
    assert response.json() == {"error": "can not find zipcode"}
    assert weather.calls == []


def test_front_passes_upstream_failure_through(front_client: TestClient, weather: FakeWeather) -> None:
    weather.error = UpstreamUnavailable("weather request failed: refused")

    response = front_client.post("/temp/41830460")

    assert response.status_code == 502
    assert response.json() == {"error": "weather request failed: refused"}


def test_front_coordinates_malformed_code_is_bad_request(front_client: TestClient) -> None:
    response = front_client.get("/coordenadas/1234")

    assert response.status_code == 400
    assert response.json() == {"error": "CEP inválido. Use exatamente 8 dígitos numéricos."}


def test_front_coordinates_success(front_client: TestClient) -> None:
    response = front_client.get("/coordenadas/41830460")

    assert response.status_code == 200
    assert response.json()["latitude"] == "-23.5505"


def test_front_unreachable_back_is_bad_gateway(monkeypatch) -> None:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    http_client = httpx.AsyncClient(transport=httpx.MockTransport(refuse))
    front = FrontOrchestrator(
        back=BackServiceClient(http_client, base_url="http://back.test"),
        http_client=http_client,
    )
    _install_front(monkeypatch, front)

    with TestClient(create_front_app()) as client:
        response = client.post("/temp/41830460")

    assert response.status_code == 502
    assert "connection refused" in response.json()["error"]


def test_unexpected_errors_do_not_leak_details(monkeypatch) -> None:
    class Exploding:
        async def temperature(self, cep: str) -> None:
            raise RuntimeError("secret internals")

        async def aclose(self) -> None:
            return None

    _install_front(monkeypatch, Exploding())

    with TestClient(create_front_app(), raise_server_exceptions=False) as client:
        response = client.post("/temp/41830460")

    assert response.status_code == 500
    assert response.json() == {"error": "internal server error"}


@pytest.mark.parametrize(("factory", "service"), [(create_back_app, "back"), (create_front_app, "front")])
def test_healthcheck(monkeypatch, geocoder, weather, factory, service: str) -> None:
    _install_back(monkeypatch, _back_orchestrator(geocoder, weather))
    _install_front(monkeypatch, FrontOrchestrator(back=None))  # type: ignore[arg-type]

    with TestClient(factory()) as client:
        response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": service}


def test_back_honours_forwarded_budget(back_client: TestClient, geocoder: FakeGeocoder) -> None:
    response = back_client.get("/temp/41830460", headers={"X-Request-Budget-Ms": "200"})

    assert response.status_code == 200
    deadline = geocoder.calls[0][2]
    assert deadline.remaining() <= 0.2


def test_front_forwards_its_budget_to_back(monkeypatch, geocoder, weather) -> None:
    _install_back(monkeypatch, _back_orchestrator(geocoder, weather))
    http_client = httpx.AsyncClient(transport=httpx.ASGITransport(app=create_back_app()))
    front = FrontOrchestrator(
        back=BackServiceClient(http_client, base_url="http://back.test"),
        request_timeout=1.5,
        http_client=http_client,
    )
    _install_front(monkeypatch, front)

    with TestClient(create_front_app()) as client:
        response = client.post("/temp/41830460")

    assert response.status_code == 200
    assert geocoder.calls[0][2].remaining() <= 1.5
