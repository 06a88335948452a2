from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


_API_TOKEN_ENV = "API_TOKEN"
_GEOCODE_URL_ENV = "CEP_ABERTO_BASE_URL"
_WEATHER_URL_ENV = "OPEN_METEO_BASE_URL"
_BACK_URL_ENV = "BACK_SERVICE_URL"
_REQUEST_TIMEOUT_ENV = "REQUEST_TIMEOUT_SECONDS"
_WEATHER_TIMEOUT_ENV = "WEATHER_TIMEOUT_SECONDS"
_INCLUDE_CITY_ENV = "INCLUDE_CITY"
_TRACE_STAGES_ENV = "TRACE_STAGES"
_LOG_LEVEL_ENV = "LOG_LEVEL"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    api_token: Optional[str]
    geocode_base_url: str
    weather_base_url: str
    back_service_url: str
    request_timeout: float
    weather_timeout: float
    include_city: bool
    trace_stages: bool
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_url_env(name: str, default: str) -> str:
    return _read_str_env(name, default).rstrip("/")


def _read_seconds(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip().lower()
    if candidate in _TRUTHY:
        return True
    if candidate in _FALSY:
        return False
    return default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        api_token=_read_optional_env(_API_TOKEN_ENV, None),
        geocode_base_url=_read_url_env(_GEOCODE_URL_ENV, "https://www.cepaberto.com"),
        weather_base_url=_read_url_env(_WEATHER_URL_ENV, "https://api.open-meteo.com"),
        back_service_url=_read_url_env(_BACK_URL_ENV, "http://servico-b:8081"),
        request_timeout=_read_seconds(_REQUEST_TIMEOUT_ENV, 6.0),
        weather_timeout=_read_seconds(_WEATHER_TIMEOUT_ENV, 3.0),
        include_city=_read_flag(_INCLUDE_CITY_ENV, True),
        trace_stages=_read_flag(_TRACE_STAGES_ENV, True),
        log_level=_read_log_level("INFO"),
    )
