"""HTTP route definitions for the front and back services."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Header, status
from fastapi.responses import JSONResponse

from app.schemas import CoordinatesResponse, ErrorResponse, TemperatureResponse
from services.deadline import BUDGET_HEADER, Deadline
from services.errors import InvalidInput, LookupFailure
from services.orchestrator import (
    BackOrchestrator,
    FrontOrchestrator,
    build_default_back_orchestrator,
    build_default_front_orchestrator,
)

INVALID_CEP_MESSAGE = "CEP inválido. Use exatamente 8 dígitos numéricos."

_ERROR_RESPONSES: Dict[int | str, Dict[str, Any]] = {
    404: {"model": ErrorResponse},
    422: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
}

back_router = APIRouter()
front_router = APIRouter()


def get_back_orchestrator() -> BackOrchestrator:
    return build_default_back_orchestrator()


def get_front_orchestrator() -> FrontOrchestrator:
    return build_default_front_orchestrator()


def error_response(exc: LookupFailure, status_code: Optional[int] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code or exc.status_code,
        content=ErrorResponse(error=exc.message).model_dump(),
    )


@back_router.api_route(
    "/temp/{cep}",
    methods=["GET", "POST"],
    response_model=TemperatureResponse,
    response_model_exclude_none=True,
    responses=_ERROR_RESPONSES,
    summary="Resolve a postal code to its current temperature.",
)
async def back_temperature(
    cep: str,
    orchestrator: BackOrchestrator = Depends(get_back_orchestrator),
    budget_ms: Optional[str] = Header(default=None, alias=BUDGET_HEADER),
) -> Any:
    try:
        temperature = await orchestrator.temperature(
            cep, Deadline.from_budget(orchestrator.request_timeout, budget_ms)
        )
    except LookupFailure as exc:
        return error_response(exc)
    return TemperatureResponse.from_temperature(temperature)


@back_router.get(
    "/coordenadas/{cep}",
    response_model=CoordinatesResponse,
    response_model_exclude_none=True,
    responses=_ERROR_RESPONSES,
    summary="Resolve a postal code to coordinates and city.",
)
async def back_coordinates(
    cep: str,
    orchestrator: BackOrchestrator = Depends(get_back_orchestrator),
    budget_ms: Optional[str] = Header(default=None, alias=BUDGET_HEADER),
) -> Any:
    try:
        coordinates = await orchestrator.coordinates(
            cep, Deadline.from_budget(orchestrator.request_timeout, budget_ms)
        )
    except LookupFailure as exc:
        return error_response(exc)
    return CoordinatesResponse.from_coordinates(coordinates)


@front_router.post(
    "/temp/{cep}",
    response_model=TemperatureResponse,
    response_model_exclude_none=True,
    responses=_ERROR_RESPONSES,
    summary="Validate a postal code and relay it to the back service.",
)
async def front_temperature(
    cep: str,
    orchestrator: FrontOrchestrator = Depends(get_front_orchestrator),
) -> Any:
    try:
        temperature = await orchestrator.temperature(cep)
    except LookupFailure as exc:
        return error_response(exc)
    return TemperatureResponse.from_temperature(temperature)


@front_router.get(
    "/coordenadas/{cep}",
    response_model=CoordinatesResponse,
    response_model_exclude_none=True,
    responses={status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse}, **_ERROR_RESPONSES},
    summary="Validate a postal code and relay its geocoding lookup.",
)
async def front_coordinates(
    cep: str,
    orchestrator: FrontOrchestrator = Depends(get_front_orchestrator),
) -> Any:
    try:
        coordinates = await orchestrator.coordinates(cep)
    except InvalidInput:
        return error_response(
            InvalidInput(INVALID_CEP_MESSAGE), status_code=status.HTTP_400_BAD_REQUEST
        )
    except LookupFailure as exc:
        return error_response(exc)
    return CoordinatesResponse.from_coordinates(coordinates)


def build_health_router(service: str) -> APIRouter:
    router = APIRouter()

    @router.get(
        "/health",
        summary="Health check endpoint.",
        status_code=status.HTTP_200_OK,
    )
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok", "service": service}

    @router.get(
        "/",
        summary="Root endpoint mirrors health information.",
        status_code=status.HTTP_200_OK,
    )
    async def root() -> dict[str, str]:
        return {"status": "ok", "detail": "See /health for service status."}

    return router
