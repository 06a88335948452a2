from __future__ import annotations
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.api import back_router, build_health_router, front_router
from app.schemas import ErrorResponse
from logging_config import configure_logging
from services.orchestrator import (
    build_default_back_orchestrator,
    build_default_front_orchestrator,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def back_lifespan(_app: FastAPI) -> AsyncIterator[None]:
    orchestrator = build_default_back_orchestrator()
    try:
        yield
    finally:
        await orchestrator.aclose()
        build_default_back_orchestrator.cache_clear()


@asynccontextmanager
async def front_lifespan(_app: FastAPI) -> AsyncIterator[None]:
    orchestrator = build_default_front_orchestrator()
    try:
        yield
    finally:
        await orchestrator.aclose()
        build_default_front_orchestrator.cache_clear()


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "unhandled error while serving request",
        exc_info=exc,
        extra={"reason": request.url.path},
    )
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(error="internal server error").model_dump(),
    )


def create_back_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="CEP Temperature Back Service",
        description="Geocodes a postal code and reports its current temperature.",
        version="0.1.0",
        lifespan=back_lifespan,
    )
    app.add_exception_handler(Exception, unhandled_exception_handler)
    app.include_router(back_router)
    app.include_router(build_health_router("back"))
    return app


def create_front_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="CEP Temperature Front Service",
        description="Validates postal codes and relays lookups to the back service.",
        version="0.1.0",
        lifespan=front_lifespan,
    )
    app.add_exception_handler(Exception, unhandled_exception_handler)
    app.include_router(front_router)
    app.include_router(build_health_router("front"))
    return app

back_app = create_back_app()
front_app = create_front_app()
