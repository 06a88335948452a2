"""Stage boundary hooks for the orchestrators.

Orchestrators wrap each stage in ``tracer.stage(name)``. A real tracing
backend can be plugged in by providing another object with the same
``stage`` context manager.
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import Any, Iterator, Protocol


class StageTracer(Protocol):
    def stage(self, name: str, **attributes: Any) -> Any:
        """Return a context manager spanning one orchestrator stage."""


class NoopTracer:

    @contextmanager
    def stage(self, name: str, **attributes: Any) -> Iterator[None]:
        yield


class LoggingTracer:
    """Reports stage start/end through the standard logging module."""

    def __init__(self, service: str, logger: logging.Logger | None = None) -> None:
        self.service = service
        self._logger = logger or logging.getLogger(__name__)

    @contextmanager
    def stage(self, name: str, **attributes: Any) -> Iterator[None]:
        start = time.perf_counter()
        extra = {"service": self.service, "stage": name, **attributes}
        self._logger.debug("stage started", extra=extra)
        outcome = "ok"
        try:
            yield
        except Exception as exc:
            outcome = type(exc).__name__
            raise
        finally:
            elapsed_ms = int((time.perf_counter() - start) * 1000)
            self._logger.info(
                "stage finished",
                extra={**extra, "outcome": outcome, "elapsed_ms": elapsed_ms},
            )
