"""Failure taxonomy shared by the front and back services.

Every upstream outcome is classified once, at the client that observed it,
into one of these exceptions. Orchestrators and routes pass the
classification upward unchanged; the HTTP layer only reads ``status_code``
and ``message``.
"""

from __future__ import annotations

from typing import Optional


class LookupFailure(Exception):
    """Base class for classified lookup failures."""

    status_code: int = 500
    default_message: str = "lookup failed"

    def __init__(self, message: Optional[str] = None, *, status_code: Optional[int] = None) -> None:
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class InvalidInput(LookupFailure):
    status_code = 422
    default_message = "invalid zipcode."


class NotFound(LookupFailure):
    status_code = 404
    default_message = "can not find zipcode"


class UpstreamUnavailable(LookupFailure):
    """Transport, status, decode, or deadline failure from an upstream."""

    status_code = 502
    default_message = "upstream service unavailable"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        upstream_status: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.upstream_status = upstream_status


class InvalidCoordinates(UpstreamUnavailable):
    default_message = "invalid coordinates"


class ConfigurationError(LookupFailure):
    status_code = 500
    default_message = "API token not configured"
