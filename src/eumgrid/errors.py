"""Application-level exception types for eumgrid."""

from __future__ import annotations

from typing import Any


class EumGridError(Exception):
    """Base exception for eumgrid."""


class ConfigurationError(EumGridError):
    """Raised when settings are missing or invalid."""


class RequestValidationError(EumGridError):
    """Raised before any network call when a request is malformed."""


class NetworkError(EumGridError):
    """Raised on timeouts and connection failures."""


class ApiError(EumGridError):
    """Raised when the server answers with a non-2xx status."""

    def __init__(
        self,
        message: str,
        *,
        status: int = 500,
        code: str | None = None,
        details: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.code = code
        self.details = details


class SessionTerminatedError(EumGridError):
    """Raised when credential renewal failed and the session was cleared."""

    status = 401
