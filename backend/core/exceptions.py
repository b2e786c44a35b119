from __future__ import annotations

from typing import Optional


class AppError(Exception):
    """Base app error. Carries an HTTP status and a machine-readable code."""

    status_code: int = 500
    code: str = "INTERNAL_SERVER_ERROR"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code


class ValidationError(AppError):
    """Raised when distance/mode/modes-list input is malformed."""

    status_code = 400
    code = "VALIDATION_ERROR"


class UnknownModeError(AppError):
    """Raised when a transport mode is not one of the fixed set."""

    status_code = 400
    code = "UNKNOWN_MODE"

    def __init__(self, mode: object):
        super().__init__(f"Unknown transport mode: {mode}")
        self.mode = mode


class ProviderError(AppError):
    """Base for failures of the external geocoding/directions provider."""

    status_code = 502
    code = "MAPBOX_API_ERROR"


class ProviderAuthError(ProviderError):
    status_code = 401
    code = "MAPBOX_AUTH_ERROR"


class ProviderRateLimitError(ProviderError):
    status_code = 429
    code = "MAPBOX_RATE_LIMIT"


class ProviderRequestError(ProviderError):
    """Provider answered with a non-success HTTP status."""


class NoRouteFoundError(ProviderError):
    status_code = 404
    code = "NO_ROUTE_FOUND"


class ProviderUnavailableError(ProviderError):
    """Provider call failed or timed out. Retryable."""

    status_code = 503
    code = "PROVIDER_UNAVAILABLE"


class CacheKeyError(AppError):
    """Raised when a cache key cannot be derived from the given input."""

    code = "CACHE_KEY_ERROR"
