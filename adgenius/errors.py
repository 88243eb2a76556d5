"""Error types surfaced to the UI layer."""

from __future__ import annotations

from typing import Optional

AUTH_EXPIRED_MARKER = "Requested entity was not found"


class AdGeniusError(Exception):
    """Base class for all application errors."""


class ValidationError(AdGeniusError):
    """Required user input is missing; nothing was sent to the provider."""


class ServiceError(AdGeniusError):
    """A remote call failed or returned an unusable response."""

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code


class NotFoundError(ServiceError):
    """A finished operation did not contain the expected asset."""


class AuthExpiredError(ServiceError):
    """The selected API key is no longer accepted and must be chosen again."""
