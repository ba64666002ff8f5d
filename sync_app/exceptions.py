"""Error types surfaced to API callers.

Errors are plain human-readable strings; there is no error code scheme.
Each error is scoped to the single request that raised it.
"""
from __future__ import annotations

from typing import Any


class SyncAppError(Exception):
    """Base exception for all Sync errors.

    Attributes:
        message: Human-readable error message
        status_code: HTTP status code for API responses
        detail: Optional raw detail (e.g. an upstream response body)
    """

    status_code: int = 500

    def __init__(self, message: str, detail: str | None = None, status_code: int | None = None) -> None:
        self.message = message
        self.detail = detail
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API response."""
        payload: dict[str, Any] = {"error": self.message}
        if self.detail is not None:
            payload["detail"] = self.detail
        return payload

    def __str__(self) -> str:
        if self.detail:
            return f"{self.message}: {self.detail}"
        return self.message


class InvalidInputError(SyncAppError):
    """Raised when a request body cannot be used."""

    status_code = 400


class MissingCredentialsError(SyncAppError):
    """Raised before any request is sent when an API credential is not configured."""


class UpstreamServiceError(SyncAppError):
    """Raised when an external service answers with a non-success status or is unreachable."""


class StoreError(SyncAppError):
    """Raised when the health record store cannot be read or written."""
