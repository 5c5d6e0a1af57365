"""Custom exceptions for the Pousada operator panel."""
from __future__ import annotations

from typing import Optional


class PousadaError(Exception):
    """Base exception for all Pousada panel errors."""
    pass


class ConfigurationError(PousadaError):
    """Raised when configuration is invalid or missing."""
    pass


class BackendError(PousadaError):
    """Raised when the backend answers a request with a non-2xx status."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class BackendUnavailableError(BackendError):
    """Raised when the backend cannot be reached at all (DNS, refused, timeout)."""
    pass


class ValidationError(PousadaError):
    """Raised when operator input is rejected before any network call."""
    pass


class BookingValidationError(ValidationError):
    """Raised when a booking request has missing data or an empty date range."""
    pass


class ChannelError(PousadaError):
    """Raised when channel (Telegram) operations fail."""
    pass
