"""
Outline CLI - Exception Hierarchy

This module contains all custom exceptions used throughout the Outline CLI.
"""

from datetime import datetime, timezone
from typing import Any


class OutlineError(Exception):
    """Base exception for all Outline CLI errors with enhanced context."""

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.context = context or {}
        self.timestamp = datetime.now(timezone.utc)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for structured logging."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
        }


class ValidationError(OutlineError):
    """Input value failed validation before any network call."""


class ConfigurationError(OutlineError):
    """Server registry missing, unreadable or inconsistent."""


class NotFoundError(OutlineError):
    """Referenced server or access key does not exist."""


class NetworkError(OutlineError):
    """Network communication error (DNS, connect, TLS)."""


class TimeoutError(NetworkError):
    """Request timed out."""


class CertificateMismatchError(NetworkError):
    """Peer certificate does not match the pinned SHA-256 fingerprint."""


class NoCertificateError(NetworkError):
    """Peer presented no certificate during the TLS handshake."""


class APIError(OutlineError):
    """Management API answered with an unexpected status or payload."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_text: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message, context=context)
        self.status_code = status_code
        self.response_text = response_text

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["status_code"] = self.status_code
        data["response_text"] = self.response_text
        return data
