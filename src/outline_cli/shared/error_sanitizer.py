"""
Outline CLI - Error Message Sanitization

The Outline API URL embeds the management secret as its first path segment,
so URLs are redacted before they reach logs or user-facing error messages.
"""

import json
import logging
import re
from typing import Any
from urllib.parse import urlsplit, urlunsplit

import httpx

from ..core.exceptions import (
    APIError,
    CertificateMismatchError,
    ConfigurationError,
    NetworkError,
    NoCertificateError,
    NotFoundError,
    OutlineError,
    ValidationError,
)

REDACTED = "[REDACTED]"

_URL_PATTERN = re.compile(r"https?://[^\s'\"]+")


class ErrorMessageSanitizer:
    """Sanitize error messages for safe user display."""

    SENSITIVE_KEYS = ["password", "access_url", "accessurl", "secret", "url"]

    @staticmethod
    def redact_url(url: str) -> str:
        """Replace the secret path of an API URL, keeping scheme, host and port.

        ``https://1.2.3.4:1234/AbCdEf/access-keys`` becomes
        ``https://1.2.3.4:1234/[REDACTED]/access-keys``.
        """
        try:
            parts = urlsplit(url)
        except ValueError:
            return REDACTED
        if not parts.netloc:
            return url

        segments = parts.path.split("/")
        # segments[0] is the empty string before the leading slash
        if len(segments) > 1 and segments[1]:
            segments[1] = REDACTED
        return urlunsplit((parts.scheme, parts.netloc, "/".join(segments), "", ""))

    @staticmethod
    def sanitize_text(text: str) -> str:
        """Redact every URL found in free text."""
        return _URL_PATTERN.sub(lambda m: ErrorMessageSanitizer.redact_url(m.group(0)), text)

    @staticmethod
    def sanitize_for_user(error: Exception, operation: str = "operation") -> str:
        """
        Return user-safe error message.

        Args:
            error: The exception to describe
            operation: Description of the operation that failed

        Returns:
            User-safe error message
        """
        if isinstance(error, (ValidationError, NotFoundError, ConfigurationError)):
            return error.message

        if isinstance(error, CertificateMismatchError):
            return (
                "Server certificate does not match the registered SHA-256 fingerprint. "
                "Refusing to talk to this server."
            )

        if isinstance(error, NoCertificateError):
            return "Server did not present a TLS certificate."

        if isinstance(error, NetworkError):
            return ErrorMessageSanitizer.sanitize_text(error.message)

        if isinstance(error, APIError):
            return ErrorMessageSanitizer.sanitize_text(error.message)

        if isinstance(error, httpx.HTTPError):
            return ErrorMessageSanitizer.sanitize_text(str(error))

        return f"An error occurred during {operation}: {ErrorMessageSanitizer.sanitize_text(str(error))}"

    @staticmethod
    def sanitize_for_logs(error: Exception) -> dict[str, Any]:
        """
        Return detailed error info for logging.

        Args:
            error: The exception to log

        Returns:
            Dictionary with error details for logging
        """
        error_info = {
            "error_type": type(error).__name__,
            "error_module": error.__class__.__module__,
            "error_message": ErrorMessageSanitizer.sanitize_text(str(error)),
        }

        if isinstance(error, OutlineError):
            error_info["error_code"] = error.error_code
            error_info["context"] = ErrorMessageSanitizer._sanitize_context(error.context)

        if isinstance(error, APIError):
            error_info["status_code"] = error.status_code

        return error_info

    @staticmethod
    def _sanitize_context(context: dict[str, Any] | None) -> dict[str, Any]:
        """
        Remove sensitive data from context dictionary.

        Args:
            context: Context dictionary to sanitize

        Returns:
            Sanitized context dictionary
        """
        if not context:
            return {}

        sanitized = {}
        for key, value in context.items():
            key_lower = key.lower()
            if key_lower in ("url", "base_url"):
                sanitized[key] = ErrorMessageSanitizer.redact_url(str(value))
            elif any(pattern in key_lower for pattern in ErrorMessageSanitizer.SENSITIVE_KEYS):
                sanitized[key] = REDACTED
            elif isinstance(value, dict):
                sanitized[key] = ErrorMessageSanitizer._sanitize_context(value)
            elif isinstance(value, str):
                sanitized[key] = ErrorMessageSanitizer.sanitize_text(value)
            else:
                sanitized[key] = value

        return sanitized


def log_error_safely(
    logger: logging.Logger,
    error: Exception,
    operation: str = "operation",
) -> str:
    """
    Log error details at debug level and return the user-facing message.

    Args:
        logger: Logger instance
        error: Exception that occurred
        operation: Description of the operation

    Returns:
        Sanitized user-facing error message
    """
    error_details = ErrorMessageSanitizer.sanitize_for_logs(error)
    logger.debug(f"Error in {operation}: {json.dumps(error_details, default=str)}")
    return ErrorMessageSanitizer.sanitize_for_user(error, operation)
