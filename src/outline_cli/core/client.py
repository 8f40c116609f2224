"""
Outline CLI - API Client

This module provides the client class for the Outline server management API.
"""

import json
import logging
import ssl
import time
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from .exceptions import (
    APIError,
    CertificateMismatchError,
    NetworkError,
    NoCertificateError,
    TimeoutError as OutlineTimeoutError,
)
from .models import (
    AccessKey,
    AccessKeysResponse,
    CreateAccessKeyRequest,
    DataLimit,
    ServerInfo,
    TransferMetrics,
)
from .transport import FingerprintMismatch, NoPeerCertificate, create_pinned_client
from ..shared.constants import (
    API_ACCESS_KEY,
    API_ACCESS_KEY_DATA_LIMIT,
    API_ACCESS_KEY_NAME,
    API_ACCESS_KEYS,
    API_METRICS_TRANSFER,
    API_SERVER,
    DEFAULT_TIMEOUT,
    LOGGER_NAME,
    USER_AGENT,
)
from ..shared.error_sanitizer import ErrorMessageSanitizer


class RequestResponseLogger:
    """Logs API requests and responses with the secret URL path redacted."""

    def __init__(self, logger: logging.Logger):
        """Initialize request/response logger.

        Args:
            logger: Logger instance to use for logging
        """
        self.logger = logger

    def log_request(
        self,
        method: str,
        url: str,
        data: Optional[Dict] = None,
        operation: str = "unknown"
    ):
        """Log API request details.

        Args:
            method: HTTP method
            url: Request URL
            data: Request payload
            operation: Operation name for context
        """
        log_data = {
            "operation": operation,
            "request": {
                "method": method,
                "url": ErrorMessageSanitizer.redact_url(url),
                "has_data": bool(data)
            }
        }

        self.logger.debug(f"API Request: {json.dumps(log_data)}")

    def log_response(
        self,
        status_code: int,
        response_size: Optional[int] = None,
        duration_ms: Optional[float] = None,
        operation: str = "unknown",
        error: Optional[Exception] = None
    ):
        """Log API response details.

        Args:
            status_code: HTTP status code, 0 when no response was received
            response_size: Size of response in bytes
            duration_ms: Request duration in milliseconds
            operation: Operation name for context
            error: Exception if request failed
        """
        log_data = {
            "operation": operation,
            "response": {
                "status_code": status_code,
                "response_size": response_size,
                "duration_ms": duration_ms,
                "success": 200 <= status_code < 300,
                "has_error": bool(error)
            }
        }

        if error:
            log_data["error"] = ErrorMessageSanitizer.sanitize_text(str(error))

        level = logging.DEBUG if log_data["response"]["success"] else logging.WARNING
        self.logger.log(level, f"API Response: {json.dumps(log_data)}")


def _pinning_failure(exc: BaseException) -> Optional[ssl.SSLError]:
    """Find a certificate pinning error in an exception's cause chain."""
    seen = set()
    while exc is not None and id(exc) not in seen:
        if isinstance(exc, (FingerprintMismatch, NoPeerCertificate)):
            return exc
        seen.add(id(exc))
        exc = exc.__cause__ or exc.__context__
    return None


class OutlineClient:
    """Client for the Outline server management API.

    Every call is a single HTTP exchange against ``base_url`` over a
    connection pinned to ``cert_sha256``; nothing is retried.
    """

    def __init__(
        self,
        base_url: str,
        cert_sha256: str,
        logger: Optional[logging.Logger] = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """Initialize Outline API client.

        Args:
            base_url: API URL including the secret path
            cert_sha256: Expected SHA-256 fingerprint of the server certificate
            logger: Logger for diagnostics, defaults to the ``outline-cli`` logger
            timeout: Per-request timeout in seconds
            transport: Replacement httpx transport (tests)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.logger = logger or logging.getLogger(LOGGER_NAME)
        self.request_logger = RequestResponseLogger(self.logger)
        self.client = create_pinned_client(cert_sha256, timeout=timeout, transport=transport)

        self.logger.debug(
            f"Initialized Outline client for {ErrorMessageSanitizer.redact_url(self.base_url)}"
        )

    def close(self):
        """Close the underlying connection pool."""
        self.client.close()

    def __enter__(self) -> "OutlineClient":
        return self

    def __exit__(self, *exc_info):
        self.close()

    def request(
        self,
        method: str,
        endpoint: str,
        expected_status: int,
        data: Optional[Dict[str, Any]] = None,
        operation: str = "api_request",
    ) -> Any:
        """Perform one API call and return the decoded JSON body.

        The response is always closed before returning, whatever the outcome.

        Args:
            method: HTTP method
            endpoint: Path relative to the base URL
            expected_status: The only status code treated as success
            data: JSON payload; when omitted no body or Content-Type is sent
            operation: Name of operation for logging/error context

        Returns:
            Decoded JSON, or None when the response has no body

        Raises:
            APIError: Unexpected status code or undecodable body
            CertificateMismatchError: Server certificate failed pinning
            NoCertificateError: Server presented no certificate
            OutlineTimeoutError: Request timed out
            NetworkError: Any other transport failure
        """
        url = f"{self.base_url}{endpoint}"
        headers = {"Accept": "application/json", "User-Agent": USER_AGENT}
        kwargs: Dict[str, Any] = {"headers": headers}
        if data is not None:
            kwargs["json"] = data

        self.request_logger.log_request(method, url, data, operation)
        start_time = time.monotonic()

        try:
            with self.client.stream(method, url, **kwargs) as response:
                body = response.read()
                duration_ms = (time.monotonic() - start_time) * 1000
                self.request_logger.log_response(
                    response.status_code, len(body), duration_ms, operation
                )

                if response.status_code != expected_status:
                    text = body.decode("utf-8", errors="replace").strip()
                    raise APIError(
                        f"server returned status {response.status_code}: {text}",
                        status_code=response.status_code,
                        response_text=text,
                        context={"operation": operation, "endpoint": endpoint},
                    )

                if not body:
                    return None

                try:
                    return json.loads(body)
                except json.JSONDecodeError as e:
                    raise APIError(
                        f"invalid JSON response from Outline API: {e}",
                        status_code=response.status_code,
                        response_text=body.decode("utf-8", errors="replace"),
                        context={"operation": operation, "endpoint": endpoint},
                    ) from e

        except httpx.TimeoutException as e:
            duration_ms = (time.monotonic() - start_time) * 1000
            self.request_logger.log_response(0, 0, duration_ms, operation, e)
            raise OutlineTimeoutError(
                f"request timed out after {self.timeout}s",
                context={"timeout": self.timeout, "endpoint": endpoint},
            ) from e

        except httpx.TransportError as e:
            duration_ms = (time.monotonic() - start_time) * 1000
            self.request_logger.log_response(0, 0, duration_ms, operation, e)
            pinning = _pinning_failure(e)
            if isinstance(pinning, NoPeerCertificate):
                raise NoCertificateError(
                    "no certificate presented by server", context={"endpoint": endpoint}
                ) from e
            if pinning is not None:
                raise CertificateMismatchError(
                    "certificate SHA256 mismatch", context={"endpoint": endpoint}
                ) from e
            raise NetworkError(
                f"network error: {ErrorMessageSanitizer.sanitize_text(str(e))}",
                context={"url": self.base_url, "endpoint": endpoint},
            ) from e

    def get_server_info(self) -> ServerInfo:
        """Fetch the server descriptor."""
        data = self.request("GET", API_SERVER, 200, operation="get_server_info")
        return ServerInfo.model_validate(data or {})

    def list_access_keys(self) -> list[AccessKey]:
        """List every access key on the server."""
        data = self.request("GET", API_ACCESS_KEYS, 200, operation="list_access_keys")
        return AccessKeysResponse.model_validate(data or {}).access_keys

    def create_access_key(self, request: Optional[CreateAccessKeyRequest] = None) -> AccessKey:
        """Create an access key; the server assigns its id."""
        payload = (request or CreateAccessKeyRequest()).to_payload()
        data = self.request(
            "POST", API_ACCESS_KEYS, 201, data=payload, operation="create_access_key"
        )
        return AccessKey.model_validate(data or {})

    def delete_access_key(self, key_id: str):
        endpoint = API_ACCESS_KEY.format(key_id=quote(key_id, safe=""))
        self.request("DELETE", endpoint, 204, operation="delete_access_key")

    def rename_access_key(self, key_id: str, name: str):
        endpoint = API_ACCESS_KEY_NAME.format(key_id=quote(key_id, safe=""))
        self.request("PUT", endpoint, 204, data={"name": name}, operation="rename_access_key")

    def set_access_key_data_limit(self, key_id: str, limit_bytes: int):
        endpoint = API_ACCESS_KEY_DATA_LIMIT.format(key_id=quote(key_id, safe=""))
        limit = DataLimit(bytes=limit_bytes)
        self.request(
            "PUT",
            endpoint,
            204,
            data={"limit": limit.model_dump()},
            operation="set_access_key_data_limit",
        )

    def remove_access_key_data_limit(self, key_id: str):
        endpoint = API_ACCESS_KEY_DATA_LIMIT.format(key_id=quote(key_id, safe=""))
        self.request("DELETE", endpoint, 204, operation="remove_access_key_data_limit")

    def get_transfer_metrics(self) -> TransferMetrics:
        """Fetch cumulative bytes transferred per access key."""
        data = self.request("GET", API_METRICS_TRANSFER, 200, operation="get_transfer_metrics")
        return TransferMetrics.model_validate(data or {})
