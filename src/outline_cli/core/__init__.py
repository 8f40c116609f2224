"""
Outline CLI - Core Infrastructure

Typed values, the certificate-pinned transport, the management API client and
the local server registry.
"""

from .client import OutlineClient, RequestResponseLogger
from .exceptions import (
    APIError,
    CertificateMismatchError,
    ConfigurationError,
    NetworkError,
    NoCertificateError,
    NotFoundError,
    OutlineError,
    TimeoutError,
    ValidationError,
)
from .manager import ServerManager
from .models import (
    AccessKey,
    CreateAccessKeyRequest,
    DataLimit,
    ServerEndpoint,
    ServerInfo,
    TransferMetrics,
)
from .registry import ServerRegistry
from .transport import create_pinned_client, create_pinned_ssl_context
from .values import (
    DataSize,
    EncryptionMethod,
    format_data_size,
    parse_cert_fingerprint,
    parse_data_size,
    parse_encryption_method,
    parse_port,
    parse_server_url,
)

__all__ = [
    # Exceptions
    "OutlineError",
    "ValidationError",
    "ConfigurationError",
    "NotFoundError",
    "NetworkError",
    "TimeoutError",
    "CertificateMismatchError",
    "NoCertificateError",
    "APIError",
    # Models
    "AccessKey",
    "CreateAccessKeyRequest",
    "DataLimit",
    "ServerEndpoint",
    "ServerInfo",
    "TransferMetrics",
    # Values
    "DataSize",
    "EncryptionMethod",
    "format_data_size",
    "parse_cert_fingerprint",
    "parse_data_size",
    "parse_encryption_method",
    "parse_port",
    "parse_server_url",
    # Transport
    "create_pinned_client",
    "create_pinned_ssl_context",
    # Client
    "OutlineClient",
    "RequestResponseLogger",
    # Registry
    "ServerRegistry",
    "ServerManager",
]
