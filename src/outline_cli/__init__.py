"""
Outline CLI

A command-line tool for managing Outline VPN servers and their access keys
through the Outline management API, with certificate-pinned HTTPS.
"""

__version__ = "1.0.0"
__license__ = "AGPL-3.0"

from .core.client import OutlineClient
from .core.exceptions import (
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
from .core.manager import ServerManager
from .core.models import AccessKey, ServerEndpoint, ServerInfo, TransferMetrics
from .core.registry import ServerRegistry

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
    "ServerEndpoint",
    "ServerInfo",
    "TransferMetrics",
    # Core classes
    "OutlineClient",
    "ServerRegistry",
    "ServerManager",
]
