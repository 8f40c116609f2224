"""
Outline CLI - Pinned-Certificate Transport

Outline servers use self-signed certificates, so the usual CA chain check is
replaced by comparing the SHA-256 fingerprint of the peer's leaf certificate
with the fingerprint recorded when the server was registered.
"""

import hashlib
import logging
import ssl
from typing import Optional

import httpx

from ..shared.constants import DEFAULT_TIMEOUT, LOGGER_NAME

logger = logging.getLogger(LOGGER_NAME)


class FingerprintMismatch(ssl.SSLCertVerificationError):
    """Leaf certificate digest differs from the pinned fingerprint."""


class NoPeerCertificate(ssl.SSLError):
    """TLS peer completed the handshake without presenting a certificate."""


def certificate_fingerprint(der: bytes) -> str:
    """Uppercase hex SHA-256 digest of a DER-encoded certificate."""
    return hashlib.sha256(der).hexdigest().upper()


def verify_peer_certificate(der: Optional[bytes], expected_sha256: str) -> None:
    """Check a peer certificate against the pinned fingerprint.

    Raises:
        NoPeerCertificate: No certificate was presented
        FingerprintMismatch: Digest does not match ``expected_sha256``
    """
    if not der:
        logger.error("No certificates provided by peer")
        raise NoPeerCertificate("no certificates provided")

    calculated = certificate_fingerprint(der)
    expected = expected_sha256.upper()
    if calculated != expected:
        logger.error(f"Certificate SHA256 mismatch: expected {expected}, got {calculated}")
        raise FingerprintMismatch("certificate SHA256 mismatch")


class PinnedSSLContext(ssl.SSLContext):
    """SSL context that trusts exactly one certificate fingerprint.

    Chain and hostname verification are disabled; instead every socket it
    wraps is checked right after the handshake, before the caller can write
    any request bytes. Build instances with :func:`create_pinned_ssl_context`.
    """

    expected_sha256: str = ""

    def wrap_socket(self, sock, *args, **kwargs):
        ssl_sock = super().wrap_socket(sock, *args, **kwargs)
        if not ssl_sock.do_handshake_on_connect:
            ssl_sock.do_handshake()
        try:
            verify_peer_certificate(ssl_sock.getpeercert(binary_form=True), self.expected_sha256)
        except ssl.SSLError:
            ssl_sock.close()
            raise
        return ssl_sock


def create_pinned_ssl_context(cert_sha256: str) -> PinnedSSLContext:
    """Create a TLS client context pinned to ``cert_sha256`` (hex, any case)."""
    context = PinnedSSLContext(ssl.PROTOCOL_TLS_CLIENT)
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE
    context.minimum_version = ssl.TLSVersion.TLSv1_2
    context.expected_sha256 = cert_sha256
    return context


def create_pinned_client(
    cert_sha256: str,
    timeout: float = DEFAULT_TIMEOUT,
    transport: Optional[httpx.BaseTransport] = None,
) -> httpx.Client:
    """Create an httpx client whose TLS connections are pinned to one certificate.

    The fingerprint is checked once per new connection; keep-alive reuse of a
    verified connection is left to httpx.

    Args:
        cert_sha256: Expected SHA-256 fingerprint of the server certificate
        timeout: Flat per-request timeout in seconds
        transport: Replacement transport, used by tests to avoid real sockets

    Returns:
        Configured httpx.Client
    """
    if transport is not None:
        return httpx.Client(transport=transport, timeout=timeout)

    return httpx.Client(
        verify=create_pinned_ssl_context(cert_sha256),
        timeout=httpx.Timeout(timeout),
        limits=httpx.Limits(max_keepalive_connections=1, max_connections=1),
    )
