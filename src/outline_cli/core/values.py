"""
Outline CLI - Typed Values

Parsers and formatters that turn human-readable text into validated values.
The same functions decode command-line options and registry entries, so a
value written to the config file reads back unchanged.
"""

import logging
import re
import string
from dataclasses import dataclass
from enum import Enum
from urllib.parse import urlsplit

from .exceptions import ValidationError
from ..shared.constants import DEFAULT_ENCRYPTION_METHOD, LOGGER_NAME

logger = logging.getLogger(LOGGER_NAME)

_DECIMAL_UNITS = {
    "b": 1,
    "k": 1000,
    "kb": 1000,
    "m": 1000 ** 2,
    "mb": 1000 ** 2,
    "g": 1000 ** 3,
    "gb": 1000 ** 3,
    "t": 1000 ** 4,
    "tb": 1000 ** 4,
    "p": 1000 ** 5,
    "pb": 1000 ** 5,
    "e": 1000 ** 6,
    "eb": 1000 ** 6,
}

_BINARY_UNITS = {
    "ki": 1024,
    "kib": 1024,
    "mi": 1024 ** 2,
    "mib": 1024 ** 2,
    "gi": 1024 ** 3,
    "gib": 1024 ** 3,
    "ti": 1024 ** 4,
    "tib": 1024 ** 4,
    "pi": 1024 ** 5,
    "pib": 1024 ** 5,
    "ei": 1024 ** 6,
    "eib": 1024 ** 6,
}

SIZE_UNITS = {"": 1, **_DECIMAL_UNITS, **_BINARY_UNITS}

# Output always uses decimal units
_DISPLAY_UNITS = ("B", "KB", "MB", "GB", "TB", "PB", "EB")

# Sizes are signed 64-bit on the wire
MAX_DATA_SIZE = 2 ** 63 - 1

_SIZE_PATTERN = re.compile(r"^([+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+))\s*([A-Za-z]*)$")


def parse_data_size(text: str) -> int:
    """Parse a data size such as ``1GB``, ``1.5 GiB`` or ``500`` into bytes.

    Decimal units (B, KB, MB, GB, TB) are powers of 1000, binary units
    (KiB, MiB, GiB, TiB) powers of 1024; units are case-insensitive and a bare
    number means bytes. Fractional magnitudes are truncated to whole bytes.

    Args:
        text: Human-readable size; empty input means "unset"

    Returns:
        Size in bytes, 0 for empty input

    Raises:
        ValidationError: Unknown unit, negative or int64-overflowing size, or
            malformed text
    """
    size_str = (text or "").strip()
    if not size_str:
        return 0

    match = _SIZE_PATTERN.match(size_str)
    size = -1
    if match and match.group(2).lower() in SIZE_UNITS and not match.group(1).startswith("-"):
        magnitude, multiplier = match.group(1), SIZE_UNITS[match.group(2).lower()]
        if "." in magnitude:
            value = float(magnitude) * multiplier
            size = int(value) if value <= MAX_DATA_SIZE else MAX_DATA_SIZE + 1
        else:
            # Whole numbers stay exact up to the int64 limit
            size = int(magnitude) * multiplier
    if size < 0 or size > MAX_DATA_SIZE:
        logger.error(f"Invalid data size format: {size_str!r} (expected like 1GB, 500MB, 2TB)")
        raise ValidationError(
            "invalid data size format. Expected format like '1GB', '500MB', '2TB'. "
            f"Got: {size_str}",
            context={"value": size_str},
        )

    return size


def format_data_size(size: int) -> str:
    """Render bytes with the largest decimal unit, e.g. ``1.5 GB``.

    Zero renders as an empty string. Values below ten units keep one decimal
    place, so the output is for display and does not round-trip exactly.
    """
    if not size:
        return ""
    if size < 10:
        return f"{size} B"

    exponent = 0
    value = float(size)
    while value >= 1000 and exponent < len(_DISPLAY_UNITS) - 1:
        value /= 1000
        exponent += 1

    value = int(value * 10 + 0.5) / 10
    if value >= 10:
        return f"{value:.0f} {_DISPLAY_UNITS[exponent]}"
    return f"{value:.1f} {_DISPLAY_UNITS[exponent]}"


def parse_server_url(text: str) -> str:
    """Validate an Outline API URL (scheme and host required).

    Path, query and port are passed through untouched; the path usually holds
    the server's API secret.
    """
    url = (text or "").strip()
    if not url:
        logger.error("URL cannot be empty")
        raise ValidationError("URL cannot be empty")

    try:
        parsed = urlsplit(url)
    except ValueError as e:
        logger.error(f"Invalid URL format: {e}")
        raise ValidationError(f"invalid URL format: {e}", context={"error": str(e)}) from e

    if not parsed.scheme:
        logger.error("URL must include a scheme (e.g., https://)")
        raise ValidationError("URL must include a scheme (e.g., https://)")

    if not parsed.netloc or not parsed.hostname:
        logger.error("URL must include a host")
        raise ValidationError("URL must include a host")

    return url


def parse_cert_fingerprint(text: str) -> str:
    """Validate a hex-encoded certificate SHA-256 fingerprint.

    Any non-empty, even-length hexadecimal string is accepted and returned
    with its original case.
    """
    fingerprint = (text or "").strip()
    if not fingerprint:
        raise ValidationError("certificate SHA256 cannot be empty")

    if len(fingerprint) % 2 or any(c not in string.hexdigits for c in fingerprint):
        logger.error(f"Invalid SHA256 hash format: {fingerprint!r}")
        raise ValidationError(
            f"invalid SHA256 hash format: {fingerprint}",
            context={"value": fingerprint},
        )

    return fingerprint


def parse_port(text: str) -> int:
    """Validate a TCP port number in the range 1-65535."""
    port_str = (text or "").strip()
    if not port_str:
        logger.error("Port cannot be empty")
        raise ValidationError("port cannot be empty")

    if not re.fullmatch(r"[+-]?[0-9]+", port_str):
        logger.error(f"Invalid port number: {port_str!r}")
        raise ValidationError(f"invalid port number: {port_str}", context={"value": port_str})

    port = int(port_str)
    if port < 1 or port > 65535:
        logger.error(f"Port must be between 1 and 65535, got {port}")
        raise ValidationError(
            f"port must be between 1 and 65535, got: {port}", context={"value": port}
        )

    return port


class EncryptionMethod(str, Enum):
    """Ciphers accepted by the Outline server for new access keys."""

    AES_256_GCM = "aes-256-gcm"
    AES_192_GCM = "aes-192-gcm"
    AES_128_GCM = "aes-128-gcm"
    CHACHA20_POLY1305 = "chacha20-poly1305"

    def __str__(self) -> str:
        return self.value


def parse_encryption_method(text: str) -> EncryptionMethod:
    """Resolve a cipher name; empty input selects ``aes-192-gcm``."""
    method = (text or "").strip()
    if not method:
        return EncryptionMethod(DEFAULT_ENCRYPTION_METHOD)

    try:
        return EncryptionMethod(method)
    except ValueError:
        valid = ", ".join(m.value for m in EncryptionMethod)
        logger.error(f"Invalid encryption method {method!r}, valid methods: {valid}")
        raise ValidationError(
            f"invalid encryption method. Valid methods are: {valid}",
            context={"value": method},
        ) from None


@dataclass(frozen=True)
class DataSize:
    """A byte count that reads and prints in human units; zero means unset."""

    bytes: int = 0

    @classmethod
    def parse(cls, text: str) -> "DataSize":
        return cls(parse_data_size(text))

    def __bool__(self) -> bool:
        return self.bytes > 0

    def __str__(self) -> str:
        return format_data_size(self.bytes)
