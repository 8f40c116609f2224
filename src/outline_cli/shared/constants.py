"""
Outline CLI - API Endpoint Constants

This module contains the Outline management API paths and the defaults used
throughout the CLI. All endpoints are relative to the server's API URL, which
already carries the secret path segment.
"""

from pathlib import Path

# Server
API_SERVER = "/server"

# Access keys
API_ACCESS_KEYS = "/access-keys"
API_ACCESS_KEY = "/access-keys/{key_id}"
API_ACCESS_KEY_NAME = "/access-keys/{key_id}/name"
API_ACCESS_KEY_DATA_LIMIT = "/access-keys/{key_id}/data-limit"

# Metrics
API_METRICS_TRANSFER = "/metrics/transfer"

# HTTP
DEFAULT_TIMEOUT = 30.0
USER_AGENT = "outline-cli/1.0"

# Access key defaults
DEFAULT_ENCRYPTION_METHOD = "aes-192-gcm"
ENCRYPTION_METHODS = (
    "aes-256-gcm",
    "aes-192-gcm",
    "aes-128-gcm",
    "chacha20-poly1305",
)

# Registry file
CONFIG_PATH_ENV = "OUTLINE_CLI_CONFIG"
DEFAULT_CONFIG_DIR = Path.home() / ".config" / "outline-cli"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"
CONFIG_FILE_PERMISSIONS = 0o600

# Logging
LOGGER_NAME = "outline-cli"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
VERBOSITY_LEVELS = ("error", "warning", "info", "debug")
DEFAULT_VERBOSITY = "info"
