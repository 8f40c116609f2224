"""
Outline CLI - Server Registry

This module keeps the named Outline servers in a YAML file, by default
``~/.config/outline-cli/config.yaml``:

    servers:
      myserver:
        name: myserver
        url: https://203.0.113.7:4321/AbCdEf
        certSha256: 5A1F...

The URL carries the management secret, so the file is written with 0600
permissions.
"""

import json
import logging
import os
from pathlib import Path
from typing import Dict, List, Optional

import yaml
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ConfigurationError, NotFoundError, ValidationError
from .models import ServerEndpoint
from ..shared.constants import (
    CONFIG_FILE_PERMISSIONS,
    CONFIG_PATH_ENV,
    DEFAULT_CONFIG_FILE,
    LOGGER_NAME,
)


def default_config_path() -> Path:
    """Registry location, honouring the ``OUTLINE_CLI_CONFIG`` override."""
    override = os.getenv(CONFIG_PATH_ENV)
    if override:
        return Path(override).expanduser()
    return DEFAULT_CONFIG_FILE


def _pydantic_message(error: PydanticValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(p) for p in err['loc']) or 'value'}: {err['msg']}"
        for err in error.errors()
    )


class ServerRegistry:
    """
    YAML-backed registry of Outline servers.

    The file is read once on construction and rewritten in full after every
    change. A missing file is an empty registry; the file and its directory
    are only created on the first write.
    """

    def __init__(self, path: Optional[Path] = None, logger: Optional[logging.Logger] = None):
        self.path = Path(path) if path else default_config_path()
        self.logger = logger or logging.getLogger(LOGGER_NAME)
        self.servers: Dict[str, ServerEndpoint] = {}
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            self.logger.debug(f"Config file does not exist: {self.path}")
            return

        try:
            with open(self.path, "r") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            self.logger.error(f"Failed to parse config file: {e}")
            raise ConfigurationError(
                f"invalid YAML in config file {self.path}: {e}", context={"path": str(self.path)}
            ) from e
        except OSError as e:
            self.logger.error(f"Failed to read config file: {e}")
            raise ConfigurationError(
                f"cannot read config file {self.path}: {e}", context={"path": str(self.path)}
            ) from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"config file {self.path} must contain a mapping")

        servers = data.get("servers") or {}
        if not isinstance(servers, dict):
            raise ConfigurationError(f"'servers' in {self.path} must be a mapping")

        for name, entry in servers.items():
            entry = entry or {}
            if not isinstance(entry, dict):
                raise ConfigurationError(
                    f"server entry '{name}' in {self.path} must be a mapping",
                    context={"server": str(name)},
                )
            try:
                self.servers[str(name)] = ServerEndpoint(
                    name=str(name),
                    url=entry.get("url", ""),
                    cert_sha256=entry.get("certSha256", ""),
                )
            except PydanticValidationError as e:
                self.logger.error(f"Invalid server entry '{name}' in config file")
                raise ConfigurationError(
                    f"invalid server entry '{name}' in {self.path}: {_pydantic_message(e)}",
                    context={"server": str(name)},
                ) from e

    def save(self) -> None:
        """Write the registry to disk with owner-only permissions."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        try:
            fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, CONFIG_FILE_PERMISSIONS)
            with os.fdopen(fd, "w") as f:
                f.write(self.dump())
        except OSError as e:
            self.logger.error(f"Failed to write config file: {e}")
            raise ConfigurationError(
                f"cannot write config file {self.path}: {e}", context={"path": str(self.path)}
            ) from e
        self._set_secure_permissions()

    def _set_secure_permissions(self) -> None:
        """Set secure file permissions (0600 - owner read/write only)."""
        try:
            os.chmod(self.path, CONFIG_FILE_PERMISSIONS)
        except OSError as e:
            self.logger.warning(f"Could not set secure permissions on {self.path}: {e}")

    def dump(self) -> str:
        """Registry as YAML text."""
        data = {"servers": {name: s.to_yaml_dict() for name, s in self.servers.items()}}
        return yaml.safe_dump(data, default_flow_style=False, sort_keys=False)

    def lookup(self, name: str) -> Optional[ServerEndpoint]:
        return self.servers.get(name)

    def get(self, name: str) -> ServerEndpoint:
        """Return a registered server or raise NotFoundError."""
        server = self.servers.get(name)
        if server is None:
            self.logger.error(f"Server not found: {name}")
            raise NotFoundError(f"server '{name}' not found", context={"server": name})
        return server

    def list_all(self) -> List[ServerEndpoint]:
        return list(self.servers.values())

    def upsert(self, name: str, url: str, cert_sha256: str) -> ServerEndpoint:
        """Create or replace a server entry and persist it."""
        try:
            server = ServerEndpoint(name=name, url=url, cert_sha256=cert_sha256)
        except PydanticValidationError as e:
            raise ValidationError(_pydantic_message(e), context={"server": name}) from e
        self.servers[name] = server
        self.save()
        return server

    def add(self, name: str, url: str, cert_sha256: str) -> ServerEndpoint:
        """Register a new server; existing names are rejected."""
        if name in self.servers:
            self.logger.error(f"Server already exists: {name}")
            raise ConfigurationError(f"server '{name}' already exists", context={"server": name})

        if not cert_sha256:
            raise ValidationError("certificate SHA256 is required", context={"server": name})

        server = self.upsert(name, url, cert_sha256)
        self.logger.info(f"Server '{name}' added successfully")
        return server

    def add_from_json(self, name: str, json_input: str) -> ServerEndpoint:
        """Register a server from the JSON printed by the Outline installer.

        The JSON must contain ``apiUrl`` and ``certSha256``.
        """
        try:
            data = json.loads(json_input)
        except json.JSONDecodeError as e:
            self.logger.error(f"Failed to parse JSON input: {e}")
            raise ValidationError(f"invalid JSON format: {e}") from e

        if not isinstance(data, dict):
            raise ValidationError("invalid JSON format: expected an object")
        if not data.get("apiUrl"):
            raise ValidationError("apiUrl is required in JSON")
        if not data.get("certSha256"):
            raise ValidationError("certSha256 is required in JSON")

        return self.add(name, data["apiUrl"], data["certSha256"])

    def update_url(self, name: str, url: Optional[str]) -> ServerEndpoint:
        """Change a server's URL; the pinned fingerprint stays as registered."""
        server = self.get(name)
        if url:
            self.logger.debug(f"Updating URL of server '{name}'")
            server = self.upsert(name, url, server.cert_sha256)
        else:
            self.save()
        self.logger.debug(f"Server '{name}' updated successfully")
        return server

    def delete(self, name: str) -> bool:
        """Remove a server; returns False when the name was not registered."""
        if name not in self.servers:
            return False
        del self.servers[name]
        self.save()
        self.logger.debug(f"Server '{name}' deleted successfully")
        return True
