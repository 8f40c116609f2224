"""
Outline CLI - Server Manager

Connects the registry to the API client: looks up a server by name, builds a
pinned client for it, runs one command and closes the client again. Access
keys addressed by name are resolved here with a list-then-match scan, since
the API itself only knows key ids.
"""

import logging
from typing import Callable, List, Optional, Tuple

from .client import OutlineClient
from .exceptions import NotFoundError, OutlineError, ValidationError
from .models import (
    AccessKey,
    CreateAccessKeyRequest,
    DataLimit,
    ServerEndpoint,
    ServerInfo,
    TransferMetrics,
)
from .registry import ServerRegistry
from .values import EncryptionMethod, format_data_size
from ..shared.constants import LOGGER_NAME

ClientFactory = Callable[..., OutlineClient]


class ServerManager:
    """Runs access-key and metrics commands against registered servers."""

    def __init__(
        self,
        registry: ServerRegistry,
        logger: Optional[logging.Logger] = None,
        client_factory: ClientFactory = OutlineClient,
    ):
        self.registry = registry
        self.logger = logger or logging.getLogger(LOGGER_NAME)
        self.client_factory = client_factory

    def client_for(self, server: ServerEndpoint) -> OutlineClient:
        """Build an API client pinned to the server's certificate."""
        return self.client_factory(server.url, server.cert_sha256, logger=self.logger)

    def _client(self, server_name: str) -> OutlineClient:
        return self.client_for(self.registry.get(server_name))

    def get_server(self, server_name: str) -> Tuple[ServerEndpoint, Optional[ServerInfo]]:
        """Registry entry plus live server info.

        API failures are logged as a warning and reported as missing info so
        the local entry can still be shown.
        """
        server = self.registry.get(server_name)
        with self.client_for(server) as client:
            try:
                info = client.get_server_info()
            except OutlineError as e:
                self.logger.warning(f"Failed to get server info from API: {e}")
                info = None
        return server, info

    def list_access_keys(self, server_name: str) -> List[AccessKey]:
        with self._client(server_name) as client:
            keys = client.list_access_keys()
        if not keys:
            self.logger.debug(f"No access keys found on server '{server_name}'")
        return keys

    def create_access_key(
        self,
        server_name: str,
        key_name: str = "",
        method: Optional[EncryptionMethod] = None,
        port: int = 0,
        data_limit: int = 0,
    ) -> AccessKey:
        """Create a key; empty name, zero port and zero limit are left to the server."""
        request = CreateAccessKeyRequest(
            name=key_name or None,
            method=str(method) if method else None,
            port=port or None,
            limit=DataLimit(bytes=data_limit) if data_limit > 0 else None,
        )
        with self._client(server_name) as client:
            key = client.create_access_key(request)
        self.logger.info(f"Access key '{key.id}' created on server '{server_name}'")
        return key

    def resolve_key_id(self, client: OutlineClient, server_name: str, key_name: str) -> str:
        """Id of the first access key named ``key_name``."""
        for key in client.list_access_keys():
            if key.name == key_name:
                return key.id
        self.logger.error(f"Access key '{key_name}' not found on server '{server_name}'")
        raise NotFoundError(
            f"access key with name '{key_name}' not found on server '{server_name}'",
            context={"server": server_name, "key_name": key_name},
        )

    def delete_access_key(self, server_name: str, key_id: str):
        with self._client(server_name) as client:
            client.delete_access_key(key_id)
        self.logger.debug(f"Access key '{key_id}' deleted from server '{server_name}'")

    def delete_access_key_by_name(self, server_name: str, key_name: str) -> str:
        """Delete the first key with a matching name and return its id."""
        with self._client(server_name) as client:
            key_id = self.resolve_key_id(client, server_name, key_name)
            client.delete_access_key(key_id)
        self.logger.debug(f"Access key '{key_id}' deleted from server '{server_name}'")
        return key_id

    def edit_access_key(
        self,
        server_name: str,
        key_id: str = "",
        key_name: str = "",
        new_name: str = "",
        data_limit: int = 0,
        remove_limit: bool = False,
    ) -> List[str]:
        """Rename a key and/or change its data limit.

        The key is addressed by ``key_name`` when given, else by ``key_id``.
        Removing the limit takes precedence over setting one.

        Returns:
            Human-readable descriptions of the changes applied
        """
        if not key_id and not key_name:
            raise ValidationError("either --key-id or --key-name must be specified")

        changes = []
        with self._client(server_name) as client:
            if key_name:
                key_id = self.resolve_key_id(client, server_name, key_name)

            if new_name:
                client.rename_access_key(key_id, new_name)
                changes.append(f"Access key renamed successfully to: {new_name}")

            if remove_limit:
                client.remove_access_key_data_limit(key_id)
                changes.append("Data limit removed successfully")
            elif data_limit > 0:
                client.set_access_key_data_limit(key_id, data_limit)
                changes.append(f"Data limit updated successfully to: {format_data_size(data_limit)}")

        return changes

    def get_metrics(self, server_name: str) -> TransferMetrics:
        with self._client(server_name) as client:
            metrics = client.get_transfer_metrics()
        if not metrics.bytes_transferred_by_user_id:
            self.logger.debug(f"No transfer data available for server '{server_name}'")
        return metrics
