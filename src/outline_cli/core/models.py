"""
Outline CLI - Data Models

This module contains Pydantic models for the Outline management API payloads
and for the server entries kept in the local registry.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .exceptions import ValidationError
from .values import parse_cert_fingerprint, parse_server_url


class _WireModel(BaseModel):
    """Base for API payloads: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class DataLimit(_WireModel):
    """Byte quota attached to an access key or to the whole server."""

    bytes: int = Field(..., ge=0)


class ServerInfo(_WireModel):
    """Descriptor returned by ``GET /server``."""

    name: str = ""
    server_id: str = Field("", alias="serverId")
    metrics_enabled: bool = Field(False, alias="metricsEnabled")
    created_timestamp_ms: int = Field(0, alias="createdTimestampMs")
    version: str = ""
    port_for_new_access_keys: int = Field(0, alias="portForNewAccessKeys")
    hostname_for_access_keys: str = Field("", alias="hostnameForAccessKeys")
    access_key_data_limit: Optional[DataLimit] = Field(None, alias="accessKeyDataLimit")


class AccessKey(_WireModel):
    """A client credential issued by the server."""

    id: str
    name: str = ""
    password: str = Field("", repr=False)
    port: int = 0
    method: str = ""
    access_url: str = Field("", alias="accessUrl", repr=False)
    data_limit: Optional[DataLimit] = Field(None, alias="dataLimit")


class CreateAccessKeyRequest(_WireModel):
    """Body of ``POST /access-keys``; unset fields are left to the server."""

    name: Optional[str] = None
    method: Optional[str] = None
    password: Optional[str] = Field(None, repr=False)
    port: Optional[int] = None
    limit: Optional[DataLimit] = None

    def to_payload(self) -> dict:
        """JSON body with empty and zero fields omitted."""
        payload = {}
        if self.name:
            payload["name"] = self.name
        if self.method:
            payload["method"] = self.method
        if self.password:
            payload["password"] = self.password
        if self.port:
            payload["port"] = self.port
        if self.limit is not None and self.limit.bytes > 0:
            payload["limit"] = {"bytes": self.limit.bytes}
        return payload


class AccessKeysResponse(_WireModel):
    access_keys: list[AccessKey] = Field(default_factory=list, alias="accessKeys")


class TransferMetrics(_WireModel):
    """Cumulative bytes transferred per access key id."""

    bytes_transferred_by_user_id: dict[str, int] = Field(
        default_factory=dict, alias="bytesTransferredByUserId"
    )


class ServerEndpoint(BaseModel):
    """A registered Outline server."""

    model_config = ConfigDict(validate_assignment=True, populate_by_name=True)

    name: str = Field(..., min_length=1, description="Registry key")
    url: str = Field(..., description="API URL including the secret path")
    cert_sha256: str = Field(..., alias="certSha256", description="Pinned certificate SHA-256")

    @field_validator("url")
    @classmethod
    def validate_url(cls, v):
        """Validate URL format."""
        try:
            return parse_server_url(v)
        except ValidationError as e:
            raise ValueError(e.message) from e

    @field_validator("cert_sha256")
    @classmethod
    def validate_cert_sha256(cls, v):
        """Validate fingerprint format."""
        try:
            return parse_cert_fingerprint(v)
        except ValidationError as e:
            raise ValueError(e.message) from e

    def to_yaml_dict(self) -> dict:
        return {"name": self.name, "url": self.url, "certSha256": self.cert_sha256}
