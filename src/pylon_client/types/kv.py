"""
KV wire types.

Field names mirror the REST payloads exactly (``string``, ``bytes``,
``expiresAt``, ``keys_deleted``), so models are built with aliases where a
wire name is not a good Python attribute.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class KVValue(BaseModel):
    """Stored value. At most one of ``string`` / ``bytes`` is set."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    string: str | None = Field(default=None, description="JSON-encoded value")
    bytes_: str | None = Field(
        default=None, alias="bytes", description="Base64-encoded byte payload"
    )
    expires_at: str | None = Field(
        default=None, alias="expiresAt", description="Expiry timestamp"
    )


class KVItem(BaseModel):
    """One entry of ``GET .../items``."""

    model_config = ConfigDict(extra="allow")

    key: str
    value: KVValue = Field(default_factory=KVValue)


class NamespaceSummary(BaseModel):
    """One entry of ``GET /deployments/{id}/kv/namespaces``."""

    model_config = ConfigDict(extra="allow")

    namespace: str
    count: int = 0


class NamespaceDeleted(BaseModel):
    """Response of ``DELETE .../kv/namespaces/{namespace}``."""

    model_config = ConfigDict(extra="allow")

    keys_deleted: int


class KVEntry(BaseModel):
    """Decoded key/value pair as returned by :meth:`KVNamespace.items`."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    key: str
    value: Any = Field(description="Decoded JSON value, or raw bytes")
    expires_at: str | None = None
