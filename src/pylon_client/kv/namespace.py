"""KV 命名空间客户端：在扁平 REST 资源之上提供分页和条件写入。

Key-value namespace client.

Pylon keeps per-deployment key-value namespaces behind a flat REST
resource. The API has no server-side cursors and no conditional writes, so
both are layered on here:

- every list-like call fetches the whole namespace and filters client-side
- ``if_not_exists`` / ``prev_value`` are a read followed by a separate write,
  with no protection against concurrent writers
"""

from __future__ import annotations

import base64
import binascii
import builtins
import json
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

import pydantic

from pylon_client.errors import ProtocolError, ValidationError
from pylon_client.telemetry import get_logger
from pylon_client.types.kv import KVEntry, KVItem, NamespaceDeleted, NamespaceSummary

if TYPE_CHECKING:
    from pylon_client.transport.base import Transport

logger = get_logger(__name__)


class _Unset:
    """Marker for "argument not given" where ``None`` is a meaningful value."""

    def __repr__(self) -> str:
        return "UNSET"


UNSET: Any = _Unset()


def _validate_key(key: Any) -> str:
    if not isinstance(key, str):
        raise ValidationError.incompatible("key", "a string", key)
    if not key:
        raise ValidationError.missing("key")
    return key


def _validate_limit(limit: Any) -> int | None:
    if limit is None:
        return None
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 0:
        raise ValidationError.incompatible("limit", "a non-negative integer", limit)
    return limit


def paginate(items: list[KVItem], limit: int | None, from_key: str | None) -> list[KVItem]:
    """Apply a cursor then a limit to an ordered item list.

    Everything up to and including ``from_key`` is dropped; a cursor that is
    not present drops nothing. The first ``limit`` remaining items are kept.
    """
    if from_key is not None:
        start = next(
            (i + 1 for i, item in enumerate(items) if item.key == from_key),
            0,
        )
        items = items[start:]
    if limit is not None:
        items = items[:limit]
    return items


class KVNamespace:
    """A single KV namespace of a deployment.

    Holds only the addressing information; all data lives remotely and is
    fetched on every call.

    Example:
        >>> kv = KVNamespace(transport, "1234", "settings")
        >>> await kv.put("prefix", "!")
        >>> await kv.get("prefix")
        '!'
    """

    def __init__(
        self,
        transport: Transport,
        deployment_id: str | int,
        namespace: str,
    ) -> None:
        """Initialize the namespace handle.

        Args:
            transport: Object performing authenticated requests
            deployment_id: Deployment owning the namespace
            namespace: Namespace name

        Raises:
            ValidationError: If an argument is missing or malformed
        """
        if transport is None:
            raise ValidationError.missing("transport")
        if not callable(getattr(transport, "request", None)):
            raise ValidationError.incompatible("transport", "a Transport", transport)
        if deployment_id is None or deployment_id == "":
            raise ValidationError.missing("deployment_id")
        if not isinstance(namespace, str):
            raise ValidationError.incompatible("namespace", "a string", namespace)
        if not namespace:
            raise ValidationError.missing("namespace")

        self._transport = transport
        self.deployment_id = str(deployment_id)
        self.namespace = namespace

    def __repr__(self) -> str:
        return f"KVNamespace(deployment_id={self.deployment_id!r}, namespace={self.namespace!r})"

    @property
    def _namespaces_path(self) -> str:
        return f"/deployments/{self.deployment_id}/kv/namespaces"

    @property
    def _namespace_path(self) -> str:
        return f"{self._namespaces_path}/{quote(self.namespace, safe='')}"

    @property
    def _items_path(self) -> str:
        return f"{self._namespace_path}/items"

    def _item_path(self, key: str) -> str:
        return f"{self._items_path}/{quote(key, safe='')}"

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    async def _fetch_items(self) -> tuple[Any, list[KVItem]]:
        """Fetch the whole namespace, returning the raw response and parsed items."""
        response = await self._transport.request(self._items_path)
        if not isinstance(response, builtins.list):
            raise ProtocolError(
                "Expected a list of KV items",
                field_path="response",
                response=response,
            )
        try:
            items = [KVItem.model_validate(raw) for raw in response]
        except pydantic.ValidationError as e:
            raise ProtocolError(
                f"Malformed KV item in response: {e.errors()[0]['msg']}",
                field_path="response",
                response=response,
            ) from e
        return response, items

    async def _find(self, key: str) -> tuple[int, KVItem | None, Any]:
        response, items = await self._fetch_items()
        for index, item in enumerate(items):
            if item.key == key:
                return index, item, response
        return -1, None, response

    @staticmethod
    def _decode_string(index: int, item: KVItem, response: Any) -> Any:
        raw = item.value.string
        if raw is None:
            raise ProtocolError(
                "Missing or Unexpected Value in Response",
                field_path=f"response[{index}].value.string",
                response=response,
            )
        try:
            return json.loads(raw)
        except ValueError as e:
            raise ProtocolError(
                f"Stored value is not valid JSON: {e}",
                field_path=f"response[{index}].value.string",
                response=response,
            ) from e

    @staticmethod
    def _decode_bytes(index: int, item: KVItem, response: Any) -> bytes:
        raw = item.value.bytes_
        if raw is None:
            raise ProtocolError(
                "Missing or Unexpected Value in Response",
                field_path=f"response[{index}].value.bytes",
                response=response,
            )
        try:
            return base64.b64decode(raw, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ProtocolError(
                f"Stored bytes are not valid base64: {e}",
                field_path=f"response[{index}].value.bytes",
                response=response,
            ) from e

    async def get(self, key: str) -> Any:
        """Get a key's JSON value.

        Args:
            key: The key to get

        Returns:
            The decoded value, or None if the key is not set

        Raises:
            ProtocolError: If the stored item has no JSON representation
        """
        key = _validate_key(key)
        index, item, response = await self._find(key)
        if item is None:
            return None
        return self._decode_string(index, item, response)

    async def get_bytes(self, key: str) -> bytes | None:
        """Get a key's byte payload.

        Returns:
            The decoded bytes, or None if the key is not set

        Raises:
            ProtocolError: If the stored item has no byte representation
        """
        key = _validate_key(key)
        index, item, response = await self._find(key)
        if item is None:
            return None
        return self._decode_bytes(index, item, response)

    async def exists(self, key: str) -> bool:
        """Whether ``key`` is set, in either representation."""
        key = _validate_key(key)
        _, item, _ = await self._find(key)
        return item is not None

    async def list(
        self,
        *,
        limit: int | None = None,
        from_key: str | None = None,
    ) -> builtins.list[str]:
        """List the keys of the namespace.

        Args:
            limit: Keep at most this many keys (applied after the cursor)
            from_key: Exclusive cursor; keys up to and including it are skipped

        Returns:
            Ordered list of keys
        """
        limit = _validate_limit(limit)
        _, items = await self._fetch_items()
        return [item.key for item in paginate(items, limit, from_key)]

    async def items(
        self,
        *,
        limit: int | None = None,
        from_key: str | None = None,
    ) -> builtins.list[KVEntry]:
        """Exactly like :meth:`list`, but returns decoded key/value pairs.

        Values stored as JSON are decoded; values stored as bytes are returned
        as ``bytes``.

        Raises:
            ProtocolError: If an item carries neither representation
        """
        limit = _validate_limit(limit)
        response, items = await self._fetch_items()

        positions = {id(item): i for i, item in enumerate(items)}
        entries: builtins.list[KVEntry] = []
        for item in paginate(items, limit, from_key):
            index = positions[id(item)]
            if item.value.string is not None:
                value = self._decode_string(index, item, response)
            elif item.value.bytes_ is not None:
                value = self._decode_bytes(index, item, response)
            else:
                raise ProtocolError(
                    "Missing or Unexpected Value in Response",
                    field_path=f"response[{index}].value.string, response[{index}].value.bytes",
                    response=response,
                )
            entries.append(
                KVEntry(key=item.key, value=value, expires_at=item.value.expires_at)
            )
        return entries

    async def count(self) -> int:
        """Return the number of keys present in this namespace."""
        response = await self._transport.request(self._namespaces_path)
        if not isinstance(response, builtins.list):
            raise ProtocolError(
                "Expected a list of namespaces",
                field_path="response",
                response=response,
            )
        try:
            summaries = [NamespaceSummary.model_validate(raw) for raw in response]
        except pydantic.ValidationError as e:
            raise ProtocolError(
                "Malformed namespace summary in response",
                field_path="response",
                response=response,
            ) from e
        for summary in summaries:
            if summary.namespace == self.namespace:
                return summary.count
        return 0

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    async def _put(self, key: str, body: dict[str, Any], if_not_exists: bool) -> bool:
        if if_not_exists:
            _, existing, _ = await self._find(key)
            if existing is not None:
                logger.debug(
                    "Skipping put, key exists",
                    namespace=self.namespace,
                    key=key,
                )
                return False
        await self._transport.request(self._item_path(key), "PUT", body)
        return True

    async def put(self, key: str, value: Any, *, if_not_exists: bool = False) -> bool:
        """Set the JSON value of a key.

        Args:
            key: The key to set
            value: JSON-serializable value
            if_not_exists: Only write if the key is not already set

        Returns:
            True if a write was issued, False if skipped by ``if_not_exists``

        Raises:
            ValidationError: If ``value`` is not JSON-serializable
        """
        key = _validate_key(key)
        try:
            encoded = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise ValidationError.incompatible(
                "value", "a JSON-serializable value", value
            ) from e
        return await self._put(key, {"string": encoded}, if_not_exists)

    async def put_bytes(
        self, key: str, data: bytes, *, if_not_exists: bool = False
    ) -> bool:
        """Set the byte payload of a key.

        Same conditional rule as :meth:`put`.
        """
        key = _validate_key(key)
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise ValidationError.incompatible("data", "bytes", data)
        encoded = base64.b64encode(bytes(data)).decode("ascii")
        return await self._put(key, {"bytes": encoded}, if_not_exists)

    async def delete(self, key: str, *, prev_value: Any = UNSET) -> bool:
        """Delete a key.

        Args:
            key: The key to delete
            prev_value: If given, only delete when the current value equals it

        Returns:
            True if a delete was issued, False if skipped by ``prev_value``.
            A key that is not set never matches ``prev_value``.
        """
        key = _validate_key(key)
        if prev_value is not UNSET:
            index, item, response = await self._find(key)
            if item is None or self._decode_string(index, item, response) != prev_value:
                logger.debug(
                    "Skipping delete, value changed",
                    namespace=self.namespace,
                    key=key,
                )
                return False
        await self._transport.request(self._item_path(key), "DELETE")
        return True

    async def clear(self) -> int:
        """Clear the namespace, returning the number of keys deleted.

        The data is irrecoverably deleted.
        """
        response = await self._transport.request(self._namespace_path, "DELETE")
        try:
            deleted = NamespaceDeleted.model_validate(response)
        except pydantic.ValidationError as e:
            raise ProtocolError(
                "Missing or Unexpected Value in Response",
                field_path="response.keys_deleted",
                response=response,
            ) from e
        logger.info(
            "Namespace cleared",
            deployment_id=self.deployment_id,
            namespace=self.namespace,
            keys_deleted=deleted.keys_deleted,
        )
        return deleted.keys_deleted
