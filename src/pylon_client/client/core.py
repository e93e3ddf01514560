"""核心客户端实现：部署查询、KV 命名空间和控制台流的统一入口。

Core PylonClient implementation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from urllib.parse import quote

import pydantic

from pylon_client.client.builder import PylonClientBuilder
from pylon_client.errors import ProtocolError, ValidationError
from pylon_client.kv import KVNamespace
from pylon_client.stream import DEFAULT_RECONNECT_DELAY, DeploymentStream
from pylon_client.telemetry import get_logger
from pylon_client.transport import HttpTransport
from pylon_client.types.deployment import Deployment
from pylon_client.types.kv import NamespaceSummary

if TYPE_CHECKING:
    from pylon_client.stream.client import Connector
    from pylon_client.transport.base import Transport

logger = get_logger(__name__)


class PylonClient:
    """Entry point for the Pylon API.

    Owns a transport, acts as the deployment resolver for console streams and
    hands out KV namespace handles.

    Example:
        >>> async with PylonClient(token="...") as client:
        ...     kv = client.kv("1234", "settings")
        ...     await kv.put("prefix", "!")
        ...
        ...     stream = client.stream("1234")
        ...     stream.on("message", print)
        ...     await stream.connect()
    """

    def __init__(
        self,
        transport: Transport | None = None,
        *,
        token: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        proxy: str | None = None,
        reconnect_delay: float = DEFAULT_RECONNECT_DELAY,
    ) -> None:
        """Initialize the client.

        Args:
            transport: Custom transport; when given, the HTTP options are ignored
            token: API token (falls back to ``PYLON_TOKEN``)
            base_url: API base URL (falls back to ``PYLON_API_URL``)
            timeout: Request timeout in seconds
            proxy: Proxy URL
            reconnect_delay: Default reconnect delay for streams
        """
        if transport is not None and not callable(getattr(transport, "request", None)):
            raise ValidationError.incompatible("transport", "a Transport", transport)

        self._owns_transport = transport is None
        self._transport: Transport = transport or HttpTransport(
            token=token,
            base_url=base_url,
            timeout=timeout,
            proxy=proxy,
        )
        self._reconnect_delay = reconnect_delay
        self._streams: list[DeploymentStream] = []

    @classmethod
    def builder(cls) -> PylonClientBuilder:
        """Get a builder for advanced configuration.

        Example:
            >>> client = (
            ...     PylonClient.builder()
            ...     .token("...")
            ...     .timeout(10)
            ...     .reconnect_delay(1.0)
            ...     .build()
            ... )
        """
        return PylonClientBuilder()

    @property
    def transport(self) -> Transport:
        return self._transport

    async def get_deployment(self, deployment_id: str | int) -> Deployment:
        """Look up a deployment.

        Every call hits the API; the returned ``workbench_url`` is only valid
        for one connection.

        Raises:
            ValidationError: If ``deployment_id`` is missing
            ProtocolError: If the response is not a deployment
        """
        if deployment_id is None or deployment_id == "":
            raise ValidationError.missing("deployment_id")

        response = await self._transport.request(
            f"/deployments/{quote(str(deployment_id), safe='')}"
        )
        try:
            return Deployment.model_validate(response)
        except pydantic.ValidationError as e:
            raise ProtocolError(
                "Missing or Unexpected Value in Response",
                field_path="response",
                response=response,
            ) from e

    async def list_namespaces(self, deployment_id: str | int) -> list[NamespaceSummary]:
        """List the KV namespaces of a deployment with their key counts."""
        if deployment_id is None or deployment_id == "":
            raise ValidationError.missing("deployment_id")

        response = await self._transport.request(
            f"/deployments/{quote(str(deployment_id), safe='')}/kv/namespaces"
        )
        if not isinstance(response, list):
            raise ProtocolError(
                "Expected a list of namespaces",
                field_path="response",
                response=response,
            )
        try:
            return [NamespaceSummary.model_validate(raw) for raw in response]
        except pydantic.ValidationError as e:
            raise ProtocolError(
                "Malformed namespace summary in response",
                field_path="response",
                response=response,
            ) from e

    def kv(self, deployment_id: str | int, namespace: str) -> KVNamespace:
        """Get a handle on one KV namespace of a deployment."""
        return KVNamespace(self._transport, deployment_id, namespace)

    def stream(
        self,
        deployment_id: str | int,
        *,
        reconnect_delay: float | None = None,
        connector: Connector | None = None,
        payload_type: Any = None,
        reconnect_on_close: bool = False,
    ) -> DeploymentStream:
        """Create a console stream for a deployment.

        The stream is not connected yet; call :meth:`DeploymentStream.connect`.
        Streams created here are closed by :meth:`close`.
        """
        stream = DeploymentStream(
            self.get_deployment,
            deployment_id,
            reconnect_delay=(
                self._reconnect_delay if reconnect_delay is None else reconnect_delay
            ),
            connector=connector,
            payload_type=payload_type,
            reconnect_on_close=reconnect_on_close,
        )
        self._streams = [s for s in self._streams if not s.closed]
        self._streams.append(stream)
        return stream

    async def close(self) -> None:
        """Close every stream created by this client and the owned transport."""
        streams, self._streams = self._streams, []
        for stream in streams:
            await stream.close()
        if self._owns_transport and isinstance(self._transport, HttpTransport):
            await self._transport.close()

    async def __aenter__(self) -> PylonClient:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
