"""
Transport contract.

The KV and stream clients never talk HTTP directly; they go through an
object satisfying :class:`Transport`. :class:`~pylon_client.transport.http.HttpTransport`
is the default implementation, tests substitute in-memory fakes.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Transport(Protocol):
    """Performs one authenticated request and returns decoded JSON.

    Implementations raise :class:`~pylon_client.errors.TransportError` on
    network failure and :class:`~pylon_client.errors.RemoteError` on HTTP
    error statuses.
    """

    async def request(
        self,
        path: str,
        method: str = "GET",
        body: Any = None,
    ) -> Any: ...
