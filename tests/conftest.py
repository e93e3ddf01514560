"""Root pytest fixtures for pylon-client tests."""

from __future__ import annotations

import asyncio
import re
from collections.abc import Awaitable, Callable
from typing import Any
from urllib.parse import unquote

import pytest

from pylon_client.errors import RemoteError
from pylon_client.types.deployment import Deployment

_END = object()

_NAMESPACES = re.compile(r"^/deployments/(?P<dep>[^/]+)/kv/namespaces$")
_NAMESPACE = re.compile(r"^/deployments/(?P<dep>[^/]+)/kv/namespaces/(?P<ns>[^/]+)$")
_ITEMS = re.compile(r"^/deployments/(?P<dep>[^/]+)/kv/namespaces/(?P<ns>[^/]+)/items$")
_ITEM = re.compile(
    r"^/deployments/(?P<dep>[^/]+)/kv/namespaces/(?P<ns>[^/]+)/items/(?P<key>[^/]+)$"
)


class FakeKVTransport:
    """In-memory stand-in for the KV REST resource.

    Items keep insertion order, which is what cursoring relies on.
    """

    def __init__(self) -> None:
        self.store: dict[str, dict[str, dict[str, dict[str, Any]]]] = {}
        self.calls: list[tuple[str, str, Any]] = []
        self.overrides: dict[tuple[str, str], Any] = {}

    def namespace(self, deployment_id: str, namespace: str) -> dict[str, dict[str, Any]]:
        return self.store.setdefault(deployment_id, {}).setdefault(namespace, {})

    def seed(self, deployment_id: str, namespace: str, items: dict[str, dict[str, Any]]) -> None:
        self.namespace(deployment_id, namespace).update(items)

    def override(self, path: str, response: Any, method: str = "GET") -> None:
        """Answer ``method path`` with a canned response."""
        self.overrides[(method, path)] = response

    def _missing(self, path: str) -> RemoteError:
        return RemoteError.from_response(404, {"msg": "Not Found"}, url=path)

    async def request(self, path: str, method: str = "GET", body: Any = None) -> Any:
        self.calls.append((method, path, body))
        if (method, path) in self.overrides:
            return self.overrides[(method, path)]

        if match := _NAMESPACES.match(path):
            namespaces = self.store.get(match["dep"], {})
            return [
                {"namespace": name, "count": len(items)}
                for name, items in namespaces.items()
                if items
            ]

        if match := _ITEMS.match(path):
            items = self.namespace(match["dep"], unquote(match["ns"]))
            return [{"key": key, "value": dict(value)} for key, value in items.items()]

        if match := _ITEM.match(path):
            items = self.namespace(match["dep"], unquote(match["ns"]))
            key = unquote(match["key"])
            if method == "PUT":
                items[key] = dict(body)
                return None
            if method == "DELETE":
                if key not in items:
                    raise self._missing(path)
                del items[key]
                return None

        if (match := _NAMESPACE.match(path)) and method == "DELETE":
            items = self.namespace(match["dep"], unquote(match["ns"]))
            deleted = len(items)
            items.clear()
            return {"keys_deleted": deleted}

        raise self._missing(path)

    def count_calls(self, method: str, suffix: str = "") -> int:
        return sum(1 for m, p, _ in self.calls if m == method and p.endswith(suffix))


class FakeSocket:
    """Async-iterable socket fed by the test."""

    def __init__(self, url: str) -> None:
        self.url = url
        self.close_calls = 0
        self.close_code: int | None = None
        self.close_reason: str | None = None
        self.fail_on_close = False
        self._queue: asyncio.Queue[Any] = asyncio.Queue()

    @property
    def closed(self) -> bool:
        return self.close_calls > 0

    def feed(self, frame: str | bytes) -> None:
        self._queue.put_nowait(frame)

    def fail(self, error: BaseException) -> None:
        """Make the next read raise ``error``."""
        self._queue.put_nowait(error)

    def finish(self, code: int = 1000, reason: str = "") -> None:
        """End iteration as a clean close would."""
        self.close_code = code
        self.close_reason = reason
        self._queue.put_nowait(_END)

    def __aiter__(self) -> FakeSocket:
        return self

    async def __anext__(self) -> Any:
        item = await self._queue.get()
        if item is _END:
            raise StopAsyncIteration
        if isinstance(item, BaseException):
            raise item
        return item

    async def close(self) -> None:
        self.close_calls += 1
        if self.fail_on_close:
            raise OSError("socket already torn down")
        if self.close_code is None:
            self.close_code = 1000
        self._queue.put_nowait(_END)


class FakeConnector:
    """Hands out FakeSockets and records every URL it was asked to open."""

    def __init__(self) -> None:
        self.sockets: list[FakeSocket] = []
        self.urls: list[str] = []
        self.failures: list[BaseException] = []
        self.gate: asyncio.Event | None = None

    async def __call__(self, url: str) -> FakeSocket:
        self.urls.append(url)
        if self.gate is not None:
            await self.gate.wait()
        if self.failures:
            raise self.failures.pop(0)
        socket = FakeSocket(url)
        self.sockets.append(socket)
        return socket

    @property
    def latest(self) -> FakeSocket:
        return self.sockets[-1]


class FakeResolver:
    """Deployment lookup that issues a fresh workbench URL per call."""

    def __init__(self) -> None:
        self.calls = 0
        self.errors: list[BaseException] = []
        self.gate: asyncio.Event | None = None

    async def __call__(self, deployment_id: str) -> Deployment:
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.errors:
            raise self.errors.pop(0)
        return Deployment(
            id=deployment_id,
            workbench_url=f"wss://workbench.pylon.test/{deployment_id}/{self.calls}",
        )


@pytest.fixture
def kv_transport() -> FakeKVTransport:
    """In-memory KV remote."""
    return FakeKVTransport()


@pytest.fixture
def connector() -> FakeConnector:
    """Fake socket connector."""
    return FakeConnector()


@pytest.fixture
def resolver() -> FakeResolver:
    """Fake deployment resolver."""
    return FakeResolver()


@pytest.fixture
def wait_until() -> Callable[..., Awaitable[None]]:
    """Poll a predicate until it holds, failing after ``timeout`` seconds."""

    async def _wait(predicate: Callable[[], bool], timeout: float = 1.0) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while not predicate():
            if loop.time() > deadline:
                pytest.fail("condition not reached in time")
            await asyncio.sleep(0.005)

    return _wait
