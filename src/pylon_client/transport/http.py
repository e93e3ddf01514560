"""HTTP 传输层：基于 httpx 的异步 HTTP 客户端。

HTTP transport using httpx for async requests.

Provides:
- Configurable timeouts
- Proxy support
- Automatic header management
- Mapping of httpx failures and error statuses onto the library's errors
"""

from __future__ import annotations

import os
from contextlib import suppress
from importlib.metadata import PackageNotFoundError, version
from typing import Any

import httpx

from pylon_client.errors import RemoteError, TransportError
from pylon_client.telemetry import get_logger
from pylon_client.transport.auth import get_auth_header

logger = get_logger(__name__)

DEFAULT_BASE_URL = "https://pylon.bot/api"

# Default timeouts
_DEFAULT_TIMEOUT = 30.0
_DEFAULT_CONNECT_TIMEOUT = 10.0

_UA_VERSION: str | None = None


def _trust_env_enabled() -> bool:
    """Use env proxy settings only when explicitly enabled."""
    return os.getenv("PYLON_HTTP_TRUST_ENV", "0") == "1"


def _get_ua_version() -> str:
    """Get package version for User-Agent (cached)."""
    global _UA_VERSION
    if _UA_VERSION is None:
        try:
            _UA_VERSION = version("pylon-client")
        except PackageNotFoundError:
            _UA_VERSION = "0.1.0"
    return _UA_VERSION


class HttpTransport:
    """HTTP transport for the Pylon REST API.

    Uses a lazily created ``httpx.AsyncClient``. Every call returns the
    decoded JSON body (or ``None`` for an empty body).

    Example:
        >>> transport = HttpTransport(token="...")
        >>> deployment = await transport.request("/deployments/1234")
    """

    def __init__(
        self,
        *,
        token: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        proxy: str | None = None,
        auth_scheme: str | None = None,
    ) -> None:
        """Initialize HTTP transport.

        Args:
            token: Explicit API token (overrides ``PYLON_TOKEN``)
            base_url: API base URL (overrides ``PYLON_API_URL``)
            timeout: Request timeout in seconds
            proxy: Proxy URL
            auth_scheme: Optional scheme prefix for the Authorization header
        """
        self._base_url = base_url or os.getenv("PYLON_API_URL") or DEFAULT_BASE_URL

        self._timeout = timeout
        if self._timeout is None:
            env_timeout = os.getenv("PYLON_HTTP_TIMEOUT_SECS")
            if env_timeout:
                with suppress(ValueError):
                    self._timeout = float(env_timeout)
        if self._timeout is None:
            self._timeout = _DEFAULT_TIMEOUT

        # Resolve proxy: default to direct connection unless trust_env is enabled.
        if proxy is not None:
            self._proxy: str | None = proxy
        elif _trust_env_enabled():
            self._proxy = os.getenv("PYLON_PROXY_URL")
        else:
            self._proxy = None

        self._auth_headers = get_auth_header(token, scheme=auth_scheme)

        # Client instance (lazy initialization)
        self._client: httpx.AsyncClient | None = None

    @property
    def base_url(self) -> str:
        """Resolved API base URL."""
        return self._base_url

    @property
    def timeout(self) -> float:
        """Resolved request timeout in seconds."""
        return self._timeout  # type: ignore[return-value]

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            timeout = httpx.Timeout(
                self._timeout,
                connect=_DEFAULT_CONNECT_TIMEOUT,
            )

            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=timeout,
                proxy=self._proxy,
                trust_env=_trust_env_enabled(),
            )

        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _build_headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": f"pylon-client/{_get_ua_version()}",
        }
        headers.update(self._auth_headers)
        return headers

    async def request(
        self,
        path: str,
        method: str = "GET",
        body: Any = None,
    ) -> Any:
        """Make an HTTP request and decode the JSON response.

        Args:
            path: Request path (relative to base URL)
            method: HTTP method
            body: JSON-serializable request body

        Returns:
            Decoded JSON body, or None if the response has no content

        Raises:
            TransportError: On network/connection errors or undecodable bodies
            RemoteError: On API errors (4xx, 5xx)
        """
        client = self._get_client()
        url = f"{self._base_url.rstrip('/')}/{path.lstrip('/')}"

        logger.debug("HTTP request", method=method, path=path)

        try:
            response = await client.request(
                method=method,
                url=path.lstrip("/"),
                json=body,
                headers=self._build_headers(),
            )
        except httpx.ConnectError as e:
            raise TransportError(
                f"Connection failed: {e}",
                url=url,
                cause=e,
            ) from e
        except httpx.TimeoutException as e:
            raise TransportError(
                f"Request timed out: {e}",
                url=url,
                cause=e,
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(
                f"HTTP error: {e}",
                url=url,
                cause=e,
            ) from e

        if response.status_code >= 400:
            error_body = None
            with suppress(ValueError):
                error_body = response.json()

            raise RemoteError.from_response(
                status_code=response.status_code,
                body=error_body,
                headers=dict(response.headers),
                url=url,
            )

        if not response.content:
            return None

        try:
            return response.json()
        except ValueError as e:
            raise TransportError(
                f"Response is not valid JSON: {e}",
                url=url,
                status_code=response.status_code,
                cause=e,
            ) from e

    async def __aenter__(self) -> HttpTransport:
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()
