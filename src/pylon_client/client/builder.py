"""
Builder for fluent client construction.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pylon_client.errors import ValidationError

if TYPE_CHECKING:
    from pylon_client.client.core import PylonClient
    from pylon_client.transport.base import Transport


class PylonClientBuilder:
    """Builder for creating PylonClient instances with custom configuration.

    Example:
        >>> client = (
        ...     PylonClientBuilder()
        ...     .token("...")
        ...     .base_url("https://pylon.bot/api")
        ...     .timeout(15)
        ...     .build()
        ... )
    """

    def __init__(self) -> None:
        self._transport: Transport | None = None
        self._token: str | None = None
        self._base_url: str | None = None
        self._timeout: float | None = None
        self._proxy: str | None = None
        self._reconnect_delay: float | None = None

    def transport(self, transport: Transport) -> PylonClientBuilder:
        """Use a custom transport instead of the default HTTP one.

        Args:
            transport: Object implementing the Transport contract

        Returns:
            Self for chaining
        """
        self._transport = transport
        return self

    def token(self, token: str) -> PylonClientBuilder:
        """Set explicit API token.

        Args:
            token: API token

        Returns:
            Self for chaining
        """
        self._token = token
        return self

    def base_url(self, url: str) -> PylonClientBuilder:
        """Override base URL.

        Args:
            url: Base URL for API requests

        Returns:
            Self for chaining
        """
        self._base_url = url
        return self

    def timeout(self, seconds: float) -> PylonClientBuilder:
        """Set request timeout.

        Args:
            seconds: Timeout in seconds

        Returns:
            Self for chaining
        """
        self._timeout = seconds
        return self

    def proxy(self, url: str) -> PylonClientBuilder:
        """Route HTTP requests through a proxy."""
        self._proxy = url
        return self

    def reconnect_delay(self, seconds: float) -> PylonClientBuilder:
        """Set the default delay before a console stream reconnects."""
        self._reconnect_delay = seconds
        return self

    def build(self) -> PylonClient:
        """Build the PylonClient instance.

        Raises:
            ValidationError: If a custom transport is combined with HTTP options
        """
        if self._transport is not None and (
            self._token or self._base_url or self._timeout is not None or self._proxy
        ):
            raise ValidationError(
                "HTTP options cannot be combined with a custom transport",
                field="transport",
            )

        from pylon_client.client.core import PylonClient
        from pylon_client.stream import DEFAULT_RECONNECT_DELAY

        return PylonClient(
            self._transport,
            token=self._token,
            base_url=self._base_url,
            timeout=self._timeout,
            proxy=self._proxy,
            reconnect_delay=(
                DEFAULT_RECONNECT_DELAY
                if self._reconnect_delay is None
                else self._reconnect_delay
            ),
        )
