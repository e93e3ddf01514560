#!/usr/bin/env python3
"""
Console stream example.

This example follows a deployment's console output. The remote rotates the
socket on its own schedule; the stream reconnects on its own and keeps
delivering messages until interrupted.

Usage:
    export PYLON_TOKEN="your-token"
    python examples/console_stream.py 123456789012345678
"""

import asyncio
import sys

from pylon_client import PylonClient, StreamClosed, StreamErrored, StreamOpened
from pylon_client.telemetry import LogLevel, PylonLogger


async def main(deployment_id: str) -> None:
    """Run console stream example."""
    PylonLogger.configure(level=LogLevel.INFO, format="text")

    async with PylonClient() as client:
        stream = client.stream(deployment_id, reconnect_delay=1.0)

        @stream.on("opened")
        def opened(event: StreamOpened) -> None:
            print(f"[connected, attempt {event.attempt}]")

        @stream.on("closed")
        def closed(event: StreamClosed) -> None:
            print(f"[closed: {event.code} {event.reason or ''}]")

        @stream.on("errored")
        def errored(event: StreamErrored) -> None:
            # Forced disconnects arrive here too; a reconnect follows.
            print(f"[error: {event.error!r}]")

        @stream.on("message")
        def message(payload: object) -> None:
            if isinstance(payload, dict) and "data" in payload:
                print(payload.get("method", "log"), *payload["data"])
            else:
                print(payload)

        await stream.connect()
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            pass
        # Leaving the block closes the stream and the HTTP client.


if __name__ == "__main__":
    if len(sys.argv) != 2:
        sys.exit("usage: console_stream.py DEPLOYMENT_ID")
    try:
        asyncio.run(main(sys.argv[1]))
    except KeyboardInterrupt:
        pass
