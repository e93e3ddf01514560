"""
Console frame decoding.

The remote wraps every logical message in a JSON array and only the first
element carries data. That element is frequently itself a JSON document
serialized to a string, so a string that looks like an object or array
is decoded once more. Other strings, such as a logged ``"null"`` or
``"123"``, are delivered unchanged.
"""

from __future__ import annotations

import json
from typing import Any

from pylon_client.errors import ProtocolError


def decode_frame(frame: str | bytes) -> Any:
    """Decode one socket frame into its message payload.

    Args:
        frame: Raw text (or UTF-8 bytes) received from the socket

    Returns:
        The first array element, JSON-decoded again if it is a string
        holding a JSON object or array

    Raises:
        ProtocolError: If the frame is not a non-empty JSON array
    """
    if isinstance(frame, (bytes, bytearray)):
        try:
            frame = frame.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ProtocolError(
                "Frame is not valid UTF-8",
                field_path="frame",
                response=bytes(frame),
            ) from e

    try:
        data = json.loads(frame)
    except ValueError as e:
        raise ProtocolError(
            f"Frame is not valid JSON: {e}",
            field_path="frame",
            response=frame,
        ) from e

    if not isinstance(data, list) or not data:
        raise ProtocolError(
            "Expected a non-empty JSON array",
            field_path="frame[0]",
            response=data,
        )

    first = data[0]
    if isinstance(first, str) and first.lstrip()[:1] in ("{", "["):
        try:
            return json.loads(first)
        except ValueError:
            return first
    return first
