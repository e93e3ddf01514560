"""Tests for console frame decoding."""

import json

import pytest

from pylon_client.errors import ProtocolError
from pylon_client.stream import decode_frame


class TestDecodeFrame:
    """Tests for decode_frame."""

    def test_nested_json_string(self) -> None:
        """Test that a JSON document inside a string is decoded."""
        assert decode_frame('["{\\"a\\":1}"]') == {"a": 1}

    def test_plain_string(self) -> None:
        """Test that a non-JSON string is delivered as-is."""
        assert decode_frame('["hello"]') == "hello"

    @pytest.mark.parametrize("text", ["null", "123", "true", '"quoted"'])
    def test_scalar_looking_string(self, text) -> None:
        """Test that strings holding JSON scalars stay strings."""
        assert decode_frame(json.dumps([text])) == text

    def test_nested_array_string(self) -> None:
        """Test that a JSON array inside a string is decoded."""
        assert decode_frame('[" [1, 2]"]') == [1, 2]

    def test_brace_string_not_json(self) -> None:
        """Test that a string starting with a brace but not JSON is kept."""
        assert decode_frame('["{oops"]') == "{oops"

    def test_object_element(self) -> None:
        """Test that a structured first element is delivered directly."""
        assert decode_frame('[{"method": "log", "data": [1, 2]}]') == {
            "method": "log",
            "data": [1, 2],
        }

    def test_only_first_element(self) -> None:
        """Test that trailing elements are ignored."""
        assert decode_frame("[1, 2, 3]") == 1

    def test_bytes_frame(self) -> None:
        """Test UTF-8 binary frames."""
        assert decode_frame(b'["\\u00e9t\\u00e9"]') == "été"

    @pytest.mark.parametrize("frame", ["not json", "{}", "[]", '"text"', b"\xff\xfe"])
    def test_malformed(self, frame) -> None:
        """Test that anything but a non-empty array is rejected."""
        with pytest.raises(ProtocolError) as exc_info:
            decode_frame(frame)
        assert exc_info.value.field_path in ("frame", "frame[0]")
