"""Tests for byte and argument codecs."""

import msgpack
import pytest

from clocktick.codec import b64decode, b64encode, decode_args, encode_args, hex_decode
from clocktick.errors import (
    InvalidArgument,
    MalformedArguments,
    MalformedEnvelope,
    MalformedSignature,
)


class TestBase64:
    def test_encode_is_padded_standard_alphabet(self):
        assert b64encode(b"\xfb\xff") == "+/8="

    def test_decode(self):
        assert b64decode("AQIDBAUGBwgJCgsM") == bytes(range(1, 13))

    def test_decode_rejects_invalid_characters(self):
        with pytest.raises(MalformedEnvelope):
            b64decode("not base64!")

    def test_decode_rejects_bad_padding(self):
        with pytest.raises(MalformedEnvelope):
            b64decode("AQI")


class TestHexDecode:
    def test_decodes(self):
        assert hex_decode("00ff10") == b"\x00\xff\x10"

    def test_odd_length(self):
        with pytest.raises(MalformedSignature):
            hex_decode("abc")

    def test_non_hex(self):
        with pytest.raises(MalformedSignature):
            hex_decode("zz")


class TestArguments:
    def test_preserves_order_and_types(self):
        args = ["a", 1, 2.5, True, None, b"\x00\x01", [1, 2], {"k": "v"}]
        assert decode_args(encode_args(args)) == args

    def test_tuple_input_is_packed_as_array(self):
        assert msgpack.unpackb(encode_args(("x", 2)), raw=False) == ["x", 2]

    def test_empty(self):
        assert decode_args(encode_args([])) == []

    def test_unserializable_argument(self):
        with pytest.raises(InvalidArgument):
            encode_args([object()])

    def test_decode_rejects_non_array(self):
        with pytest.raises(MalformedArguments):
            decode_args(msgpack.packb({"a": 1}))

    def test_decode_rejects_garbage(self):
        with pytest.raises(MalformedArguments):
            decode_args(b"\xc1")

    def test_decode_rejects_truncated(self):
        data = encode_args(["hello world"])
        with pytest.raises(MalformedArguments):
            decode_args(data[:-3])
