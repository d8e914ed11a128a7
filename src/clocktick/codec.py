"""Byte and argument codecs.

Binary material (IVs, ciphertext, signatures) travels as base64 or hex text
inside JSON and headers. Handler arguments travel as a msgpack array.
"""

import base64
import binascii
from collections.abc import Sequence
from typing import Any

import msgpack

from clocktick.errors import (
    InvalidArgument,
    MalformedArguments,
    MalformedEnvelope,
    MalformedSignature,
)


def b64encode(data: bytes) -> str:
    """Encode bytes as padded standard base64."""
    return base64.b64encode(data).decode("ascii")


def b64decode(text: str) -> bytes:
    """Decode padded standard base64, rejecting characters outside the alphabet."""
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as e:
        raise MalformedEnvelope("Invalid base64 data") from e


def hex_decode(text: str) -> bytes:
    """Decode a hex string such as a signature header."""
    try:
        return bytes.fromhex(text)
    except ValueError as e:
        raise MalformedSignature("Signature is not valid hex") from e


def encode_args(args: Sequence[Any]) -> bytes:
    """Serialize an ordered argument list.

    Raises:
        InvalidArgument: If an argument is not msgpack-serializable.
    """
    try:
        return msgpack.packb(list(args), use_bin_type=True)
    except (TypeError, ValueError, OverflowError) as e:
        raise InvalidArgument(f"Arguments cannot be serialized: {e}") from e


def decode_args(data: bytes) -> list[Any]:
    """Deserialize an argument list produced by :func:`encode_args`.

    Raises:
        MalformedArguments: If the data is not a msgpack array.
    """
    try:
        value = msgpack.unpackb(data, raw=False)
    except (msgpack.UnpackException, ValueError, TypeError) as e:
        raise MalformedArguments("Payload is not valid msgpack") from e
    if not isinstance(value, list):
        raise MalformedArguments("Payload is not an argument list")
    return value
