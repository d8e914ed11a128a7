"""Inbound request authentication.

The scheduling service signs ``timestamp + body`` (raw bytes, no separator)
with Ed25519 and sends the hex signature and decimal timestamp as headers.
"""

import re
import time
from collections.abc import Mapping

from cryptography.exceptions import InvalidSignature as _CryptoInvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey

from clocktick.codec import hex_decode
from clocktick.errors import (
    ConfigurationError,
    InvalidSignature,
    MalformedSignature,
    MalformedTimestamp,
    MissingCredentials,
    StaleRequest,
)

SIGNATURE_HEADER = "X-Signature-Ed25519"
TIMESTAMP_HEADER = "X-Signature-Timestamp"

MAX_REQUEST_AGE_SECONDS = 300

_TIMESTAMP_PATTERN = re.compile(r"-?[0-9]{1,19}")


def load_public_key(public_key: str) -> Ed25519PublicKey:
    """Parse a hex-encoded raw Ed25519 public key.

    Raises:
        ConfigurationError: If the key is not 32 hex-encoded bytes.
    """
    try:
        return Ed25519PublicKey.from_public_bytes(bytes.fromhex(public_key))
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid public key: {e}") from e


def get_header(headers: Mapping[str, str], name: str) -> str | None:
    """Case-insensitive header lookup over any mapping."""
    value = headers.get(name)
    if value is not None:
        return value
    lowered = name.lower()
    for key, value in headers.items():
        if key.lower() == lowered:
            return value
    return None


def signing_message(timestamp: str, body: bytes) -> bytes:
    return timestamp.encode("utf-8") + body


def verify_request(
    public_key: Ed25519PublicKey,
    body: bytes,
    timestamp: str | None,
    signature: str | None,
    *,
    now: float | None = None,
    max_age: int = MAX_REQUEST_AGE_SECONDS,
) -> None:
    """Verify the signature and freshness of an inbound request.

    Returns normally when the request is authentic.

    Raises:
        MissingCredentials: Timestamp or signature is absent.
        MalformedSignature: Signature is not hex.
        MalformedTimestamp: Timestamp is not decimal seconds.
        InvalidSignature: Signature does not verify.
        StaleRequest: Timestamp is more than ``max_age`` seconds from now.
    """
    if not timestamp or not signature:
        raise MissingCredentials("Missing signature headers")

    signature_bytes = hex_decode(signature)

    try:
        public_key.verify(signature_bytes, signing_message(timestamp, body))
    except (_CryptoInvalidSignature, ValueError, TypeError) as e:
        raise InvalidSignature("Signature verification failed") from e

    if not _TIMESTAMP_PATTERN.fullmatch(timestamp):
        raise MalformedTimestamp(f"Invalid timestamp: {timestamp!r}")
    request_time = int(timestamp)
    current_time = int(now if now is not None else time.time())
    age = abs(current_time - request_time)
    if age > max_age:
        raise StaleRequest(age, max_age)
