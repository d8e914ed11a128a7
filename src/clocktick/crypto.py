"""Symmetric payload encryption.

Payloads are sealed with AES-256-GCM under a key derived from the shared
secret with SHA-256. The wire form is ``base64(iv) ":" base64(ciphertext)``,
where the ciphertext includes the 16-byte GCM tag.
"""

import hashlib
import logging
import os
import threading
from collections.abc import Callable

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from clocktick.codec import b64decode, b64encode
from clocktick.errors import ConfigurationError, DecryptionFailure, MalformedEnvelope

logger = logging.getLogger(__name__)

IV_SIZE = 12

IVSource = Callable[[], bytes]


def derive_key(secret: str) -> AESGCM:
    """Hash a secret into a 256-bit AES-GCM key."""
    digest = hashlib.sha256(secret.encode("utf-8")).digest()
    return AESGCM(digest)


def random_iv() -> bytes:
    return os.urandom(IV_SIZE)


class KeyCell:
    """Derives the payload key on first use and hands out that same key forever.

    Concurrent first callers block on the lock and receive the key derived by
    whichever caller got there first.
    """

    def __init__(self, secret: str):
        if not isinstance(secret, str) or not secret:
            raise ConfigurationError("Encryption key must be a non-empty string")
        self._secret = secret
        self._key: AESGCM | None = None
        self._lock = threading.Lock()

    @property
    def derived(self) -> bool:
        return self._key is not None

    def get(self) -> AESGCM:
        key = self._key
        if key is not None:
            return key
        with self._lock:
            if self._key is None:
                self._key = derive_key(self._secret)
                logger.debug("payload_key_derived")
            return self._key


class PayloadCipher:
    """Encrypts and decrypts argument payloads.

    Args:
        key: Key cell shared with the owning router.
        iv_source: Returns a fresh 12-byte IV per call. Tests pin it to get
            deterministic envelopes.
    """

    def __init__(self, key: KeyCell, iv_source: IVSource | None = None):
        self._key = key
        self._iv_source = iv_source or random_iv

    def encrypt(self, plaintext: bytes) -> str:
        iv = self._iv_source()
        if len(iv) != IV_SIZE:
            raise ValueError(f"IV source returned {len(iv)} bytes, expected {IV_SIZE}")
        ciphertext = self._key.get().encrypt(iv, plaintext, None)
        return f"{b64encode(iv)}:{b64encode(ciphertext)}"

    def decrypt(self, envelope: str) -> bytes:
        """Open an envelope produced by :meth:`encrypt`.

        Raises:
            MalformedEnvelope: If the envelope is not two base64 halves.
            DecryptionFailure: If the ciphertext does not authenticate.
        """
        if not isinstance(envelope, str):
            raise MalformedEnvelope("Envelope must be a string")
        iv_text, sep, ciphertext_text = envelope.partition(":")
        if not sep or not iv_text or not ciphertext_text:
            raise MalformedEnvelope("Invalid encrypted data")

        iv = b64decode(iv_text)
        ciphertext = b64decode(ciphertext_text)
        if len(iv) != IV_SIZE:
            raise DecryptionFailure("Invalid IV size")

        try:
            return self._key.get().decrypt(iv, ciphertext, None)
        except InvalidTag as e:
            raise DecryptionFailure("Payload failed authentication") from e
