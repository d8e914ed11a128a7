"""Shared test fixtures and factories."""

import base64
import hashlib
import json
from collections.abc import Callable
from typing import Any

import httpx
import msgpack
import pytest
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from clocktick.router import Router

ENCRYPTION_SECRET = "encryption_key_here"
API_KEY = "key"
DEFAULT_ENDPOINT = "default"
FIXED_IV = bytes(range(1, 13))
NOW = 1_700_000_000

CLOCKTICK_ENV_VARS = (
    "CLOCKTICK_API_KEY",
    "CLOCKTICK_ENCRYPTION_KEY",
    "CLOCKTICK_PUBLIC_KEY",
    "CLOCKTICK_DEFAULT_ENDPOINT_ID",
    "CLOCKTICK_BASE_URL",
    "CLOCKTICK_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep the developer's environment and config files out of tests."""
    for name in CLOCKTICK_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("CLOCKTICK_HOME", str(tmp_path / "home"))
    monkeypatch.chdir(tmp_path)


# =============================================================================
# Crypto Fixtures
# =============================================================================


@pytest.fixture
def signing_key() -> Ed25519PrivateKey:
    return Ed25519PrivateKey.generate()


@pytest.fixture
def public_key_hex(signing_key: Ed25519PrivateKey) -> str:
    return (
        signing_key.public_key()
        .public_bytes(Encoding.Raw, PublicFormat.Raw)
        .hex()
    )


def seal(args: list[Any], secret: str = ENCRYPTION_SECRET, iv: bytes = FIXED_IV) -> str:
    """Encrypt an argument list the way the scheduling service does."""
    key = AESGCM(hashlib.sha256(secret.encode()).digest())
    ciphertext = key.encrypt(iv, msgpack.packb(args, use_bin_type=True), None)
    return f"{base64.b64encode(iv).decode()}:{base64.b64encode(ciphertext).decode()}"


@pytest.fixture
def sign(signing_key: Ed25519PrivateKey) -> Callable[..., dict[str, str]]:
    """Build signed webhook headers for a body."""

    def _sign(body: bytes, timestamp: int | str = NOW) -> dict[str, str]:
        ts = str(timestamp)
        signature = signing_key.sign(ts.encode() + body)
        return {
            "X-Signature-Ed25519": signature.hex(),
            "X-Signature-Timestamp": ts,
        }

    return _sign


def callback_body(job_type: str, args: list[Any] | None = None, **extra: Any) -> bytes:
    payload: dict[str, Any] = {
        "type": job_type,
        "encrypted_data": seal(args if args is not None else []),
    }
    payload.update(extra)
    return json.dumps(payload).encode()


# =============================================================================
# HTTP Fixtures
# =============================================================================


class RecordingTransport(httpx.MockTransport):
    """Mock transport that records every request it answers."""

    def __init__(self, response: httpx.Response | Callable[[httpx.Request], httpx.Response]):
        self.requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            if callable(response):
                return response(request)
            return response

        super().__init__(handler)


# =============================================================================
# Router Fixtures
# =============================================================================


@pytest.fixture
def make_router(public_key_hex: str) -> Callable[..., Router]:
    """Router factory with a pinned IV and a frozen clock."""

    def _make(
        handlers: dict[str, Any],
        *,
        transport: httpx.MockTransport | None = None,
        clock: Callable[[], float] = lambda: NOW,
        **kwargs: Any,
    ) -> Router:
        http_client = httpx.AsyncClient(transport=transport) if transport else None
        return Router(
            API_KEY,
            ENCRYPTION_SECRET,
            public_key_hex,
            DEFAULT_ENDPOINT,
            handlers,
            http_client=http_client,
            iv_source=lambda: FIXED_IV,
            clock=clock,
            **kwargs,
        )

    return _make


@pytest.fixture
def cli_runner():
    """Create a Typer CLI test runner with colors disabled."""
    from typer.testing import CliRunner

    return CliRunner(env={"NO_COLOR": "1"})
