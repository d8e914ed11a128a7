"""Tests for inbound request authentication."""

import pytest

from clocktick.auth import get_header, load_public_key, verify_request
from clocktick.errors import (
    ConfigurationError,
    InvalidSignature,
    MalformedSignature,
    MalformedTimestamp,
    MissingCredentials,
    StaleRequest,
)

NOW = 1_700_000_000
BODY = b'{"type":"a","encrypted_data":"x:y"}'


@pytest.fixture
def public_key(public_key_hex):
    return load_public_key(public_key_hex)


def _signature(signing_key, timestamp: str, body: bytes = BODY) -> str:
    return signing_key.sign(timestamp.encode() + body).hex()


class TestLoadPublicKey:
    def test_valid(self, public_key_hex):
        assert load_public_key(public_key_hex) is not None

    @pytest.mark.parametrize("value", ["", "zz", "00" * 31, "00" * 33])
    def test_invalid(self, value):
        with pytest.raises(ConfigurationError):
            load_public_key(value)


class TestVerifyRequest:
    def test_valid_request(self, public_key, signing_key):
        ts = str(NOW)
        verify_request(public_key, BODY, ts, _signature(signing_key, ts), now=NOW)

    @pytest.mark.parametrize("missing", ["timestamp", "signature"])
    def test_missing_credentials(self, public_key, signing_key, missing):
        ts = str(NOW)
        sig = _signature(signing_key, ts)
        with pytest.raises(MissingCredentials):
            verify_request(
                public_key,
                BODY,
                None if missing == "timestamp" else ts,
                None if missing == "signature" else sig,
                now=NOW,
            )

    def test_empty_headers_count_as_missing(self, public_key):
        with pytest.raises(MissingCredentials):
            verify_request(public_key, BODY, "", "", now=NOW)

    def test_malformed_signature(self, public_key):
        with pytest.raises(MalformedSignature):
            verify_request(public_key, BODY, str(NOW), "not-hex", now=NOW)

    def test_signature_over_different_body(self, public_key, signing_key):
        ts = str(NOW)
        with pytest.raises(InvalidSignature):
            verify_request(
                public_key, BODY + b" ", ts, _signature(signing_key, ts), now=NOW
            )

    def test_signature_wrong_length(self, public_key):
        with pytest.raises(InvalidSignature):
            verify_request(public_key, BODY, str(NOW), "abcd", now=NOW)

    def test_signed_by_other_key(self, public_key):
        from cryptography.hazmat.primitives.asymmetric.ed25519 import (
            Ed25519PrivateKey,
        )

        ts = str(NOW)
        other = Ed25519PrivateKey.generate()
        with pytest.raises(InvalidSignature):
            verify_request(public_key, BODY, ts, _signature(other, ts), now=NOW)

    def test_message_has_no_separator(self, public_key, signing_key):
        ts = str(NOW)
        sig = signing_key.sign(ts.encode() + b"\n" + BODY).hex()
        with pytest.raises(InvalidSignature):
            verify_request(public_key, BODY, ts, sig, now=NOW)

    def test_stale_request_with_valid_signature(self, public_key, signing_key):
        ts = str(NOW - 301)
        with pytest.raises(StaleRequest) as exc_info:
            verify_request(public_key, BODY, ts, _signature(signing_key, ts), now=NOW)
        assert exc_info.value.age == 301

    def test_boundary_is_accepted(self, public_key, signing_key):
        ts = str(NOW - 300)
        verify_request(public_key, BODY, ts, _signature(signing_key, ts), now=NOW)

    def test_future_request_is_stale(self, public_key, signing_key):
        ts = str(NOW + 301)
        with pytest.raises(StaleRequest):
            verify_request(public_key, BODY, ts, _signature(signing_key, ts), now=NOW)

    def test_custom_max_age(self, public_key, signing_key):
        ts = str(NOW - 10)
        with pytest.raises(StaleRequest):
            verify_request(
                public_key, BODY, ts, _signature(signing_key, ts), now=NOW, max_age=5
            )

    def test_non_decimal_timestamp(self, public_key, signing_key):
        ts = "12.5"
        with pytest.raises(MalformedTimestamp):
            verify_request(public_key, BODY, ts, _signature(signing_key, ts), now=NOW)

    def test_oversized_timestamp(self, public_key, signing_key):
        ts = "1" * 5000
        with pytest.raises(MalformedTimestamp):
            verify_request(public_key, BODY, ts, _signature(signing_key, ts), now=NOW)

    def test_invalid_signature_checked_before_timestamp(self, public_key, signing_key):
        ts = str(NOW - 1000)
        sig = _signature(signing_key, str(NOW))
        with pytest.raises(InvalidSignature):
            verify_request(public_key, BODY, ts, sig, now=NOW)


class TestGetHeader:
    def test_exact(self):
        assert get_header({"X-Signature-Timestamp": "1"}, "X-Signature-Timestamp") == "1"

    def test_case_insensitive(self):
        assert get_header({"x-signature-timestamp": "1"}, "X-Signature-Timestamp") == "1"

    def test_missing(self):
        assert get_header({}, "X-Signature-Timestamp") is None
