"""Error types for clocktick.

Inbound errors carry the HTTP status the webhook responds with. Outbound
errors describe how a call to the remote scheduling service failed.
"""


class ClocktickError(Exception):
    """Base class for all clocktick errors."""


class ConfigurationError(ClocktickError):
    """Router or handler setup is invalid. Raised before serving anything."""


class InvalidArgument(ClocktickError, ValueError):
    """A caller supplied an invalid value. No network call was made."""


class RouteNotFound(ClocktickError, LookupError):
    """No handler is registered at the given dotted path."""

    def __init__(self, path: str):
        super().__init__(f"Route not found: {path!r}")
        self.path = path


class ArityMismatch(ClocktickError):
    """The argument count does not match the handler signature."""

    status_code = 400

    def __init__(self, path: str, expected: int, received: int):
        super().__init__(
            f"Route {path!r} takes {expected} argument(s), received {received}"
        )
        self.path = path
        self.expected = expected
        self.received = received


class HandlerFailure(ClocktickError):
    """A handler raised while being dispatched."""

    def __init__(self, path: str, cause: BaseException):
        super().__init__(f"Handler for {path!r} failed: {cause!r}")
        self.path = path
        self.cause = cause


# Inbound (webhook) errors


class InboundError(ClocktickError):
    """The inbound request is malformed."""

    status_code = 400


class MissingCredentials(InboundError):
    """Signature or timestamp header is absent."""


class MalformedSignature(InboundError):
    """Signature header is not valid hex."""


class MalformedTimestamp(InboundError):
    """Timestamp header is not a decimal number of seconds."""


class MalformedBody(InboundError):
    """Request body is not the expected JSON object."""


class MalformedEnvelope(InboundError):
    """Encrypted envelope is not ``base64(iv):base64(ciphertext)``."""


class DecryptionFailure(InboundError):
    """Envelope did not authenticate under the key (tampered or wrong key)."""


class MalformedArguments(InboundError):
    """Decrypted payload is not a serialized argument list."""


class AuthenticationFailure(ClocktickError):
    """The inbound request could not be authenticated."""

    status_code = 401


class InvalidSignature(AuthenticationFailure):
    """Signature does not verify against the trust anchor."""


class StaleRequest(AuthenticationFailure):
    """Request timestamp is outside the freshness window."""

    def __init__(self, age: int, max_age: int):
        super().__init__(f"Request timestamp is {age}s away (max {max_age}s)")
        self.age = age
        self.max_age = max_age


# Outbound (remote API) errors


class APIError(ClocktickError):
    """A call to the remote scheduling service failed."""


class TransportError(APIError):
    """The request never produced an HTTP response."""


class ApplicationError(APIError):
    """The service rejected the request with a structured error."""

    def __init__(self, type: str, reasons: list[str]):
        super().__init__(f"{type}: {', '.join(reasons)}")
        self.type = type
        self.reasons = reasons


class HttpStatusError(APIError):
    """The service answered with a non-2xx status and no structured error."""

    def __init__(self, status: int):
        super().__init__(f"HTTP error: {status}")
        self.status = status


class ResponseError(APIError):
    """A successful response body could not be decoded."""
