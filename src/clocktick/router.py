"""Router: schedules jobs for registered handlers and dispatches their callbacks.

Example:
    async def send_email(to: str, subject: str) -> None: ...

    router = Router(
        api_key="...",
        encryption_key="...",
        public_key="<hex ed25519 key>",
        default_endpoint_id="main",
        handlers={"emails": {"send": send_email}},
    )

    await router.schedule(
        "emails.send", from_now(lambda d: d.hours(1)), "a@example.com", "Hi"
    )

Incoming callbacks are fed to :meth:`Router.handle_webhook`, usually through
the FastAPI app from :func:`clocktick.server.create_app`.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from types import TracebackType
from typing import TYPE_CHECKING, Any, Self

from clocktick.auth import (
    MAX_REQUEST_AGE_SECONDS,
    SIGNATURE_HEADER,
    TIMESTAMP_HEADER,
    get_header,
    load_public_key,
    verify_request,
)
from clocktick.client import (
    DEFAULT_BASE_URL,
    DEFAULT_TIMEOUT_SECONDS,
    ClocktickClient,
    JobCreationResponse,
)
from clocktick.codec import decode_args, encode_args
from clocktick.crypto import IVSource, KeyCell, PayloadCipher
from clocktick.errors import (
    ArityMismatch,
    AuthenticationFailure,
    ConfigurationError,
    HandlerFailure,
    InboundError,
    InvalidArgument,
    MalformedBody,
    RouteNotFound,
)
from clocktick.properties import JobProperties, JobPropertiesBuilder
from clocktick.routing import EndpointOverride, FailureHandler, Leaf, RouteTree

if TYPE_CHECKING:
    import httpx

    from clocktick.config import ClocktickConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WebhookResponse:
    """Outcome of an inbound callback, independent of the web framework."""

    status: int
    detail: str | None = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


_REJECTION_DETAILS = {400: "Bad Request", 401: "Unauthorized"}


def _require(value: Any, name: str) -> str:
    if not isinstance(value, str) or not value:
        raise ConfigurationError(f"{name} must be a non-empty string")
    return value


class Router:
    """Owns the handler tree, the payload key and the trust anchor.

    Construction validates everything up front: a bad public key, an empty
    secret or a malformed handler mapping raise :class:`ConfigurationError`.
    The payload key itself is derived lazily, once.
    """

    def __init__(
        self,
        api_key: str,
        encryption_key: str,
        public_key: str,
        default_endpoint_id: str,
        handlers: Mapping[str, Any] | EndpointOverride,
        *,
        base_url: str = DEFAULT_BASE_URL,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        failure_handler: FailureHandler | None = None,
        iv_source: IVSource | None = None,
        max_age: int = MAX_REQUEST_AGE_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self._default_endpoint_id = _require(default_endpoint_id, "Default endpoint ID")
        self._public_key = load_public_key(_require(public_key, "Public key"))
        self._key = KeyCell(encryption_key)
        self._cipher = PayloadCipher(self._key, iv_source=iv_source)
        self._tree = RouteTree(handlers, failure_handler=failure_handler)
        self._client = ClocktickClient(
            _require(api_key, "API key"),
            base_url=base_url,
            http_client=http_client,
            timeout=timeout,
        )
        self._max_age = max_age
        self._clock = clock

    @classmethod
    def from_config(
        cls,
        config: ClocktickConfig,
        handlers: Mapping[str, Any] | EndpointOverride,
        **kwargs: Any,
    ) -> Router:
        """Build a router from loaded configuration."""
        if config.api_key is None or config.encryption_key is None:
            raise ConfigurationError("api_key and encryption_key must be configured")
        if not config.public_key or not config.default_endpoint_id:
            raise ConfigurationError(
                "public_key and default_endpoint_id must be configured"
            )
        kwargs.setdefault("base_url", config.base_url)
        kwargs.setdefault("max_age", config.max_age)
        kwargs.setdefault("timeout", config.timeout)
        return cls(
            api_key=config.api_key.get_secret_value(),
            encryption_key=config.encryption_key.get_secret_value(),
            public_key=config.public_key,
            default_endpoint_id=config.default_endpoint_id,
            handlers=handlers,
            **kwargs,
        )

    @property
    def tree(self) -> RouteTree:
        return self._tree

    @property
    def client(self) -> ClocktickClient:
        return self._client

    @property
    def default_endpoint_id(self) -> str:
        return self._default_endpoint_id

    def endpoint_for(self, leaf: Leaf) -> str:
        return leaf.endpoint_id or self._default_endpoint_id

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # Outbound

    async def schedule(
        self,
        path: str,
        properties: JobProperties | JobPropertiesBuilder,
        *args: Any,
    ) -> JobCreationResponse:
        """Schedule the handler at ``path`` to run with ``args``.

        Raises:
            RouteNotFound: ``path`` is not registered.
            ArityMismatch: ``args`` do not fit the handler.
            InvalidArgument: An argument cannot be serialized.
            APIError: The service rejected the job or could not be reached.
        """
        if isinstance(properties, JobPropertiesBuilder):
            properties = properties.to_payload()
        if not isinstance(properties, JobProperties):
            raise InvalidArgument(
                f"Expected JobProperties, got {type(properties).__name__}"
            )

        leaf = self._tree.resolve(path)
        if not leaf.accepts(len(args)):
            raise ArityMismatch(path, leaf.arity, len(args))

        body = properties.to_body()
        body["endpoint_id"] = self.endpoint_for(leaf)
        body["encrypted_data"] = self._cipher.encrypt(encode_args(args))
        body["job_type"] = path

        result = await self._client.create_job(body, job_id=properties.custom_id)
        logger.info(
            "job_scheduled",
            extra={
                "job.id": result.job_id,
                "route.path": path,
                "job.endpoint_id": body["endpoint_id"],
            },
        )
        return result

    async def delete_job(self, job_id: str) -> None:
        """Delete a scheduled job by ID."""
        await self._client.delete_job(job_id)

    # Inbound

    def _parse_body(self, body: bytes) -> tuple[str, str]:
        try:
            data = json.loads(body)
        except (ValueError, UnicodeDecodeError) as e:
            raise MalformedBody("Body is not valid JSON") from e
        if not isinstance(data, dict):
            raise MalformedBody("Body must be a JSON object")
        job_type = data.get("type")
        encrypted_data = data.get("encrypted_data")
        if not isinstance(job_type, str) or not job_type:
            raise MalformedBody("Missing job type")
        if not isinstance(encrypted_data, str):
            raise MalformedBody("Missing encrypted data")
        return job_type, encrypted_data

    async def accept(self, body: bytes, headers: Mapping[str, str]) -> Any:
        """Authenticate, decrypt and dispatch one callback.

        Returns the handler's return value.

        Raises:
            InboundError: Malformed request (400).
            AuthenticationFailure: Bad signature or stale timestamp (401).
            RouteNotFound: Unknown job type (404).
            HandlerFailure: The handler raised (500).
        """
        verify_request(
            self._public_key,
            body,
            get_header(headers, TIMESTAMP_HEADER),
            get_header(headers, SIGNATURE_HEADER),
            now=self._clock(),
            max_age=self._max_age,
        )
        job_type, encrypted_data = self._parse_body(body)
        args = decode_args(self._cipher.decrypt(encrypted_data))
        return await self._tree.dispatch(job_type, args)

    async def handle_webhook(
        self, body: bytes, headers: Mapping[str, str]
    ) -> WebhookResponse:
        """Run :meth:`accept` and map the outcome to an HTTP status."""
        try:
            await self.accept(body, headers)
        except (AuthenticationFailure, InboundError, ArityMismatch) as e:
            # Never echo decryption causes back to the caller.
            logger.warning(
                "webhook_rejected",
                extra={
                    "http.status": e.status_code,
                    "error.type": type(e).__name__,
                    "error.message": str(e),
                },
            )
            return WebhookResponse(e.status_code, _REJECTION_DETAILS[e.status_code])
        except RouteNotFound as e:
            logger.warning("webhook_route_not_found", extra={"route.path": e.path})
            return WebhookResponse(404, "Endpoint Not Found")
        except HandlerFailure as e:
            return WebhookResponse(500, f"Handler for {e.path} failed")

        return WebhookResponse(204)
