"""HTTP client for the remote scheduling service."""

import logging
from types import TracebackType
from typing import Any, Self
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError

from clocktick.errors import (
    ApplicationError,
    HttpStatusError,
    InvalidArgument,
    ResponseError,
    TransportError,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://clocktick.dev/api/v1"
DEFAULT_TIMEOUT_SECONDS = 30.0

APPLICATION_ERROR_HEADER = "X-Is-Application-Error"


class JobCreationResponse(BaseModel):
    """Body of a successful job creation. Unknown fields are kept."""

    model_config = ConfigDict(extra="allow")

    job_id: str


def job_url(base_url: str, job_id: str | None = None) -> str:
    url = f"{base_url.rstrip('/')}/jobs"
    if job_id:
        url += f"/{quote(job_id, safe='')}"
    return url


def _raise_for_response(response: httpx.Response) -> None:
    if response.is_success:
        return

    if response.headers.get(APPLICATION_ERROR_HEADER) == "true":
        try:
            error = response.json()
            error_type = error["type"]
            reasons = [str(reason) for reason in error["reasons"]]
        except (ValueError, KeyError, TypeError):
            logger.warning(
                "application_error_undecodable",
                extra={"http.status": response.status_code},
            )
        else:
            raise ApplicationError(str(error_type), reasons)

    raise HttpStatusError(response.status_code)


class ClocktickClient:
    """Authenticated client for the jobs API.

    Args:
        api_key: Bearer token for the service.
        base_url: API root, without the ``/jobs`` suffix.
        http_client: Shared ``httpx.AsyncClient``. It is left open by
            :meth:`aclose` since the caller owns it.
        timeout: Request timeout for the client created when none is given.
    """

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self._api_key = api_key
        self._base_url = base_url
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=timeout)

    @property
    def base_url(self) -> str:
        return self._base_url

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
        if self._owns_client:
            await self._http.aclose()

    async def _request(
        self, method: str, url: str, body: dict[str, Any] | None = None
    ) -> httpx.Response:
        headers = {"Authorization": f"Bearer {self._api_key}"}
        try:
            if body is None:
                response = await self._http.request(method, url, headers=headers)
            else:
                response = await self._http.request(
                    method, url, headers=headers, json=body
                )
        except httpx.TransportError as e:
            logger.warning(
                "api_transport_error",
                extra={"http.method": method, "error.message": str(e)},
            )
            raise TransportError(str(e) or type(e).__name__) from e

        logger.debug(
            "api_response",
            extra={"http.method": method, "http.status": response.status_code},
        )
        _raise_for_response(response)
        return response

    async def create_job(
        self, body: dict[str, Any], job_id: str | None = None
    ) -> JobCreationResponse:
        """POST a job. With ``job_id`` the job is created under that ID."""
        response = await self._request("POST", job_url(self._base_url, job_id), body)
        try:
            return JobCreationResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise ResponseError("Invalid job creation response") from e

    async def delete_job(self, job_id: str) -> None:
        """DELETE a job by ID.

        Raises:
            InvalidArgument: If ``job_id`` is empty. Nothing is sent.
        """
        if not isinstance(job_id, str) or not job_id:
            raise InvalidArgument("Invalid job ID.")
        await self._request("DELETE", job_url(self._base_url, job_id))
        logger.info("job_deleted", extra={"job.id": job_id})


async def delete_job(
    api_key: str,
    job_id: str,
    *,
    base_url: str = DEFAULT_BASE_URL,
    http_client: httpx.AsyncClient | None = None,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> None:
    """Delete a job without building a router."""
    async with ClocktickClient(
        api_key, base_url=base_url, http_client=http_client, timeout=timeout
    ) as client:
        await client.delete_job(job_id)
