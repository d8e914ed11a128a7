"""Webhook route receiving job callbacks from the scheduling service."""

import logging

from fastapi import APIRouter, Request, Response

from clocktick.router import Router

logger = logging.getLogger(__name__)


def create_webhook_router(path: str) -> APIRouter:
    """Build the router serving ``POST {path}``."""
    router = APIRouter()

    @router.post(path)
    async def job_webhook(request: Request) -> Response:
        """Authenticate, decrypt and dispatch a job callback."""
        clocktick_router: Router = request.app.state.router

        # The signature covers the exact bytes, so read the body unparsed.
        body = await request.body()
        result = await clocktick_router.handle_webhook(body, request.headers)

        if result.status == 204:
            return Response(status_code=204)
        return Response(
            content=result.detail or "",
            status_code=result.status,
            media_type="text/plain",
        )

    return router
