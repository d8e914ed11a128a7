"""FastAPI application for the clocktick webhook."""

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI

from clocktick.server.routes import health
from clocktick.server.routes.webhooks import create_webhook_router

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from clocktick.router import Router

logger = logging.getLogger(__name__)

DEFAULT_WEBHOOK_PATH = "/webhook"


def create_app(
    router: "Router",
    *,
    webhook_path: str = DEFAULT_WEBHOOK_PATH,
    close_router: bool = True,
) -> FastAPI:
    """Create the FastAPI application serving ``router``.

    Args:
        router: Router whose handlers receive the callbacks.
        webhook_path: Path the scheduling service posts callbacks to.
        close_router: Close the router's outbound client on shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> "AsyncIterator[None]":
        routes = [leaf.path for leaf in router.tree.routes()]
        logger.info(
            "server_starting",
            extra={"webhook.path": webhook_path, "route.count": len(routes)},
        )
        for path in routes:
            logger.debug("route_registered", extra={"route.path": path})

        yield

        logger.info("server_stopping")
        if close_router:
            await router.aclose()

    app = FastAPI(
        title="clocktick",
        description="Scheduled job callbacks",
        lifespan=lifespan,
    )
    app.state.router = router

    app.include_router(health.router, tags=["health"])
    app.include_router(create_webhook_router(webhook_path), tags=["webhooks"])

    return app
