"""Health check routes."""

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint.

    Returns:
        Health status.
    """
    return {"status": "healthy"}


@router.get("/ready")
async def readiness_check(request: Request) -> dict[str, str | int]:
    """Readiness check endpoint.

    Returns:
        Readiness status and the number of registered routes.
    """
    routes = sum(1 for _ in request.app.state.router.tree.routes())
    return {"status": "ready", "routes": routes}
