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
async def readiness_check(request: Request) -> dict[str, str]:
    """Readiness check endpoint.

    Ready once the database connection is open.
    """
    database = request.app.state.database
    return {"status": "ready" if database.connected else "starting"}
