"""
Health check endpoints.

Provides system health information for monitoring.
"""

from fastapi import APIRouter, HTTPException, Request

from interview_engine import __version__
from interview_engine.core.config import settings
from interview_engine.persistence.database import check_database_health

router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    """
    Health check endpoint.

    Returns:
        System health status including database connectivity and sweeper state.
    """
    db_health = await check_database_health()
    sweeper = getattr(request.app.state, "sweeper", None)

    overall_status = "healthy" if db_health["status"] == "healthy" else "unhealthy"

    return {
        "status": overall_status,
        "version": __version__,
        "debug": settings.debug,
        "components": {
            "database": db_health,
            "sweeper": {"running": bool(sweeper and sweeper.running)},
        },
    }


@router.get("/health/live")
async def liveness():
    """Liveness probe: 200 while the process is running."""
    return {"status": "alive"}


@router.get("/health/ready")
async def readiness():
    """Readiness probe: 503 until the database is reachable."""
    db_health = await check_database_health()

    if db_health["status"] != "healthy":
        raise HTTPException(status_code=503, detail="Database not ready")

    return {"status": "ready"}
