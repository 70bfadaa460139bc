from fastapi import APIRouter
from sqlalchemy import text

from app.utils.cache import cache_service
from app.database import engine

router = APIRouter(prefix="/health", tags=["Health"])


@router.get(
    "/",
    summary="Health check",
    description="Basic health check endpoint."
)
def health_check():
    """Simple health check."""
    return {"status": "healthy"}


@router.get(
    "/ready",
    summary="Readiness check",
    description="Check if the database and Redis are reachable."
)
def readiness_check():
    """
    Readiness check for all dependencies.

    The catalog still works without Redis, so only the database decides
    readiness; the Redis state is reported for information.
    """
    checks = {
        "database": False,
        "redis": False
    }

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
            checks["database"] = True
    except Exception as e:
        checks["database_error"] = str(e)

    try:
        checks["redis"] = cache_service.ping()
    except Exception as e:
        checks["redis_error"] = str(e)

    return {
        "status": "ready" if checks["database"] else "not_ready",
        "checks": checks
    }


@router.get(
    "/cache/stats",
    summary="Cache statistics",
    description="Get Redis cache statistics."
)
def cache_stats():
    """Get cache statistics."""
    try:
        return cache_service.stats()
    except Exception as e:
        return {"error": str(e)}
