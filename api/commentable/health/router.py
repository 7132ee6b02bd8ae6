"""Health check endpoints."""

from fastapi import APIRouter
from sqlalchemy import text

from commentable.config import get_settings
from commentable.core.database import get_engine
from commentable.core.logging import get_logger
from commentable.core.redis import get_redis, redis_is_healthy


logger = get_logger(__name__)

router = APIRouter(prefix="/health", tags=["health"])


@router.get("/live")
async def liveness() -> dict[str, str]:
    """Liveness probe - checks if the application is running."""
    return {"status": "alive"}


@router.get("/ready")
async def readiness() -> dict[str, str | bool]:
    """Readiness probe - checks the database (and Redis when enabled)."""
    settings = get_settings()
    database_ok = False
    engine = get_engine()
    if engine is not None:
        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            database_ok = True
        except Exception as e:
            logger.warning("readiness_database_failed", error=str(e))

    # Redis is optional; only a configured but failing server counts against readiness
    redis_ok = True
    if settings.redis_enabled and get_redis() is not None:
        redis_ok = await redis_is_healthy()

    return {
        "status": "ready" if database_ok and redis_ok else "not_ready",
        "database": database_ok,
        "redis": redis_ok,
        "environment": settings.environment,
    }


@router.get("")
async def health() -> dict[str, str]:
    """General health check endpoint."""
    settings = get_settings()
    return {
        "status": "healthy",
        "app_name": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
    }
