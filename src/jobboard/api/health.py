"""Health check endpoint: server up, database and Redis reachable."""

from fastapi import APIRouter, Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from redis.exceptions import RedisError

from jobboard import __version__
from jobboard.config import settings
from jobboard.db.models import utcnow
from jobboard.redis_pool import get_redis

router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    checks = {"server": "ok", "version": __version__}

    try:
        async with request.app.state.database.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except SQLAlchemyError as e:
        checks["database"] = f"error: {e}"

    redis = get_redis()
    if redis is None:
        checks["redis"] = "unavailable"
    else:
        try:
            await redis.ping()
            checks["redis"] = "ok"
        except RedisError as e:
            checks["redis"] = f"error: {e}"

    # Redis is optional; only the database decides health.
    status = "healthy" if checks["database"] == "ok" else "degraded"
    return {
        "status": status,
        "environment": settings.environment,
        "timestamp": utcnow().isoformat(),
        **checks,
    }
