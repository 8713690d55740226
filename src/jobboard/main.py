"""FastAPI application factory.

create_app() returns a configured FastAPI instance. The lifespan manages
startup/shutdown (Redis pool, database engine). Middleware, error handlers,
API routers and the admin pages are all registered here.
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from redis.exceptions import RedisError

from jobboard import __version__, pages
from jobboard.api import api_router
from jobboard.config import settings
from jobboard.db.engine import Database
from jobboard.errors import register_exception_handlers
from jobboard.middleware.rate_limit import RateLimitMiddleware
from jobboard.middleware.request_id import RequestIdMiddleware
from jobboard.middleware.security import SecurityHeadersMiddleware
from jobboard.redis_pool import close_redis, init_redis

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Anything before `yield` runs at startup, after `yield` runs at shutdown.
    """
    logger.info(
        "jobboard.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    try:
        await init_redis()
        logger.info("jobboard.redis_connected", url=settings.redis_url)
    except (RedisError, OSError) as e:
        # Redis is optional; without it the v1 API is not rate limited
        logger.warning("jobboard.redis_unavailable", error=str(e))

    yield

    logger.info("jobboard.shutdown")
    await close_redis()
    await app.state.database.dispose()


def create_app(database: Optional[Database] = None) -> FastAPI:
    """Build and return the FastAPI application."""
    app = FastAPI(
        title="Job Board",
        description="Job board backend: admin management, public v1 API and job ingestion",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.database = database or Database(settings.database_url, echo=settings.debug)

    # ── Middleware stack ──────────────────────────────────────
    # Starlette middleware executes in reverse order of registration.
    # Request flow: RequestId → Security → RateLimit → CORS → handler

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(
        RateLimitMiddleware,
        max_requests=settings.rate_limit_max_requests,
        window_seconds=settings.rate_limit_window_seconds,
        enabled=settings.rate_limit_enabled,
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIdMiddleware)

    register_exception_handlers(app)

    app.include_router(api_router)
    app.include_router(pages.router)

    return app


# Default app instance (used by uvicorn: jobboard.main:app)
app = create_app()
