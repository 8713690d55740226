"""Rate limiting for the public v1 API — Redis fixed window.

Each client IP gets one counter per window, keyed
"jobboard:rl:{ip}:{window}". The first X-Forwarded-For hop wins over the
socket peer, since the app normally sits behind a proxy.

Requests pass through untouched when Redis is unavailable or errors.
"""

import time
from typing import Callable, Optional

import redis.asyncio as aioredis
import structlog
from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from jobboard.redis_pool import get_redis

logger = structlog.get_logger()

LIMITED_PREFIX = "/api/v1"


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()
    return request.client.host if request.client else "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Fixed-window request limit per client IP on /api/v1."""

    def __init__(
        self,
        app,
        max_requests: int = 100,
        window_seconds: int = 900,
        enabled: bool = True,
        redis_getter: Callable[[], Optional[aioredis.Redis]] = get_redis,
    ):
        super().__init__(app)
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.enabled = enabled
        self.redis_getter = redis_getter

    async def dispatch(self, request: Request, call_next) -> Response:
        if not self.enabled or not request.url.path.startswith(LIMITED_PREFIX):
            return await call_next(request)

        redis = self.redis_getter()
        if redis is None:
            return await call_next(request)

        window = int(time.time() // self.window_seconds)
        key = f"jobboard:rl:{client_ip(request)}:{window}"

        try:
            count = await redis.incr(key)
            if count == 1:
                await redis.expire(key, self.window_seconds)
        except RedisError as e:
            logger.warning("rate_limit.redis_error", error=str(e))
            return await call_next(request)

        remaining = max(0, self.max_requests - count)
        if count > self.max_requests:
            reset_in = self.window_seconds - int(time.time()) % self.window_seconds
            return JSONResponse(
                status_code=429,
                content={
                    "error": "Too many requests. Please try again later.",
                    "message": "Rate limit exceeded",
                },
                headers={
                    "X-RateLimit-Limit": str(self.max_requests),
                    "X-RateLimit-Remaining": "0",
                    "Retry-After": str(reset_in),
                },
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(self.max_requests)
        response.headers["X-RateLimit-Remaining"] = str(remaining)
        return response
