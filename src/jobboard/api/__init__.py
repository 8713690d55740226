"""API route aggregation.

All routers registered here get mounted under /api in main.py.

Admin routers are protected at the include_router level with require_admin,
so no handler in them runs without an admin session. Health, auth and the
public v1 router are open; v1 protects individual routes with bearer tokens.
"""

from fastapi import APIRouter, Depends

from jobboard.api.admin_boards import router as admin_boards_router
from jobboard.api.admin_fetch import router as admin_fetch_router
from jobboard.api.admin_jobs import router as admin_jobs_router
from jobboard.api.admin_queries import router as admin_queries_router
from jobboard.api.admin_tokens import router as admin_tokens_router
from jobboard.api.auth import router as auth_router
from jobboard.api.health import router as health_router
from jobboard.api.v1 import router as v1_router
from jobboard.auth.gate import require_admin

_admin = [Depends(require_admin)]

api_router = APIRouter(prefix="/api")

# Open routes
api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])
api_router.include_router(v1_router, tags=["v1"])

# Admin routes, admin session required
api_router.include_router(admin_jobs_router, tags=["admin-jobs"], dependencies=_admin)
api_router.include_router(admin_boards_router, tags=["admin-boards"], dependencies=_admin)
api_router.include_router(admin_tokens_router, tags=["admin-tokens"], dependencies=_admin)
api_router.include_router(admin_fetch_router, tags=["admin-fetch"], dependencies=_admin)
api_router.include_router(admin_queries_router, tags=["admin-queries"], dependencies=_admin)
