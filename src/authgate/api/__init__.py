"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: Auth is applied at the include_router level using FastAPI's
dependencies parameter. This protects all routes in a router without
modifying individual handlers. Health and auth routers are open; the
auth router gates /auth/me itself.
"""

from fastapi import APIRouter, Depends

from authgate.api.audit_logs import router as audit_logs_router
from authgate.api.auth import router as auth_router
from authgate.api.health import router as health_router
from authgate.auth.dependencies import require_principal

# Protected routers require a valid bearer token
_auth = [Depends(require_principal)]

api_router = APIRouter(prefix="/api")

# Open routes — no auth required
api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])

# Protected routes
api_router.include_router(audit_logs_router, tags=["audit"], dependencies=_auth)
