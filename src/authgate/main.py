"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. The token authority, audit store and audit recorder are built
here and hung on app.state, so routes and tests reach them the same way.
Lifespan handles shutdown: in-flight audit writes are drained, not
cancelled, before the engine is disposed.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from authgate import __version__
from authgate.api import api_router
from authgate.audit.recorder import AuditRecorder
from authgate.audit.store import SqlAuditStore
from authgate.auth.dependencies import AuthenticationError
from authgate.auth.tokens import TokenAuthority
from authgate.config import INSECURE_DEFAULT_SECRET, settings
from authgate.db.engine import async_session_factory

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle."""
    logger.info(
        "authgate.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )
    if settings.jwt_secret == INSECURE_DEFAULT_SECRET:
        logger.warning("authgate.insecure_jwt_secret")

    yield

    logger.info("authgate.shutdown", pending_audit_writes=app.state.audit_recorder.pending)
    await app.state.audit_recorder.drain()

    from authgate.db.engine import engine
    await engine.dispose()


async def authentication_error_handler(
    request: Request, exc: AuthenticationError
) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message},
        headers=headers,
    )


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    app = FastAPI(
        title="AuthGate",
        description="Session tokens, request gate and audit trail",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.token_authority = TokenAuthority.from_settings(settings)
    app.state.audit_store = SqlAuditStore(async_session_factory)
    app.state.audit_recorder = AuditRecorder(app.state.audit_store)

    app.add_exception_handler(AuthenticationError, authentication_error_handler)

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: CORS → Security → RequestId → handler

    from authgate.middleware.request_id import RequestIdMiddleware
    from authgate.middleware.security import SecurityHeadersMiddleware

    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)

    return app


# Default app instance (used by uvicorn: authgate.main:app)
app = create_app()
