"""Async SQLAlchemy engine and session factory.

Learn: One engine serves two kinds of callers:
- route handlers, through the get_db dependency (one session per request)
- the audit store, which opens its own sessions from async_session_factory
  because its writes run after the request's session is closed

Pool size and pre-ping come from settings. Pre-ping matters for the
audit store: a detached write that picks a dead connection fails, and
failed audit writes are logged and dropped, never retried.
"""

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from authgate.config import settings

engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    pool_size=settings.db_pool_size,
    max_overflow=settings.db_max_overflow,
    pool_pre_ping=settings.db_pool_pre_ping,
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncSession:
    """FastAPI dependency — yields a session per request, auto-closes."""
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()
