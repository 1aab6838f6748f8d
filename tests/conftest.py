"""Test fixtures — an app wired to an in-memory audit store.

Learn: Most tests never touch Postgres. create_app() hangs the token
authority, audit store and recorder on app.state, so each test swaps in
a TokenAuthority with its own secret and a FakeAuditStore that keeps
rows in a list (and can be told to fail).

Tests that need real users (register/login) use the db_session fixture,
which skips when the database at AUTHGATE_DATABASE_URL is unreachable.
Each such test runs inside a transaction that is rolled back afterwards.
"""

import asyncio
import uuid
from datetime import datetime, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine

from authgate.audit.recorder import AuditRecorder
from authgate.auth.tokens import TokenAuthority
from authgate.config import settings
from authgate.db.engine import get_db
from authgate.db.models import Base
from authgate.main import create_app

TEST_SECRET = "test-secret-not-for-production-0123456789"


class FakeAuditStore:
    """Append-only list standing in for the audit_logs table."""

    def __init__(self):
        self.rows: list[dict] = []
        self.fail_with: Exception | None = None
        self.insert_calls = 0
        self.list_calls = 0

    async def insert(self, entry):
        self.insert_calls += 1
        if self.fail_with is not None:
            raise self.fail_with
        row = {
            "id": str(uuid.uuid4()),
            **entry.model_dump(),
            "created_at": datetime.now(timezone.utc),
        }
        self.rows.append(row)
        return row

    async def list_recent(self, limit=100, offset=0, user_id=None, resource_type=None):
        self.list_calls += 1
        rows = [
            r for r in reversed(self.rows)
            if (user_id is None or r["user_id"] == user_id)
            and (resource_type is None or r["resource_type"] == resource_type)
        ]
        return rows[offset:offset + limit]


@pytest.fixture()
def authority():
    return TokenAuthority(secret=TEST_SECRET)


@pytest.fixture()
def audit_store():
    return FakeAuditStore()


@pytest.fixture()
def app(authority, audit_store):
    """A fresh app with test doubles on app.state."""
    application = create_app()
    application.state.token_authority = authority
    application.state.audit_store = audit_store
    application.state.audit_recorder = AuditRecorder(audit_store)
    return application


@pytest.fixture()
def recorder(app):
    return app.state.audit_recorder


@pytest.fixture()
def auth_headers(authority):
    token = authority.issue("user-1", "admin")
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture()
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture()
async def db_session(app):
    """Per-test session inside a rolled-back transaction.

    Tables are created inside the transaction, so nothing persists.
    get_db is overridden to hand this session to the routes.
    """
    engine = create_async_engine(settings.database_url, echo=False)
    try:
        conn = await asyncio.wait_for(engine.connect(), timeout=3)
    except Exception as e:
        await engine.dispose()
        pytest.skip(f"database unavailable: {e}")

    trans = await conn.begin()
    await conn.run_sync(Base.metadata.create_all)
    session = AsyncSession(
        bind=conn,
        expire_on_commit=False,
        join_transaction_mode="create_savepoint",
    )

    async def override_get_db():
        yield session

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield session
    finally:
        app.dependency_overrides.clear()
        await session.close()
        await trans.rollback()
        await conn.close()
        await engine.dispose()
