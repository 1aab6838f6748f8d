"""Audit store — append-only audit_logs table.

Learn: The recorder only ever calls insert(). Each insert runs in its
own session because it happens after the request's session is closed.
Ids and timestamps are assigned here, not by the caller.
"""

from typing import Optional, Protocol

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from authgate.db.models import AuditLog
from authgate.schemas.audit import AuditEntry


class AuditStore(Protocol):
    async def insert(self, entry: AuditEntry) -> object: ...


class SqlAuditStore:
    """Audit store backed by the audit_logs table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def insert(self, entry: AuditEntry) -> AuditLog:
        """Append one row. Returns the stored row."""
        async with self.session_factory() as session:
            row = AuditLog(
                user_id=entry.user_id,
                action=entry.action,
                resource_type=entry.resource_type,
                resource_id=entry.resource_id,
                details=entry.details,
            )
            session.add(row)
            await session.commit()
            return row

    async def list_recent(
        self,
        limit: int = 100,
        offset: int = 0,
        user_id: Optional[str] = None,
        resource_type: Optional[str] = None,
    ) -> list[AuditLog]:
        """Newest rows first, optionally filtered by actor or resource type."""
        query = select(AuditLog).order_by(AuditLog.created_at.desc())
        if user_id:
            query = query.where(AuditLog.user_id == user_id)
        if resource_type:
            query = query.where(AuditLog.resource_type == resource_type)
        query = query.limit(limit).offset(offset)
        async with self.session_factory() as session:
            result = await session.execute(query)
            return list(result.scalars().all())
