"""Audit log API — read the trail.

Learn: Read-only. Nothing in the service updates or deletes audit rows;
the recorder only appends.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from authgate.audit.store import SqlAuditStore
from authgate.schemas.audit import AuditLogRead

router = APIRouter()


def get_audit_store(request: Request) -> SqlAuditStore:
    return request.app.state.audit_store


@router.get("/audit-logs", response_model=list[AuditLogRead])
async def list_audit_logs(
    user_id: Optional[str] = Query(None, description="Filter by actor"),
    resource_type: Optional[str] = Query(None, description="Filter by resource type"),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    store: SqlAuditStore = Depends(get_audit_store),
):
    """Newest audit rows first."""
    return await store.list_recent(
        limit=limit, offset=offset, user_id=user_id, resource_type=resource_type
    )
