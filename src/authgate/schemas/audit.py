"""Pydantic schemas for the audit trail.

Learn: AuditEntry is what the recorder hands to the store; the store
assigns id and created_at. AuditLogRead is the stored row as returned
by the listing API.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel


class AuditEntry(BaseModel):
    user_id: Optional[str] = None
    action: str
    resource_type: str
    resource_id: Optional[str] = None
    details: Optional[dict[str, Any]] = None

    model_config = {"frozen": True}


class AuditLogRead(BaseModel):
    id: str
    user_id: Optional[str] = None
    action: str
    resource_type: str
    resource_id: Optional[str] = None
    details: Optional[dict[str, Any]] = None
    created_at: datetime

    model_config = {"from_attributes": True}
