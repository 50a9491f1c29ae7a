"""Audit trail entries as returned by the API."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from lms.models.audit_log import AuditAction, AuditResourceType


class AuditLogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    resource_type: AuditResourceType
    resource_id: UUID
    action: AuditAction
    changes: dict[str, Any]
    actor_type: str
    actor_id: str | None = None
    created_at: datetime
