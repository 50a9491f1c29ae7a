"""Audit service for recording changes to coupons and certificates."""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from lms.models.audit_log import AuditAction, AuditResourceType
from lms.repositories.audit_log_repository import AuditLogRepository


def _json_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (Decimal, UUID)):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return [_json_value(v) for v in value]
    return value


def snapshot_fields(obj: Any, fields: tuple[str, ...]) -> dict[str, Any]:
    """Read ``fields`` off ``obj`` as JSON-safe values for an audit entry."""
    return {field: _json_value(getattr(obj, field)) for field in fields}


class AuditService:
    """Service for recording audit trail entries."""

    def __init__(self, db: Session):
        self.repo = AuditLogRepository(db)

    def log_create(
        self,
        resource_type: AuditResourceType,
        resource_id: UUID,
        actor_type: str = "system",
        actor_id: str | None = None,
        data: dict[str, Any] | None = None,
    ) -> None:
        """Log a resource creation event."""
        self.repo.create(
            resource_type=resource_type,
            resource_id=resource_id,
            action=AuditAction.CREATED,
            changes=data or {},
            actor_type=actor_type,
            actor_id=actor_id,
        )

    def log_update(
        self,
        resource_type: AuditResourceType,
        resource_id: UUID,
        actor_type: str = "system",
        actor_id: str | None = None,
        old_data: dict[str, Any] | None = None,
        new_data: dict[str, Any] | None = None,
    ) -> None:
        """Log a resource update event, recording only the fields that changed."""
        old = old_data or {}
        new = new_data or {}
        changes: dict[str, Any] = {}
        for key in sorted(set(old) | set(new)):
            if old.get(key) != new.get(key):
                changes[key] = {"old": old.get(key), "new": new.get(key)}
        if not changes:
            return
        self.repo.create(
            resource_type=resource_type,
            resource_id=resource_id,
            action=AuditAction.UPDATED,
            changes=changes,
            actor_type=actor_type,
            actor_id=actor_id,
        )

    def log_status_change(
        self,
        resource_type: AuditResourceType,
        resource_id: UUID,
        old_status: str,
        new_status: str,
        actor_type: str = "system",
        actor_id: str | None = None,
        reason: str | None = None,
    ) -> None:
        """Log a status change event."""
        changes: dict[str, Any] = {"status": {"old": old_status, "new": new_status}}
        if reason:
            changes["reason"] = reason
        self.repo.create(
            resource_type=resource_type,
            resource_id=resource_id,
            action=AuditAction.STATUS_CHANGED,
            changes=changes,
            actor_type=actor_type,
            actor_id=actor_id,
        )
