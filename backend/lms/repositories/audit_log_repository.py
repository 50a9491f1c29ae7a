"""Audit trail storage for coupons and certificates."""

from typing import Any
from uuid import UUID

from sqlalchemy.orm import Query, Session

from lms.models.audit_log import AuditAction, AuditLog, AuditResourceType


class AuditLogRepository:
    def __init__(self, db: Session):
        self.db = db

    def _for_resource(self, resource_type: AuditResourceType, resource_id: UUID) -> Query:  # type: ignore[type-arg]
        return self.db.query(AuditLog).filter(
            AuditLog.resource_type == AuditResourceType(resource_type).value,
            AuditLog.resource_id == resource_id,
        )

    def create(
        self,
        *,
        resource_type: AuditResourceType,
        resource_id: UUID,
        action: AuditAction,
        changes: dict[str, Any],
        actor_type: str,
        actor_id: str | None = None,
    ) -> AuditLog:
        """Append one entry to the trail of a coupon or certificate."""
        entry = AuditLog(
            resource_type=AuditResourceType(resource_type).value,
            resource_id=resource_id,
            action=AuditAction(action).value,
            changes=changes,
            actor_type=actor_type,
            actor_id=actor_id,
        )
        self.db.add(entry)
        self.db.commit()
        self.db.refresh(entry)
        return entry

    def get_by_resource(
        self,
        resource_type: AuditResourceType,
        resource_id: UUID,
        skip: int = 0,
        limit: int = 100,
    ) -> list[AuditLog]:
        """Entries for one resource, newest first."""
        return (
            self._for_resource(resource_type, resource_id)
            .order_by(AuditLog.created_at.desc(), AuditLog.id.asc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def count_by_resource(self, resource_type: AuditResourceType, resource_id: UUID) -> int:
        return self._for_resource(resource_type, resource_id).count()
