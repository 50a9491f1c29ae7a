"""Audit log API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from lms.core.auth import require_admin
from lms.core.database import get_db
from lms.models.audit_log import AuditResourceType
from lms.models.user import User
from lms.repositories.audit_log_repository import AuditLogRepository
from lms.schemas.audit_log import AuditLogResponse

router = APIRouter()


@router.get(
    "/{resource_type}/{resource_id}",
    response_model=list[AuditLogResponse],
    summary="Get audit trail for a resource",
    responses={
        401: {"description": "Unauthorized"},
        403: {"description": "Admin access required"},
        422: {"description": "Unknown resource type"},
    },
)
async def get_resource_audit_trail(
    resource_type: AuditResourceType,
    resource_id: UUID,
    response: Response,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> list[AuditLogResponse]:
    """Get the audit trail for a coupon or certificate, newest first."""
    repo = AuditLogRepository(db)
    response.headers["X-Total-Count"] = str(repo.count_by_resource(resource_type, resource_id))
    logs = repo.get_by_resource(resource_type, resource_id, skip=skip, limit=limit)
    return [AuditLogResponse.model_validate(log) for log in logs]
