from uuid import UUID

from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from lms.core.database import get_db
from lms.models.user import User, UserRole
from lms.repositories.user_repository import UserRepository

USER_ID_HEADER = "X-User-Id"


def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
) -> User:
    """Resolve the calling user from the ``X-User-Id`` header.

    Authentication itself happens upstream; this only maps the forwarded
    identity onto a known user.
    """
    header = request.headers.get(USER_ID_HEADER)
    if not header:
        raise HTTPException(status_code=401, detail="Not authenticated")

    try:
        user_id = UUID(header)
    except ValueError:
        raise HTTPException(status_code=401, detail=f"Invalid {USER_ID_HEADER} header") from None

    user = UserRepository(db).get_by_id(user_id)
    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    if user.role != UserRole.ADMIN.value:
        raise HTTPException(status_code=403, detail="Admin access required")
    return user


def require_instructor_or_admin(user: User = Depends(get_current_user)) -> User:
    if user.role not in (UserRole.ADMIN.value, UserRole.INSTRUCTOR.value):
        raise HTTPException(status_code=403, detail="Instructor or admin access required")
    return user


def is_admin(user: User) -> bool:
    return user.role == UserRole.ADMIN.value
