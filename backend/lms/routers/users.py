"""User API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from lms.core.auth import get_current_user, is_admin
from lms.core.database import get_db
from lms.models.user import User
from lms.repositories.user_repository import UserRepository
from lms.schemas.user import UserCreate, UserResponse

router = APIRouter()


@router.post(
    "/",
    response_model=UserResponse,
    status_code=201,
    summary="Create user",
    responses={
        409: {"description": "Username or email already registered"},
        422: {"description": "Validation error"},
    },
)
async def create_user(
    data: UserCreate,
    db: Session = Depends(get_db),
) -> User:
    """Register a user."""
    repo = UserRepository(db)
    if repo.username_or_email_exists(data.username, data.email):
        raise HTTPException(status_code=409, detail="Username or email already registered")
    return repo.create(data)


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    summary="Get user",
    responses={
        401: {"description": "Unauthorized"},
        403: {"description": "Forbidden"},
        404: {"description": "User not found"},
    },
)
async def get_user(
    user_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> User:
    """Get a user. Non-admins may only read their own record."""
    if current_user.id != user_id and not is_admin(current_user):
        raise HTTPException(status_code=403, detail="Not authorized to access this user")
    user = UserRepository(db).get_by_id(user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user
