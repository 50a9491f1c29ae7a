from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from lms.models.user import UserRole


class UserCreate(BaseModel):
    username: str = Field(..., min_length=3, max_length=100)
    email: EmailStr
    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    role: UserRole = UserRole.STUDENT


class UserResponse(BaseModel):
    id: UUID
    username: str
    email: str
    first_name: str | None
    last_name: str | None
    role: str
    display_name: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
