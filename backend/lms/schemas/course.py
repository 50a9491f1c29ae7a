from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from lms.models.course import CourseCategory


class CourseCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    category: CourseCategory
    instructor_id: UUID | None = None
    price_cents: int = Field(default=0, ge=0)
    currency: str = Field(default="USD", min_length=3, max_length=3)
    duration_minutes: int = Field(default=0, ge=0)
    total_lessons: int = Field(default=0, ge=0)


class CourseResponse(BaseModel):
    id: UUID
    title: str
    description: str | None
    category: str
    instructor_id: UUID
    price_cents: int
    currency: str
    duration_minutes: int
    total_lessons: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
