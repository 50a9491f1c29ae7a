from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field


class EnrollmentCreate(BaseModel):
    course_id: UUID
    student_id: UUID | None = None


class EnrollmentProgressUpdate(BaseModel):
    progress: int = Field(..., ge=0, le=100)
    completed_lessons_count: int | None = Field(default=None, ge=0)
    time_spent_minutes: int | None = Field(default=None, ge=0)
    average_score: Decimal | None = Field(default=None, ge=0, le=100)


class EnrollmentResponse(BaseModel):
    id: UUID
    student_id: UUID
    course_id: UUID
    progress: int
    completed_lessons_count: int
    time_spent_minutes: int
    average_score: Decimal | None
    completed_at: datetime | None
    certificate_issued: bool
    certificate_issued_at: datetime | None
    certificate_id: str | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
