"""Enrollment model tracking a student's progress on a course."""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    func,
)

from lms.core.database import Base
from lms.models.shared import UUIDType, generate_uuid


class Enrollment(Base):
    """Enrollment model - one row per (student, course)."""

    __tablename__ = "enrollments"
    __table_args__ = (
        UniqueConstraint("student_id", "course_id", name="uq_enrollments_student_course"),
    )

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    student_id = Column(
        UUIDType, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    course_id = Column(
        UUIDType, ForeignKey("courses.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    progress = Column(Integer, nullable=False, default=0)
    completed_lessons_count = Column(Integer, nullable=False, default=0)
    time_spent_minutes = Column(Integer, nullable=False, default=0)
    average_score = Column(Numeric(5, 2), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    certificate_issued = Column(Boolean, nullable=False, default=False)
    certificate_issued_at = Column(DateTime(timezone=True), nullable=True)
    certificate_id = Column(String(50), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
