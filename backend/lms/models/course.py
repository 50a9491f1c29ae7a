"""Course model."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, func

from lms.core.database import Base
from lms.domain.coupon import CourseCategory
from lms.models.shared import UUIDType, generate_uuid

__all__ = ["Course", "CourseCategory"]


class Course(Base):
    """Course catalog entry read by coupon scoping and certificate issuance."""

    __tablename__ = "courses"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(50), nullable=False, index=True)
    instructor_id = Column(
        UUIDType, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    price_cents = Column(Integer, nullable=False, default=0)
    currency = Column(String(3), nullable=False, default="USD")
    duration_minutes = Column(Integer, nullable=False, default=0)
    total_lessons = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
