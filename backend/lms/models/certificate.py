"""Certificate model for course-completion attestations."""

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Index, Numeric, String, Text, func, text

from lms.core.database import Base
from lms.domain.certificate import CertificateGrade, CertificateStatus, CertificateTemplate
from lms.models.shared import UUIDType, generate_uuid

__all__ = ["Certificate", "CertificateGrade", "CertificateStatus", "CertificateTemplate"]

_LIVE_CERTIFICATE = text("status != 'revoked'")


class Certificate(Base):
    """Certificate model.

    Rows are never deleted. At most one non-revoked row may exist per
    (student_id, course_id); the partial unique index below enforces it.
    """

    __tablename__ = "certificates"
    __table_args__ = (
        Index(
            "uq_certificates_student_course_live",
            "student_id",
            "course_id",
            unique=True,
            sqlite_where=_LIVE_CERTIFICATE,
            postgresql_where=_LIVE_CERTIFICATE,
        ),
    )

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    certificate_id = Column(String(50), unique=True, index=True, nullable=False)

    student_id = Column(
        UUIDType, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    course_id = Column(
        UUIDType, ForeignKey("courses.id", ondelete="RESTRICT"), nullable=True, index=True
    )
    instructor_id = Column(
        UUIDType, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True
    )

    student_name = Column(String(100), nullable=True)
    course_title = Column(String(200), nullable=False)
    instructor_name = Column(String(100), nullable=True)
    duration = Column(String(50), nullable=False, default="")

    grade = Column(String(10), nullable=False, default=CertificateGrade.PASS.value)
    score = Column(Numeric(5, 2), nullable=True)
    template = Column(String(20), nullable=False, default=CertificateTemplate.MODERN.value)
    verification_url = Column(String(500), nullable=True)

    status = Column(String(20), nullable=False, default=CertificateStatus.ACTIVE.value, index=True)
    revoked_at = Column(DateTime(timezone=True), nullable=True)
    revoked_reason = Column(Text, nullable=True)
    status_changed_at = Column(DateTime(timezone=True), nullable=True)

    completed_at = Column(DateTime(timezone=True), nullable=False)
    issued_at = Column(DateTime(timezone=True), nullable=False)
    metadata_ = Column("metadata", JSON, nullable=False, default=dict)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
