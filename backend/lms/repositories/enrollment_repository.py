"""Enrollment repository for data access."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy.orm import Session

from lms.domain.certificate import EnrollmentSnapshot
from lms.domain.certificate_issuer import COMPLETED_PROGRESS
from lms.models.enrollment import Enrollment
from lms.models.shared import as_utc, utc_now
from lms.schemas.enrollment import EnrollmentProgressUpdate

_NON_NULLABLE = ("completed_lessons_count", "time_spent_minutes")


class EnrollmentRepository:
    """Repository for Enrollment model."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, enrollment_id: UUID) -> Enrollment | None:
        return self.db.query(Enrollment).filter(Enrollment.id == enrollment_id).first()

    def get_by_student_and_course(self, student_id: UUID, course_id: UUID) -> Enrollment | None:
        return (
            self.db.query(Enrollment)
            .filter(Enrollment.student_id == student_id, Enrollment.course_id == course_id)
            .first()
        )

    def create(self, student_id: UUID, course_id: UUID) -> Enrollment:
        enrollment = Enrollment(student_id=student_id, course_id=course_id)
        self.db.add(enrollment)
        self.db.commit()
        self.db.refresh(enrollment)
        return enrollment

    def update_progress(
        self,
        enrollment_id: UUID,
        data: EnrollmentProgressUpdate,
        now: datetime | None = None,
    ) -> Enrollment | None:
        """Record progress; reaching 100 stamps ``completed_at`` once."""
        enrollment = self.get_by_id(enrollment_id)
        if not enrollment:
            return None

        for key, value in data.model_dump(exclude_unset=True).items():
            if value is None and key in _NON_NULLABLE:
                continue
            setattr(enrollment, key, value)

        if data.progress == COMPLETED_PROGRESS:
            if enrollment.completed_at is None:
                enrollment.completed_at = now or utc_now()  # type: ignore[assignment]
        else:
            enrollment.completed_at = None  # type: ignore[assignment]

        self.db.commit()
        self.db.refresh(enrollment)
        return enrollment

    def mark_certificate_issued(
        self, student_id: UUID, course_id: UUID, certificate_id: str, issued_at: datetime
    ) -> None:
        enrollment = self.get_by_student_and_course(student_id, course_id)
        if not enrollment:
            return
        enrollment.certificate_issued = True  # type: ignore[assignment]
        enrollment.certificate_issued_at = issued_at  # type: ignore[assignment]
        enrollment.certificate_id = certificate_id  # type: ignore[assignment]
        self.db.commit()

    def get_enrollment(self, student_id: UUID, course_id: UUID) -> EnrollmentSnapshot | None:
        enrollment = self.get_by_student_and_course(student_id, course_id)
        if not enrollment:
            return None
        average = enrollment.average_score
        return EnrollmentSnapshot(
            student_id=enrollment.student_id,  # type: ignore[arg-type]
            course_id=enrollment.course_id,  # type: ignore[arg-type]
            progress=enrollment.progress,  # type: ignore[arg-type]
            completed_at=as_utc(enrollment.completed_at),  # type: ignore[arg-type]
            completed_lessons_count=enrollment.completed_lessons_count or 0,  # type: ignore[arg-type]
            time_spent_minutes=enrollment.time_spent_minutes or 0,  # type: ignore[arg-type]
            average_score=Decimal(str(average)) if average is not None else None,
        )
