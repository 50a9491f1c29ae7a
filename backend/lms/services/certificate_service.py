"""Certificate issuance, lifecycle and verification service."""

import logging
from collections.abc import Callable
from datetime import datetime
from uuid import UUID

from sqlalchemy.orm import Session

from lms.core.config import settings
from lms.domain.certificate import CertificateRecord
from lms.domain.certificate_issuer import Issuance, build_manual_certificate, issue
from lms.domain.certificate_registry import CertificateRegistry, deactivate, reactivate, revoke
from lms.models.audit_log import AuditResourceType
from lms.models.shared import utc_now
from lms.models.user import User
from lms.repositories.certificate_repository import CertificateRepository, to_record
from lms.repositories.course_repository import CourseRepository
from lms.repositories.enrollment_repository import EnrollmentRepository
from lms.repositories.user_repository import UserRepository
from lms.schemas.certificate import CertificateUpdate, ManualCertificateCreate
from lms.services.audit_service import AuditService, snapshot_fields
from lms.services.errors import ConflictError, IssuanceFailedError, NotFoundError

logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = (
    "student_name",
    "course_title",
    "instructor_name",
    "duration",
    "grade",
    "score",
    "template",
)


class CertificateService:
    """Service for issuing certificates and managing their status."""

    def __init__(self, db: Session):
        self.db = db
        self.certificate_repo = CertificateRepository(db)
        self.course_repo = CourseRepository(db)
        self.enrollment_repo = EnrollmentRepository(db)
        self.user_repo = UserRepository(db)
        self.audit = AuditService(db)

    def get(self, certificate_pk: UUID) -> CertificateRecord:
        certificate = self.certificate_repo.get_by_id(certificate_pk)
        if not certificate:
            raise NotFoundError("Certificate not found")
        return to_record(certificate)

    def verify(self, certificate_id: str) -> CertificateRecord | None:
        """Public verification: the certificate if it exists and is active."""
        return CertificateRegistry(self.certificate_repo).verify(certificate_id)

    def generate(
        self,
        student_id: UUID,
        course_id: UUID,
        actor_id: str | None = None,
        now: datetime | None = None,
    ) -> Issuance:
        """Issue a completion certificate, or return the one already issued.

        Returns:
            An Issuance whose ``created`` flag tells a new certificate from an
            existing one.

        Raises:
            IssuanceFailedError: If the course is not completed or a reference
                is missing.
            ConflictError: If every attempt lost a race to another issuer.
        """
        attempts = max(1, settings.CONFLICT_RETRY_ATTEMPTS)
        for attempt in range(1, attempts + 1):
            moment = now or utc_now()
            course = self.course_repo.get_course(course_id)
            issuance = issue(
                enrollment=self.enrollment_repo.get_enrollment(student_id, course_id),
                course=course,
                student=self.user_repo.get_person(student_id),
                instructor=self.user_repo.get_person(course.instructor_id) if course else None,
                existing=self.certificate_repo.find_active_or_inactive(student_id, course_id),
                now=moment,
                base_url=settings.APP_BASE_URL,
            )
            if issuance.error is not None:
                raise IssuanceFailedError(issuance.error)
            if not issuance.created:
                return issuance

            try:
                saved = self.certificate_repo.insert_if_absent(issuance.certificate)  # type: ignore[arg-type]
            except ConflictError:
                logger.warning(
                    "Conflict issuing certificate for student %s course %s (attempt %d of %d)",
                    student_id,
                    course_id,
                    attempt,
                    attempts,
                )
                continue

            self.enrollment_repo.mark_certificate_issued(
                student_id, course_id, saved.certificate_id, saved.issued_at
            )
            self.audit.log_create(
                resource_type=AuditResourceType.CERTIFICATE,
                resource_id=saved.id,  # type: ignore[arg-type]
                actor_type="user" if actor_id else "system",
                actor_id=actor_id,
                data={"certificate_id": saved.certificate_id, "course_id": str(course_id)},
            )
            logger.info(
                "Issued certificate %s to student %s for course %s",
                saved.certificate_id,
                student_id,
                course_id,
            )
            return Issuance(certificate=saved, created=True)

        raise ConflictError("Certificate is being issued concurrently, please retry")

    def create_manual(
        self, data: ManualCertificateCreate, issuer: User, now: datetime | None = None
    ) -> CertificateRecord:
        """Issue a certificate that is not tied to a catalog course."""
        student = self.user_repo.get_person(data.student_id)
        if student is None:
            raise NotFoundError("Student not found")

        attempts = max(1, settings.CONFLICT_RETRY_ATTEMPTS)
        for _ in range(attempts):
            moment = now or utc_now()
            certificate = build_manual_certificate(
                student_id=student.user_id,
                instructor_id=issuer.id,  # type: ignore[arg-type]
                course_title=data.course_title,
                duration=data.duration,
                now=moment,
                completed_at=data.completed_at,
                score=data.score,
                grade=data.grade,
                template=data.template,
                student_name=data.student_name or student.display_name,
                instructor_name=data.instructor_name or issuer.display_name,
                base_url=settings.APP_BASE_URL,
            )
            try:
                saved = self.certificate_repo.insert_if_absent(certificate)
            except ConflictError:
                # certificate_id collision; a fresh id is drawn next round
                continue
            self.audit.log_create(
                resource_type=AuditResourceType.CERTIFICATE,
                resource_id=saved.id,  # type: ignore[arg-type]
                actor_type="user",
                actor_id=str(issuer.id),
                data={"certificate_id": saved.certificate_id, "manual": True},
            )
            logger.info("Issued manual certificate %s to %s", saved.certificate_id, student.user_id)
            return saved

        raise ConflictError("Could not allocate a unique certificate id, please retry")

    def update(
        self, certificate_pk: UUID, data: CertificateUpdate, actor_id: str | None = None
    ) -> CertificateRecord:
        """Correct display fields, grade, score or template and record what changed."""
        certificate = self.certificate_repo.get_by_id(certificate_pk)
        if not certificate:
            raise NotFoundError("Certificate not found")
        before = snapshot_fields(certificate, _EDITABLE_FIELDS)

        updated = self.certificate_repo.update(certificate_pk, data)
        self.audit.log_update(
            resource_type=AuditResourceType.CERTIFICATE,
            resource_id=certificate_pk,
            actor_type="user" if actor_id else "system",
            actor_id=actor_id,
            old_data=before,
            new_data=snapshot_fields(updated, _EDITABLE_FIELDS),
        )
        return to_record(updated)  # type: ignore[arg-type]

    def _transition(
        self,
        certificate_pk: UUID,
        change: Callable[[CertificateRecord], CertificateRecord],
        actor_id: str | None,
        reason: str | None = None,
    ) -> CertificateRecord:
        current = self.get(certificate_pk)
        updated = change(current)
        if updated is current:
            return current

        saved = self.certificate_repo.save(updated)
        self.audit.log_status_change(
            resource_type=AuditResourceType.CERTIFICATE,
            resource_id=saved.id,  # type: ignore[arg-type]
            old_status=current.status.value,
            new_status=saved.status.value,
            actor_type="user" if actor_id else "system",
            actor_id=actor_id,
            reason=reason,
        )
        logger.info(
            "Certificate %s moved from %s to %s",
            saved.certificate_id,
            current.status.value,
            saved.status.value,
        )
        return saved

    def revoke(
        self,
        certificate_pk: UUID,
        reason: str,
        actor_id: str | None = None,
        now: datetime | None = None,
    ) -> CertificateRecord:
        moment = now or utc_now()
        return self._transition(
            certificate_pk, lambda c: revoke(c, reason, moment), actor_id, reason=reason.strip()
        )

    def deactivate(
        self, certificate_pk: UUID, actor_id: str | None = None, now: datetime | None = None
    ) -> CertificateRecord:
        moment = now or utc_now()
        return self._transition(certificate_pk, lambda c: deactivate(c, moment), actor_id)

    def reactivate(
        self, certificate_pk: UUID, actor_id: str | None = None, now: datetime | None = None
    ) -> CertificateRecord:
        """Make a certificate active again.

        Raises:
            ConflictError: If the student already holds another live certificate
                for the same course.
        """
        moment = now or utc_now()
        return self._transition(certificate_pk, lambda c: reactivate(c, moment), actor_id)
