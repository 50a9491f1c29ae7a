"""Certificate repository for data access."""

import logging
from decimal import Decimal
from uuid import UUID

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session

from lms.core.sorting import apply_sort
from lms.domain.certificate import CertificateMetadata, CertificateRecord, CertificateStatus
from lms.domain.certificate_registry import normalize_certificate_id
from lms.domain.ports import ConflictError
from lms.models.certificate import Certificate
from lms.models.shared import as_utc, generate_uuid
from lms.schemas.certificate import CertificateUpdate

logger = logging.getLogger(__name__)

_LIVE_STATUSES = (CertificateStatus.ACTIVE.value, CertificateStatus.INACTIVE.value)


def to_record(certificate: Certificate) -> CertificateRecord:
    """Build the immutable domain view of a certificate row."""
    score = certificate.score
    return CertificateRecord(
        certificate_id=str(certificate.certificate_id),
        student_id=certificate.student_id,  # type: ignore[arg-type]
        instructor_id=certificate.instructor_id,  # type: ignore[arg-type]
        course_id=certificate.course_id,  # type: ignore[arg-type]
        course_title=str(certificate.course_title),
        completed_at=as_utc(certificate.completed_at),  # type: ignore[arg-type]
        issued_at=as_utc(certificate.issued_at),  # type: ignore[arg-type]
        duration=certificate.duration or "",  # type: ignore[arg-type]
        student_name=certificate.student_name,  # type: ignore[arg-type]
        instructor_name=certificate.instructor_name,  # type: ignore[arg-type]
        grade=certificate.grade,  # type: ignore[arg-type]
        score=Decimal(str(score)) if score is not None else None,
        template=certificate.template,  # type: ignore[arg-type]
        status=certificate.status,  # type: ignore[arg-type]
        revoked_at=as_utc(certificate.revoked_at),  # type: ignore[arg-type]
        revoked_reason=certificate.revoked_reason,  # type: ignore[arg-type]
        status_changed_at=as_utc(certificate.status_changed_at),  # type: ignore[arg-type]
        metadata=CertificateMetadata.from_dict(certificate.metadata_),  # type: ignore[arg-type]
        verification_url=certificate.verification_url,  # type: ignore[arg-type]
        id=certificate.id,  # type: ignore[arg-type]
    )


def _apply(certificate: Certificate, record: CertificateRecord) -> None:
    certificate.certificate_id = record.certificate_id  # type: ignore[assignment]
    certificate.student_id = record.student_id  # type: ignore[assignment]
    certificate.instructor_id = record.instructor_id  # type: ignore[assignment]
    certificate.course_id = record.course_id  # type: ignore[assignment]
    certificate.course_title = record.course_title  # type: ignore[assignment]
    certificate.completed_at = record.completed_at  # type: ignore[assignment]
    certificate.issued_at = record.issued_at  # type: ignore[assignment]
    certificate.duration = record.duration  # type: ignore[assignment]
    certificate.student_name = record.student_name  # type: ignore[assignment]
    certificate.instructor_name = record.instructor_name  # type: ignore[assignment]
    certificate.grade = record.grade.value  # type: ignore[assignment]
    certificate.score = record.score  # type: ignore[assignment]
    certificate.template = record.template.value  # type: ignore[assignment]
    certificate.status = record.status.value  # type: ignore[assignment]
    certificate.revoked_at = record.revoked_at  # type: ignore[assignment]
    certificate.revoked_reason = record.revoked_reason  # type: ignore[assignment]
    certificate.status_changed_at = record.status_changed_at  # type: ignore[assignment]
    certificate.metadata_ = record.metadata.to_dict()  # type: ignore[assignment]
    certificate.verification_url = record.verification_url  # type: ignore[assignment]


class CertificateRepository:
    """Repository for Certificate model."""

    def __init__(self, db: Session):
        self.db = db

    def _filtered(
        self,
        course_id: UUID | None = None,
        student_id: UUID | None = None,
        status: CertificateStatus | None = None,
        search: str | None = None,
    ) -> Query:  # type: ignore[type-arg]
        query = self.db.query(Certificate)
        if course_id:
            query = query.filter(Certificate.course_id == course_id)
        if student_id:
            query = query.filter(Certificate.student_id == student_id)
        if status:
            query = query.filter(Certificate.status == status.value)
        if search:
            pattern = f"%{search}%"
            query = query.filter(
                or_(
                    Certificate.certificate_id.ilike(pattern),
                    Certificate.student_name.ilike(pattern),
                    Certificate.course_title.ilike(pattern),
                )
            )
        return query

    def get_all(
        self,
        skip: int = 0,
        limit: int = 100,
        course_id: UUID | None = None,
        student_id: UUID | None = None,
        status: CertificateStatus | None = None,
        search: str | None = None,
        order_by: str | None = None,
        sort_order: str | None = "desc",
    ) -> list[Certificate]:
        query = self._filtered(course_id, student_id, status, search)
        query = apply_sort(query, Certificate, order_by, sort_order, default_field="issued_at")
        return query.offset(skip).limit(limit).all()

    def count(
        self,
        course_id: UUID | None = None,
        student_id: UUID | None = None,
        status: CertificateStatus | None = None,
        search: str | None = None,
    ) -> int:
        return self._filtered(course_id, student_id, status, search).count()

    def get_by_id(self, certificate_pk: UUID) -> Certificate | None:
        return self.db.query(Certificate).filter(Certificate.id == certificate_pk).first()

    def get_by_certificate_id(self, certificate_id: str) -> Certificate | None:
        return (
            self.db.query(Certificate)
            .filter(Certificate.certificate_id == normalize_certificate_id(certificate_id))
            .first()
        )

    def update(self, certificate_pk: UUID, data: CertificateUpdate) -> Certificate | None:
        """Update display fields, grade, score or template."""
        certificate = self.get_by_id(certificate_pk)
        if not certificate:
            return None

        update_data = data.model_dump(exclude_unset=True)
        for key in ("course_title", "duration"):
            if key in update_data and update_data[key] is None:
                update_data.pop(key)
        for key in ("grade", "template"):
            if update_data.get(key):
                update_data[key] = update_data[key].value
            else:
                update_data.pop(key, None)

        for key, value in update_data.items():
            setattr(certificate, key, value)

        self.db.commit()
        self.db.refresh(certificate)
        return certificate

    def find_active_or_inactive(
        self, student_id: UUID, course_id: UUID
    ) -> CertificateRecord | None:
        certificate = (
            self.db.query(Certificate)
            .filter(
                Certificate.student_id == student_id,
                Certificate.course_id == course_id,
                Certificate.status.in_(_LIVE_STATUSES),
            )
            .first()
        )
        return to_record(certificate) if certificate else None

    def find_by_id(self, certificate_id: str) -> CertificateRecord | None:
        certificate = self.get_by_certificate_id(certificate_id)
        return to_record(certificate) if certificate else None

    def insert_if_absent(self, certificate: CertificateRecord) -> CertificateRecord:
        """Insert ``certificate`` unless the pair already holds a non-revoked one.

        Raises:
            ConflictError: If the partial unique index on (student_id, course_id)
                or the unique certificate_id rejects the row.
        """
        row = Certificate(id=certificate.id or generate_uuid())
        _apply(row, certificate)
        self.db.add(row)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.info(
                "Certificate insert for student %s course %s rejected by a unique index",
                certificate.student_id,
                certificate.course_id,
            )
            raise ConflictError("A live certificate already exists for this course") from None
        self.db.refresh(row)
        return to_record(row)

    def save(self, certificate: CertificateRecord) -> CertificateRecord:
        """Persist a modified certificate.

        Raises:
            ValueError: If the certificate does not exist.
            ConflictError: If the change would leave two live certificates for a pair.
        """
        row = None
        if certificate.id is not None:
            row = self.get_by_id(certificate.id)
        if row is None:
            row = self.get_by_certificate_id(certificate.certificate_id)
        if row is None:
            raise ValueError(f"Certificate {certificate.certificate_id} not found")

        _apply(row, certificate)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError(
                "Another live certificate already exists for this student and course"
            ) from None
        self.db.refresh(row)
        return to_record(row)
