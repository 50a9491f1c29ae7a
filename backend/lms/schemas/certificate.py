"""Certificate request and response schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from lms.domain.certificate import (
    CertificateGrade,
    CertificateRecord,
    CertificateStatus,
    CertificateTemplate,
)


class GenerateCertificateRequest(BaseModel):
    course_id: UUID
    student_id: UUID | None = None


class ManualCertificateCreate(BaseModel):
    student_id: UUID
    course_title: str = Field(..., min_length=1, max_length=200)
    duration: str = Field(..., min_length=1, max_length=50)
    student_name: str | None = Field(default=None, max_length=100)
    instructor_name: str | None = Field(default=None, max_length=100)
    completed_at: datetime | None = None
    score: Decimal | None = Field(default=None, ge=0, le=100)
    grade: CertificateGrade = CertificateGrade.PASS
    template: CertificateTemplate = CertificateTemplate.MODERN


class CertificateUpdate(BaseModel):
    student_name: str | None = Field(default=None, min_length=1, max_length=100)
    course_title: str | None = Field(default=None, min_length=1, max_length=200)
    instructor_name: str | None = Field(default=None, min_length=1, max_length=100)
    duration: str | None = Field(default=None, min_length=1, max_length=50)
    grade: CertificateGrade | None = None
    score: Decimal | None = Field(default=None, ge=0, le=100)
    template: CertificateTemplate | None = None


class RevokeCertificateRequest(BaseModel):
    reason: str = Field(..., min_length=1, max_length=500)


class CertificateResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: UUID
    certificate_id: str
    student_id: UUID
    course_id: UUID | None
    instructor_id: UUID
    student_name: str | None
    course_title: str
    instructor_name: str | None
    duration: str
    grade: str
    score: Decimal | None
    template: str
    verification_url: str | None
    status: CertificateStatus
    revoked_at: datetime | None
    revoked_reason: str | None
    status_changed_at: datetime | None
    completed_at: datetime
    issued_at: datetime
    metadata: dict[str, Any] = Field(
        default_factory=dict, validation_alias=AliasChoices("metadata_", "metadata")
    )

    @classmethod
    def from_record(cls, record: CertificateRecord) -> "CertificateResponse":
        return cls(
            id=record.id,
            certificate_id=record.certificate_id,
            student_id=record.student_id,
            course_id=record.course_id,
            instructor_id=record.instructor_id,
            student_name=record.student_name,
            course_title=record.course_title,
            instructor_name=record.instructor_name,
            duration=record.duration,
            grade=record.grade.value,
            score=record.score,
            template=record.template.value,
            verification_url=record.verification_url,
            status=record.status,
            revoked_at=record.revoked_at,
            revoked_reason=record.revoked_reason,
            status_changed_at=record.status_changed_at,
            completed_at=record.completed_at,
            issued_at=record.issued_at,
            metadata=record.metadata.to_dict(),
        )


class CertificateVerification(BaseModel):
    """Public view of an active certificate."""

    valid: bool = True
    certificate_id: str
    student_name: str | None
    course_title: str
    instructor_name: str | None
    duration: str
    grade: str
    completed_at: datetime
    issued_at: datetime

    @classmethod
    def from_record(cls, record: CertificateRecord) -> "CertificateVerification":
        return cls(
            certificate_id=record.certificate_id,
            student_name=record.student_name,
            course_title=record.course_title,
            instructor_name=record.instructor_name,
            duration=record.duration,
            grade=record.grade.value,
            completed_at=record.completed_at,
            issued_at=record.issued_at,
        )
