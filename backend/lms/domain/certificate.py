"""Certificate records and the collaborator snapshots issuance reads from."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

MAX_REVOCATION_REASON_LENGTH = 500


class CertificateStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    REVOKED = "revoked"


class CertificateGrade(str, Enum):
    A_PLUS = "A+"
    A = "A"
    B_PLUS = "B+"
    B = "B"
    C_PLUS = "C+"
    C = "C"
    PASS = "Pass"


class CertificateTemplate(str, Enum):
    MODERN = "modern"
    CLASSIC = "classic"
    MINIMAL = "minimal"
    PROFESSIONAL = "professional"


@dataclass(frozen=True)
class CertificateMetadata:
    """Point-in-time progress figures captured when the certificate is issued."""

    total_lessons: int = 0
    completed_lessons: int = 0
    average_score: Decimal = Decimal("0")
    time_spent_minutes: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_lessons": self.total_lessons,
            "completed_lessons": self.completed_lessons,
            "average_score": str(self.average_score),
            "time_spent_minutes": self.time_spent_minutes,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> CertificateMetadata:
        data = data or {}
        return cls(
            total_lessons=int(data.get("total_lessons", 0)),
            completed_lessons=int(data.get("completed_lessons", 0)),
            average_score=Decimal(str(data.get("average_score", 0))),
            time_spent_minutes=int(data.get("time_spent_minutes", 0)),
        )


@dataclass(frozen=True)
class EnrollmentSnapshot:
    student_id: UUID
    course_id: UUID
    progress: int
    completed_at: datetime | None = None
    completed_lessons_count: int = 0
    time_spent_minutes: int = 0
    average_score: Decimal | None = None


@dataclass(frozen=True)
class CourseSnapshot:
    course_id: UUID
    title: str
    instructor_id: UUID
    category: str | None = None
    total_lessons: int = 0
    duration_minutes: int = 0


@dataclass(frozen=True)
class PersonSnapshot:
    user_id: UUID
    display_name: str


@dataclass(frozen=True)
class CertificateRecord:
    """An issued certificate.

    Revocation fields are set exactly when ``status`` is REVOKED.
    """

    certificate_id: str
    student_id: UUID
    instructor_id: UUID
    course_id: UUID | None
    course_title: str
    completed_at: datetime
    issued_at: datetime
    duration: str = ""
    student_name: str | None = None
    instructor_name: str | None = None
    grade: CertificateGrade = CertificateGrade.PASS
    score: Decimal | None = None
    template: CertificateTemplate = CertificateTemplate.MODERN
    status: CertificateStatus = CertificateStatus.ACTIVE
    revoked_at: datetime | None = None
    revoked_reason: str | None = None
    status_changed_at: datetime | None = None
    metadata: CertificateMetadata = field(default_factory=CertificateMetadata)
    verification_url: str | None = None
    id: UUID | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "certificate_id", self.certificate_id.strip().upper())
        object.__setattr__(self, "status", CertificateStatus(self.status))
        object.__setattr__(self, "grade", CertificateGrade(self.grade))
        object.__setattr__(self, "template", CertificateTemplate(self.template))

        if self.issued_at < self.completed_at:
            raise ValueError("issued_at cannot be earlier than completed_at")
        if self.score is not None:
            score = Decimal(str(self.score))
            if score < 0 or score > 100:
                raise ValueError("Score must be between 0 and 100")
            object.__setattr__(self, "score", score)

        revoked = self.status == CertificateStatus.REVOKED
        has_revocation = self.revoked_at is not None or self.revoked_reason is not None
        if revoked and (self.revoked_at is None or not self.revoked_reason):
            raise ValueError("A revoked certificate needs revoked_at and revoked_reason")
        if not revoked and has_revocation:
            raise ValueError("Only revoked certificates carry revocation details")

    @property
    def is_revoked(self) -> bool:
        return self.status == CertificateStatus.REVOKED
