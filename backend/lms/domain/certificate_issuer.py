"""Certificate eligibility and issuance-record construction."""

import random
import string
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from lms.domain.certificate import (
    CertificateGrade,
    CertificateMetadata,
    CertificateRecord,
    CertificateStatus,
    CertificateTemplate,
    CourseSnapshot,
    EnrollmentSnapshot,
    PersonSnapshot,
)

COMPLETED_PROGRESS = 100
SUFFIX_LENGTH = 5

_BASE36_ALPHABET = string.digits + string.ascii_uppercase
_system_random = random.SystemRandom()


class IssuanceError(str, Enum):
    COURSE_NOT_COMPLETED = "course_not_completed"
    REFERENCE_NOT_FOUND = "reference_not_found"

    @property
    def message(self) -> str:
        if self == IssuanceError.COURSE_NOT_COMPLETED:
            return "Student has not completed this course"
        return "Course or student not found"


@dataclass(frozen=True)
class Issuance:
    """Result of :func:`issue`.

    ``created`` is False when an existing non-revoked certificate was
    returned instead of a new one.
    """

    certificate: CertificateRecord | None = None
    created: bool = False
    error: IssuanceError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def to_base36(value: int) -> str:
    if value < 0:
        raise ValueError("base36 encoding needs a non-negative integer")
    if value == 0:
        return "0"
    digits: list[str] = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36_ALPHABET[remainder])
    return "".join(reversed(digits))


def generate_certificate_id(now: datetime, rng: random.Random | None = None) -> str:
    """Build a ``CERT-<base36 ms>-<5 chars>`` identifier.

    Uniqueness is best-effort; the repository's unique index is authoritative.
    """
    source = rng or _system_random
    millis = int(now.timestamp() * 1000)
    suffix = "".join(source.choice(_BASE36_ALPHABET) for _ in range(SUFFIX_LENGTH))
    return f"CERT-{to_base36(millis)}-{suffix}".upper()


def verification_url_for(base_url: str | None, certificate_id: str) -> str | None:
    if not base_url:
        return None
    return f"{base_url.rstrip('/')}/verify-certificate/{certificate_id}"


def issue(
    enrollment: EnrollmentSnapshot | None,
    course: CourseSnapshot | None,
    student: PersonSnapshot | None,
    instructor: PersonSnapshot | None,
    existing: CertificateRecord | None,
    now: datetime,
    rng: random.Random | None = None,
    base_url: str | None = None,
) -> Issuance:
    """Decide whether a certificate can be issued and build it.

    Args:
        enrollment: The student's enrollment on the course, if any.
        course: Course reference data, None when the lookup failed.
        student: Student reference data, None when the lookup failed.
        instructor: Instructor reference data; a failed lookup is tolerated.
        existing: The current non-revoked certificate for the pair, if any.
        now: Issuance timestamp.
        rng: Random source for the identifier suffix.
        base_url: Public site URL used to build the verification link.

    Returns:
        An Issuance holding either the certificate or the reason it was refused.
    """
    if enrollment is None or enrollment.progress != COMPLETED_PROGRESS:
        return Issuance(error=IssuanceError.COURSE_NOT_COMPLETED)

    if existing is not None:
        return Issuance(certificate=existing, created=False)

    if course is None or student is None:
        return Issuance(error=IssuanceError.REFERENCE_NOT_FOUND)

    completed_at = enrollment.completed_at or now
    if completed_at > now:
        completed_at = now

    certificate_id = generate_certificate_id(now, rng)
    metadata = CertificateMetadata(
        total_lessons=course.total_lessons,
        completed_lessons=enrollment.completed_lessons_count,
        average_score=enrollment.average_score or Decimal("0"),
        time_spent_minutes=enrollment.time_spent_minutes,
    )
    certificate = CertificateRecord(
        certificate_id=certificate_id,
        student_id=student.user_id,
        instructor_id=course.instructor_id,
        course_id=course.course_id,
        course_title=course.title,
        completed_at=completed_at,
        issued_at=now,
        duration=f"{course.duration_minutes} minutes",
        student_name=student.display_name,
        instructor_name=instructor.display_name if instructor else None,
        status=CertificateStatus.ACTIVE,
        status_changed_at=now,
        metadata=metadata,
        verification_url=verification_url_for(base_url, certificate_id),
    )
    return Issuance(certificate=certificate, created=True)


def build_manual_certificate(
    student_id: UUID,
    instructor_id: UUID,
    course_title: str,
    duration: str,
    now: datetime,
    completed_at: datetime | None = None,
    score: Decimal | None = None,
    grade: CertificateGrade = CertificateGrade.PASS,
    template: CertificateTemplate = CertificateTemplate.MODERN,
    student_name: str | None = None,
    instructor_name: str | None = None,
    rng: random.Random | None = None,
    base_url: str | None = None,
) -> CertificateRecord:
    """Build an administrator-created certificate that is not tied to a course."""
    completed = completed_at or now
    if completed > now:
        completed = now
    certificate_id = generate_certificate_id(now, rng)
    return CertificateRecord(
        certificate_id=certificate_id,
        student_id=student_id,
        instructor_id=instructor_id,
        course_id=None,
        course_title=course_title,
        completed_at=completed,
        issued_at=now,
        duration=duration,
        student_name=student_name,
        instructor_name=instructor_name,
        grade=grade,
        score=score,
        template=template,
        status_changed_at=now,
        metadata=CertificateMetadata(average_score=score or Decimal("0")),
        verification_url=verification_url_for(base_url, certificate_id),
    )
