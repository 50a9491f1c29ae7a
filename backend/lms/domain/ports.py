"""Collaborator interfaces the rules engine relies on.

The SQLAlchemy repositories in ``lms.repositories`` implement these.
Conflicting conditional writes raise :class:`ConflictError`.
"""

from typing import Protocol
from uuid import UUID

from lms.domain.certificate import (
    CertificateRecord,
    CourseSnapshot,
    EnrollmentSnapshot,
    PersonSnapshot,
)
from lms.domain.coupon import CouponSnapshot


class ConflictError(ValueError):
    """A conditional write lost a race against a concurrent writer."""


class CouponRepository(Protocol):
    def find_by_code(self, code: str) -> CouponSnapshot | None: ...

    def save_with_optimistic_redemption(
        self, coupon: CouponSnapshot, expected_used_count: int
    ) -> CouponSnapshot: ...


class CertificateRepository(Protocol):
    def find_active_or_inactive(
        self, student_id: UUID, course_id: UUID
    ) -> CertificateRecord | None: ...

    def find_by_id(self, certificate_id: str) -> CertificateRecord | None: ...

    def insert_if_absent(self, certificate: CertificateRecord) -> CertificateRecord: ...

    def save(self, certificate: CertificateRecord) -> CertificateRecord: ...


class EnrollmentSource(Protocol):
    def get_enrollment(self, student_id: UUID, course_id: UUID) -> EnrollmentSnapshot | None: ...


class CourseSource(Protocol):
    def get_course(self, course_id: UUID) -> CourseSnapshot | None: ...


class IdentitySource(Protocol):
    def get_person(self, user_id: UUID) -> PersonSnapshot | None: ...
