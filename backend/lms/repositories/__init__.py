from lms.repositories.audit_log_repository import AuditLogRepository
from lms.repositories.certificate_repository import CertificateRepository
from lms.repositories.coupon_repository import CouponRepository
from lms.repositories.course_repository import CourseRepository
from lms.repositories.enrollment_repository import EnrollmentRepository
from lms.repositories.user_repository import UserRepository

__all__ = [
    "AuditLogRepository",
    "CertificateRepository",
    "CouponRepository",
    "CourseRepository",
    "EnrollmentRepository",
    "UserRepository",
]
