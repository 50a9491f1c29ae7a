from lms.models.audit_log import AuditLog
from lms.models.certificate import (
    Certificate,
    CertificateGrade,
    CertificateStatus,
    CertificateTemplate,
)
from lms.models.coupon import Coupon, CouponKind, CouponListStatus, CouponScopeType
from lms.models.coupon_redemption import CouponRedemption
from lms.models.course import Course, CourseCategory
from lms.models.enrollment import Enrollment
from lms.models.user import User, UserRole

__all__ = [
    "AuditLog",
    "Certificate",
    "CertificateGrade",
    "CertificateStatus",
    "CertificateTemplate",
    "Coupon",
    "CouponKind",
    "CouponListStatus",
    "CouponRedemption",
    "CouponScopeType",
    "Course",
    "CourseCategory",
    "Enrollment",
    "User",
    "UserRole",
]
