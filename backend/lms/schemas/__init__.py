from lms.schemas.audit_log import AuditLogResponse
from lms.schemas.certificate import (
    CertificateResponse,
    CertificateUpdate,
    CertificateVerification,
    GenerateCertificateRequest,
    ManualCertificateCreate,
    RevokeCertificateRequest,
)
from lms.schemas.coupon import (
    ApplyCouponRequest,
    ApplyCouponResponse,
    CouponAnalyticsResponse,
    CouponCreate,
    CouponRedemptionResponse,
    CouponResponse,
    CouponUpdate,
    ValidateCouponRequest,
    ValidateCouponResponse,
)
from lms.schemas.course import CourseCreate, CourseResponse
from lms.schemas.enrollment import EnrollmentCreate, EnrollmentProgressUpdate, EnrollmentResponse
from lms.schemas.user import UserCreate, UserResponse

__all__ = [
    "ApplyCouponRequest",
    "ApplyCouponResponse",
    "AuditLogResponse",
    "CertificateResponse",
    "CertificateUpdate",
    "CertificateVerification",
    "CouponAnalyticsResponse",
    "CouponCreate",
    "CouponRedemptionResponse",
    "CouponResponse",
    "CouponUpdate",
    "CourseCreate",
    "CourseResponse",
    "EnrollmentCreate",
    "EnrollmentProgressUpdate",
    "EnrollmentResponse",
    "GenerateCertificateRequest",
    "ManualCertificateCreate",
    "RevokeCertificateRequest",
    "UserCreate",
    "UserResponse",
    "ValidateCouponRequest",
    "ValidateCouponResponse",
]
