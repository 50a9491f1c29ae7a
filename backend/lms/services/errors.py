"""Service-layer exceptions. Routers translate these to HTTP responses."""

from lms.domain.certificate_issuer import IssuanceError
from lms.domain.coupon_rules import IneligibilityReason
from lms.domain.ports import ConflictError

__all__ = [
    "ConflictError",
    "IneligibleCouponError",
    "IssuanceFailedError",
    "NotFoundError",
]


class NotFoundError(ValueError):
    """A referenced coupon, certificate or enrollment does not exist."""


class IneligibleCouponError(ValueError):
    def __init__(self, reason: IneligibilityReason):
        super().__init__(reason.message)
        self.reason = reason


class IssuanceFailedError(ValueError):
    def __init__(self, error: IssuanceError):
        super().__init__(error.message)
        self.error = error
