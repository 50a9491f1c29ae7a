"""Verification and status transitions for issued certificates.

Transitions are admin-triggered and any state can reach any other:

    ACTIVE | INACTIVE -> REVOKED   (reason required)
    ACTIVE | REVOKED  -> INACTIVE
    INACTIVE | REVOKED -> ACTIVE

Moving a certificate into the state it already holds returns it unchanged.
"""

from dataclasses import replace
from datetime import datetime

from lms.domain.certificate import (
    MAX_REVOCATION_REASON_LENGTH,
    CertificateRecord,
    CertificateStatus,
)
from lms.domain.ports import CertificateRepository


def normalize_certificate_id(raw: str) -> str:
    return raw.strip().upper()


def is_valid(certificate: CertificateRecord | None) -> bool:
    """Only active certificates count as valid for public verification."""
    return certificate is not None and certificate.status == CertificateStatus.ACTIVE


def revoke(certificate: CertificateRecord, reason: str, now: datetime) -> CertificateRecord:
    """Revoke ``certificate``.

    Raises:
        ValueError: If ``reason`` is blank or longer than 500 characters.
    """
    reason = (reason or "").strip()
    if not reason:
        raise ValueError("Revocation reason is required")
    if len(reason) > MAX_REVOCATION_REASON_LENGTH:
        raise ValueError("Reason cannot exceed 500 characters")
    if certificate.status == CertificateStatus.REVOKED:
        return certificate
    return replace(
        certificate,
        status=CertificateStatus.REVOKED,
        revoked_at=now,
        revoked_reason=reason,
        status_changed_at=now,
    )


def _clear_revocation(
    certificate: CertificateRecord, status: CertificateStatus, now: datetime
) -> CertificateRecord:
    if certificate.status == status:
        return certificate
    return replace(
        certificate,
        status=status,
        revoked_at=None,
        revoked_reason=None,
        status_changed_at=now,
    )


def deactivate(certificate: CertificateRecord, now: datetime) -> CertificateRecord:
    return _clear_revocation(certificate, CertificateStatus.INACTIVE, now)


def reactivate(certificate: CertificateRecord, now: datetime) -> CertificateRecord:
    return _clear_revocation(certificate, CertificateStatus.ACTIVE, now)


class CertificateRegistry:
    """Lookup and verification over a certificate repository."""

    def __init__(self, repository: CertificateRepository):
        self.repository = repository

    def find(self, certificate_id: str) -> CertificateRecord | None:
        """Find a certificate in any state, case-insensitively."""
        return self.repository.find_by_id(normalize_certificate_id(certificate_id))

    def verify(self, certificate_id: str) -> CertificateRecord | None:
        """Return the certificate only if it exists and is active."""
        certificate = self.find(certificate_id)
        return certificate if is_valid(certificate) else None
