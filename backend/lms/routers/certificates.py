"""Certificate API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from lms.core.auth import get_current_user, is_admin, require_admin
from lms.core.database import get_db
from lms.domain.certificate import CertificateRecord, CertificateStatus
from lms.domain.certificate_issuer import IssuanceError
from lms.models.certificate import Certificate
from lms.models.user import User
from lms.repositories.certificate_repository import CertificateRepository
from lms.schemas.certificate import (
    CertificateResponse,
    CertificateUpdate,
    CertificateVerification,
    GenerateCertificateRequest,
    ManualCertificateCreate,
    RevokeCertificateRequest,
)
from lms.services.certificate_service import CertificateService
from lms.services.errors import ConflictError, IssuanceFailedError, NotFoundError
from lms.services.pdf_service import PdfService

router = APIRouter()


def _get_visible(db: Session, certificate_pk: UUID, user: User) -> CertificateRecord:
    """Load a certificate the caller is allowed to see."""
    try:
        certificate = CertificateService(db).get(certificate_pk)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Certificate not found") from None
    if not is_admin(user) and user.id not in (certificate.student_id, certificate.instructor_id):
        raise HTTPException(status_code=403, detail="Not authorized to access this certificate")
    return certificate


@router.get(
    "/verify/{certificate_id}",
    response_model=CertificateVerification,
    summary="Verify certificate",
    responses={404: {"description": "Certificate not found or no longer valid"}},
)
async def verify_certificate(
    certificate_id: str,
    db: Session = Depends(get_db),
) -> CertificateVerification:
    """Public verification of a certificate id. Only active certificates verify."""
    certificate = CertificateService(db).verify(certificate_id)
    if certificate is None:
        raise HTTPException(status_code=404, detail="Certificate not found or invalid")
    return CertificateVerification.from_record(certificate)


@router.post(
    "/generate",
    response_model=CertificateResponse,
    status_code=201,
    summary="Generate certificate",
    responses={
        200: {"description": "Certificate already issued; the existing one is returned"},
        400: {"description": "Student has not completed this course"},
        401: {"description": "Unauthorized"},
        403: {"description": "Forbidden"},
        404: {"description": "Course or student not found"},
        409: {"description": "Concurrent issuance, retry"},
    },
)
async def generate_certificate(
    data: GenerateCertificateRequest,
    response: Response,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> CertificateResponse:
    """Issue a completion certificate, or return the student's existing one."""
    student_id = data.student_id or user.id
    if student_id != user.id and not is_admin(user):
        raise HTTPException(status_code=403, detail="Not authorized to generate this certificate")

    try:
        issuance = CertificateService(db).generate(
            student_id,  # type: ignore[arg-type]
            data.course_id,
            actor_id=str(user.id),
        )
    except IssuanceFailedError as e:
        status_code = 404 if e.error == IssuanceError.REFERENCE_NOT_FOUND else 400
        raise HTTPException(status_code=status_code, detail=str(e)) from None
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e)) from None

    if not issuance.created:
        response.status_code = 200
    return CertificateResponse.from_record(issuance.certificate)  # type: ignore[arg-type]


@router.post(
    "/manual",
    response_model=CertificateResponse,
    status_code=201,
    summary="Create manual certificate",
    responses={
        401: {"description": "Unauthorized"},
        403: {"description": "Admin access required"},
        404: {"description": "Student not found"},
    },
)
async def create_manual_certificate(
    data: ManualCertificateCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> CertificateResponse:
    """Issue a certificate that is not tied to a catalog course."""
    try:
        certificate = CertificateService(db).create_manual(data, issuer=admin)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from None
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e)) from None
    return CertificateResponse.from_record(certificate)


@router.get(
    "/",
    response_model=list[CertificateResponse],
    summary="List certificates",
    responses={401: {"description": "Unauthorized"}, 403: {"description": "Forbidden"}},
)
async def list_certificates(
    response: Response,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    order_by: str | None = Query(default=None),
    sort_order: str = Query(default="desc", pattern="^(asc|desc)$"),
    course_id: UUID | None = None,
    student_id: UUID | None = None,
    status: CertificateStatus | None = None,
    search: str | None = Query(default=None, max_length=100),
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> list[Certificate]:
    """List certificates in any status."""
    repo = CertificateRepository(db)
    response.headers["X-Total-Count"] = str(
        repo.count(course_id=course_id, student_id=student_id, status=status, search=search)
    )
    return repo.get_all(
        skip=skip,
        limit=limit,
        course_id=course_id,
        student_id=student_id,
        status=status,
        search=search,
        order_by=order_by,
        sort_order=sort_order,
    )


@router.get(
    "/{certificate_pk}",
    response_model=CertificateResponse,
    summary="Get certificate",
    responses={
        401: {"description": "Unauthorized"},
        403: {"description": "Forbidden"},
        404: {"description": "Certificate not found"},
    },
)
async def get_certificate(
    certificate_pk: UUID,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> CertificateResponse:
    """Get a certificate; visible to admins, its student and its instructor."""
    return CertificateResponse.from_record(_get_visible(db, certificate_pk, user))


@router.put(
    "/{certificate_pk}",
    response_model=CertificateResponse,
    summary="Update certificate",
    responses={
        401: {"description": "Unauthorized"},
        404: {"description": "Certificate not found"},
        422: {"description": "Validation error"},
    },
)
async def update_certificate(
    certificate_pk: UUID,
    data: CertificateUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> CertificateResponse:
    """Correct display fields, grade, score or template."""
    try:
        certificate = CertificateService(db).update(certificate_pk, data, actor_id=str(admin.id))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from None
    return CertificateResponse.from_record(certificate)


@router.put(
    "/{certificate_pk}/revoke",
    response_model=CertificateResponse,
    summary="Revoke certificate",
    responses={
        401: {"description": "Unauthorized"},
        404: {"description": "Certificate not found"},
        422: {"description": "Reason missing or too long"},
    },
)
async def revoke_certificate(
    certificate_pk: UUID,
    data: RevokeCertificateRequest,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> CertificateResponse:
    """Revoke a certificate with a reason."""
    try:
        certificate = CertificateService(db).revoke(
            certificate_pk, data.reason, actor_id=str(admin.id)
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from None
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e)) from None
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from None
    return CertificateResponse.from_record(certificate)


@router.put(
    "/{certificate_pk}/deactivate",
    response_model=CertificateResponse,
    summary="Deactivate certificate",
    responses={
        401: {"description": "Unauthorized"},
        404: {"description": "Certificate not found"},
    },
)
async def deactivate_certificate(
    certificate_pk: UUID,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> CertificateResponse:
    """Suspend a certificate without revoking it."""
    try:
        certificate = CertificateService(db).deactivate(certificate_pk, actor_id=str(admin.id))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from None
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e)) from None
    return CertificateResponse.from_record(certificate)


@router.put(
    "/{certificate_pk}/reactivate",
    response_model=CertificateResponse,
    summary="Reactivate certificate",
    responses={
        401: {"description": "Unauthorized"},
        404: {"description": "Certificate not found"},
        409: {"description": "Student already holds another live certificate"},
    },
)
async def reactivate_certificate(
    certificate_pk: UUID,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> CertificateResponse:
    """Return an inactive or revoked certificate to active."""
    try:
        certificate = CertificateService(db).reactivate(certificate_pk, actor_id=str(admin.id))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from None
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e)) from None
    return CertificateResponse.from_record(certificate)


@router.get(
    "/{certificate_pk}/download",
    summary="Download certificate PDF",
    responses={
        200: {"content": {"application/pdf": {}}, "description": "Certificate PDF"},
        400: {"description": "Certificate is not active"},
        401: {"description": "Unauthorized"},
        404: {"description": "Certificate not found"},
    },
)
async def download_certificate(
    certificate_pk: UUID,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> Response:
    """Render an active certificate as PDF for its student or an admin."""
    certificate = _get_visible(db, certificate_pk, user)
    if not is_admin(user) and user.id != certificate.student_id:
        raise HTTPException(status_code=403, detail="Not authorized to download this certificate")
    if certificate.status != CertificateStatus.ACTIVE:
        raise HTTPException(status_code=400, detail="Only active certificates can be downloaded")

    pdf_bytes = PdfService().generate_certificate_pdf(certificate)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={
            "Content-Disposition": (
                f'attachment; filename="certificate-{certificate.certificate_id}.pdf"'
            )
        },
    )
