"""Enrollment API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from lms.core.auth import get_current_user, is_admin
from lms.core.database import get_db
from lms.models.enrollment import Enrollment
from lms.models.user import User
from lms.repositories.course_repository import CourseRepository
from lms.repositories.enrollment_repository import EnrollmentRepository
from lms.repositories.user_repository import UserRepository
from lms.schemas.enrollment import (
    EnrollmentCreate,
    EnrollmentProgressUpdate,
    EnrollmentResponse,
)

router = APIRouter()


def _can_manage(user: User, enrollment: Enrollment, db: Session) -> bool:
    if is_admin(user) or user.id == enrollment.student_id:
        return True
    course = CourseRepository(db).get_by_id(enrollment.course_id)  # type: ignore[arg-type]
    return course is not None and course.instructor_id == user.id


@router.post(
    "/",
    response_model=EnrollmentResponse,
    status_code=201,
    summary="Enroll in course",
    responses={
        401: {"description": "Unauthorized"},
        403: {"description": "Forbidden"},
        404: {"description": "Course or student not found"},
        409: {"description": "Already enrolled"},
    },
)
async def create_enrollment(
    data: EnrollmentCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> Enrollment:
    """Enroll the caller, or any student when called by an admin."""
    student_id = data.student_id or user.id
    if student_id != user.id and not is_admin(user):
        raise HTTPException(status_code=403, detail="Cannot enroll other users")
    if not UserRepository(db).get_by_id(student_id):  # type: ignore[arg-type]
        raise HTTPException(status_code=404, detail="Student not found")
    if not CourseRepository(db).get_by_id(data.course_id):
        raise HTTPException(status_code=404, detail="Course not found")

    repo = EnrollmentRepository(db)
    if repo.get_by_student_and_course(student_id, data.course_id):  # type: ignore[arg-type]
        raise HTTPException(status_code=409, detail="Already enrolled in this course")
    return repo.create(student_id, data.course_id)  # type: ignore[arg-type]


@router.get(
    "/{enrollment_id}",
    response_model=EnrollmentResponse,
    summary="Get enrollment",
    responses={
        401: {"description": "Unauthorized"},
        403: {"description": "Forbidden"},
        404: {"description": "Enrollment not found"},
    },
)
async def get_enrollment(
    enrollment_id: UUID,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> Enrollment:
    enrollment = EnrollmentRepository(db).get_by_id(enrollment_id)
    if not enrollment:
        raise HTTPException(status_code=404, detail="Enrollment not found")
    if not _can_manage(user, enrollment, db):
        raise HTTPException(status_code=403, detail="Not authorized to access this enrollment")
    return enrollment


@router.put(
    "/{enrollment_id}/progress",
    response_model=EnrollmentResponse,
    summary="Update enrollment progress",
    responses={
        401: {"description": "Unauthorized"},
        403: {"description": "Forbidden"},
        404: {"description": "Enrollment not found"},
    },
)
async def update_enrollment_progress(
    enrollment_id: UUID,
    data: EnrollmentProgressUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> Enrollment:
    """Record course progress. Reaching 100 marks the enrollment completed."""
    repo = EnrollmentRepository(db)
    enrollment = repo.get_by_id(enrollment_id)
    if not enrollment:
        raise HTTPException(status_code=404, detail="Enrollment not found")
    if not _can_manage(user, enrollment, db):
        raise HTTPException(status_code=403, detail="Not authorized to update this enrollment")
    return repo.update_progress(enrollment_id, data)  # type: ignore[return-value]
