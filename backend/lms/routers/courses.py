"""Course API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from lms.core.auth import get_current_user, is_admin, require_instructor_or_admin
from lms.core.database import get_db
from lms.models.course import Course, CourseCategory
from lms.models.user import User, UserRole
from lms.repositories.course_repository import CourseRepository
from lms.repositories.user_repository import UserRepository
from lms.schemas.course import CourseCreate, CourseResponse

router = APIRouter()


@router.post(
    "/",
    response_model=CourseResponse,
    status_code=201,
    summary="Create course",
    responses={
        401: {"description": "Unauthorized"},
        403: {"description": "Instructor or admin access required"},
        404: {"description": "Instructor not found"},
    },
)
async def create_course(
    data: CourseCreate,
    db: Session = Depends(get_db),
    user: User = Depends(require_instructor_or_admin),
) -> Course:
    """Create a course. Admins may assign another instructor."""
    instructor_id = data.instructor_id or user.id
    if instructor_id != user.id:
        if not is_admin(user):
            raise HTTPException(status_code=403, detail="Cannot create courses for others")
        instructor = UserRepository(db).get_by_id(instructor_id)  # type: ignore[arg-type]
        if not instructor or instructor.role == UserRole.STUDENT.value:
            raise HTTPException(status_code=404, detail="Instructor not found")
    return CourseRepository(db).create(data, instructor_id=instructor_id)  # type: ignore[arg-type]


@router.get(
    "/",
    response_model=list[CourseResponse],
    summary="List courses",
    responses={401: {"description": "Unauthorized"}},
)
async def list_courses(
    response: Response,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    order_by: str | None = Query(default=None),
    category: CourseCategory | None = None,
    instructor_id: UUID | None = None,
    db: Session = Depends(get_db),
    _user: User = Depends(get_current_user),
) -> list[Course]:
    repo = CourseRepository(db)
    category_value = category.value if category else None
    response.headers["X-Total-Count"] = str(
        repo.count(category=category_value, instructor_id=instructor_id)
    )
    return repo.get_all(
        skip=skip,
        limit=limit,
        category=category_value,
        instructor_id=instructor_id,
        order_by=order_by,
    )


@router.get(
    "/{course_id}",
    response_model=CourseResponse,
    summary="Get course",
    responses={401: {"description": "Unauthorized"}, 404: {"description": "Course not found"}},
)
async def get_course(
    course_id: UUID,
    db: Session = Depends(get_db),
    _user: User = Depends(get_current_user),
) -> Course:
    course = CourseRepository(db).get_by_id(course_id)
    if not course:
        raise HTTPException(status_code=404, detail="Course not found")
    return course
