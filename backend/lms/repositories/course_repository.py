"""Course repository for data access."""

from uuid import UUID

from sqlalchemy.orm import Query, Session

from lms.core.sorting import apply_sort
from lms.domain.certificate import CourseSnapshot
from lms.models.course import Course
from lms.schemas.course import CourseCreate


class CourseRepository:
    """Repository for Course model."""

    def __init__(self, db: Session):
        self.db = db

    def _filtered(
        self, category: str | None = None, instructor_id: UUID | None = None
    ) -> Query:  # type: ignore[type-arg]
        query = self.db.query(Course)
        if category:
            query = query.filter(Course.category == category)
        if instructor_id:
            query = query.filter(Course.instructor_id == instructor_id)
        return query

    def get_all(
        self,
        skip: int = 0,
        limit: int = 100,
        category: str | None = None,
        instructor_id: UUID | None = None,
        order_by: str | None = None,
    ) -> list[Course]:
        query = apply_sort(self._filtered(category, instructor_id), Course, order_by)
        return query.offset(skip).limit(limit).all()

    def count(self, category: str | None = None, instructor_id: UUID | None = None) -> int:
        return self._filtered(category, instructor_id).count()

    def get_by_id(self, course_id: UUID) -> Course | None:
        return self.db.query(Course).filter(Course.id == course_id).first()

    def create(self, data: CourseCreate, instructor_id: UUID) -> Course:
        course = Course(
            title=data.title,
            description=data.description,
            category=data.category.value,
            instructor_id=instructor_id,
            price_cents=data.price_cents,
            currency=data.currency.upper(),
            duration_minutes=data.duration_minutes,
            total_lessons=data.total_lessons,
        )
        self.db.add(course)
        self.db.commit()
        self.db.refresh(course)
        return course

    def get_course(self, course_id: UUID) -> CourseSnapshot | None:
        course = self.get_by_id(course_id)
        if not course:
            return None
        return CourseSnapshot(
            course_id=course.id,  # type: ignore[arg-type]
            title=str(course.title),
            instructor_id=course.instructor_id,  # type: ignore[arg-type]
            category=course.category,  # type: ignore[arg-type]
            total_lessons=course.total_lessons or 0,  # type: ignore[arg-type]
            duration_minutes=course.duration_minutes or 0,  # type: ignore[arg-type]
        )
