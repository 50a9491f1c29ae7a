"""API tests for users, courses, enrollments and audit logs."""

from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from lms.main import app
from lms.models.course import CourseCategory
from lms.models.user import UserRole
from tests.factories import auth, make_course, make_enrollment, make_user


@pytest.fixture
def client():  # type: ignore[no-untyped-def]
    """Create test client."""
    return TestClient(app)


class TestRoot:
    def test_root(self, client) -> None:  # type: ignore[no-untyped-def]
        response = client.get("/")
        assert response.status_code == 200


class TestUsers:
    def test_create_user(self, client) -> None:  # type: ignore[no-untyped-def]
        response = client.post(
            "/v1/users/",
            json={
                "username": "ada",
                "email": "Ada@Example.com",
                "first_name": "Ada",
                "last_name": "Lovelace",
            },
        )
        assert response.status_code == 201
        data = response.json()
        assert data["role"] == "student"
        assert data["email"] == "ada@example.com"
        assert data["display_name"] == "Ada Lovelace"

    def test_duplicate_user(self, client) -> None:  # type: ignore[no-untyped-def]
        body = {"username": "ada", "email": "ada@example.com"}
        assert client.post("/v1/users/", json=body).status_code == 201
        duplicate = client.post("/v1/users/", json={**body, "username": "other"})
        assert duplicate.status_code == 409

    def test_invalid_email(self, client) -> None:  # type: ignore[no-untyped-def]
        response = client.post("/v1/users/", json={"username": "ada", "email": "not-an-email"})
        assert response.status_code == 422

    def test_read_self_only(self, client, db_session) -> None:  # type: ignore[no-untyped-def]
        student = make_user(db_session)
        other = make_user(db_session)
        admin = make_user(db_session, UserRole.ADMIN)

        assert client.get(f"/v1/users/{student.id}", headers=auth(student)).status_code == 200
        assert client.get(f"/v1/users/{other.id}", headers=auth(student)).status_code == 403
        assert client.get(f"/v1/users/{other.id}", headers=auth(admin)).status_code == 200
        assert client.get(f"/v1/users/{uuid4()}", headers=auth(admin)).status_code == 404

    def test_malformed_user_header(self, client) -> None:  # type: ignore[no-untyped-def]
        response = client.get(f"/v1/users/{uuid4()}", headers={"X-User-Id": "not-a-uuid"})
        assert response.status_code == 401


class TestCourses:
    def test_instructor_creates_course(self, client, db_session) -> None:  # type: ignore[no-untyped-def]
        instructor = make_user(db_session, UserRole.INSTRUCTOR)
        response = client.post(
            "/v1/courses/",
            json={"title": "Design Basics", "category": "design", "total_lessons": 5},
            headers=auth(instructor),
        )
        assert response.status_code == 201
        assert response.json()["instructor_id"] == str(instructor.id)
        assert response.json()["category"] == "design"

    def test_student_cannot_create_course(self, client, db_session) -> None:  # type: ignore[no-untyped-def]
        student = make_user(db_session)
        response = client.post(
            "/v1/courses/", json={"title": "X", "category": "design"}, headers=auth(student)
        )
        assert response.status_code == 403

    def test_instructor_cannot_assign_another(self, client, db_session) -> None:  # type: ignore[no-untyped-def]
        instructor = make_user(db_session, UserRole.INSTRUCTOR)
        other = make_user(db_session, UserRole.INSTRUCTOR)
        response = client.post(
            "/v1/courses/",
            json={"title": "X", "category": "design", "instructor_id": str(other.id)},
            headers=auth(instructor),
        )
        assert response.status_code == 403

    def test_admin_assigns_instructor(self, client, db_session) -> None:  # type: ignore[no-untyped-def]
        admin = make_user(db_session, UserRole.ADMIN)
        instructor = make_user(db_session, UserRole.INSTRUCTOR)
        student = make_user(db_session)
        body = {"title": "X", "category": "music", "instructor_id": str(instructor.id)}

        assert client.post("/v1/courses/", json=body, headers=auth(admin)).status_code == 201
        body["instructor_id"] = str(student.id)
        assert client.post("/v1/courses/", json=body, headers=auth(admin)).status_code == 404

    def test_list_and_get(self, client, db_session) -> None:  # type: ignore[no-untyped-def]
        instructor = make_user(db_session, UserRole.INSTRUCTOR)
        design = make_course(db_session, instructor, title="Design")
        make_course(db_session, instructor, title="Music", category=CourseCategory.MUSIC)

        response = client.get("/v1/courses/?category=music", headers=auth(instructor))
        assert response.status_code == 200
        assert response.headers["X-Total-Count"] == "1"
        assert response.json()[0]["title"] == "Music"

        single = client.get(f"/v1/courses/{design.id}", headers=auth(instructor))
        assert single.json()["title"] == "Design"
        missing = client.get(f"/v1/courses/{uuid4()}", headers=auth(instructor))
        assert missing.status_code == 404


class TestEnrollments:
    @pytest.fixture
    def course(self, db_session):  # type: ignore[no-untyped-def]
        return make_course(db_session, make_user(db_session, UserRole.INSTRUCTOR))

    def test_enroll_and_complete(self, client, db_session, course) -> None:  # type: ignore[no-untyped-def]
        student = make_user(db_session)
        created = client.post(
            "/v1/enrollments/", json={"course_id": str(course.id)}, headers=auth(student)
        )
        assert created.status_code == 201
        enrollment_id = created.json()["id"]
        assert created.json()["progress"] == 0

        progress = client.put(
            f"/v1/enrollments/{enrollment_id}/progress",
            json={"progress": 100, "completed_lessons_count": 12, "average_score": "87"},
            headers=auth(student),
        )
        assert progress.status_code == 200
        assert progress.json()["progress"] == 100
        assert progress.json()["completed_at"] is not None

    def test_progress_below_100_clears_completion(self, client, db_session, course) -> None:  # type: ignore[no-untyped-def]
        student = make_user(db_session)
        enrollment = make_enrollment(db_session, student, course, progress=100)
        response = client.put(
            f"/v1/enrollments/{enrollment.id}/progress",
            json={"progress": 80},
            headers=auth(student),
        )
        assert response.json()["completed_at"] is None

    def test_null_lesson_count_is_ignored(self, client, db_session, course) -> None:  # type: ignore[no-untyped-def]
        student = make_user(db_session)
        enrollment = make_enrollment(db_session, student, course)
        response = client.put(
            f"/v1/enrollments/{enrollment.id}/progress",
            json={"progress": 50, "completed_lessons_count": None, "time_spent_minutes": None},
            headers=auth(student),
        )
        assert response.status_code == 200
        assert response.json()["progress"] == 50
        assert response.json()["completed_lessons_count"] == 1
        assert response.json()["time_spent_minutes"] == 120

    def test_duplicate_enrollment(self, client, db_session, course) -> None:  # type: ignore[no-untyped-def]
        student = make_user(db_session)
        make_enrollment(db_session, student, course)
        response = client.post(
            "/v1/enrollments/", json={"course_id": str(course.id)}, headers=auth(student)
        )
        assert response.status_code == 409

    def test_cannot_enroll_others(self, client, db_session, course) -> None:  # type: ignore[no-untyped-def]
        student = make_user(db_session)
        other = make_user(db_session)
        response = client.post(
            "/v1/enrollments/",
            json={"course_id": str(course.id), "student_id": str(other.id)},
            headers=auth(student),
        )
        assert response.status_code == 403

    def test_unknown_course(self, client, db_session) -> None:  # type: ignore[no-untyped-def]
        student = make_user(db_session)
        response = client.post(
            "/v1/enrollments/", json={"course_id": str(uuid4())}, headers=auth(student)
        )
        assert response.status_code == 404

    def test_visibility(self, client, db_session, course) -> None:  # type: ignore[no-untyped-def]
        student = make_user(db_session)
        enrollment = make_enrollment(db_session, student, course)
        instructor = course.instructor_id
        other = make_user(db_session)

        path = f"/v1/enrollments/{enrollment.id}"
        assert client.get(path, headers=auth(student)).status_code == 200
        assert client.get(path, headers={"X-User-Id": str(instructor)}).status_code == 200
        assert client.get(path, headers=auth(other)).status_code == 403
        assert client.get(f"/v1/enrollments/{uuid4()}", headers=auth(other)).status_code == 404


class TestAuditLogs:
    def test_coupon_audit_trail(self, client, db_session) -> None:  # type: ignore[no-untyped-def]
        admin = make_user(db_session, UserRole.ADMIN)
        created = client.post(
            "/v1/coupons/",
            json={
                "code": "AUDIT1",
                "description": "Audited",
                "coupon_type": "fixed_amount",
                "value": "100",
                "end_at": "2099-01-01T00:00:00Z",
            },
            headers=auth(admin),
        )
        coupon_id = created.json()["id"]
        client.put("/v1/coupons/AUDIT1/toggle_status", headers=auth(admin))

        response = client.get(f"/v1/audit_logs/coupon/{coupon_id}", headers=auth(admin))
        assert response.status_code == 200
        actions = [log["action"] for log in response.json()]
        assert "status_changed" in actions

    def test_requires_admin(self, client, db_session) -> None:  # type: ignore[no-untyped-def]
        student = make_user(db_session)
        response = client.get(f"/v1/audit_logs/coupon/{uuid4()}", headers=auth(student))
        assert response.status_code == 403

    def test_coupon_update_is_audited(self, client, db_session) -> None:  # type: ignore[no-untyped-def]
        admin = make_user(db_session, UserRole.ADMIN)
        created = client.post(
            "/v1/coupons/",
            json={
                "code": "AUDIT2",
                "description": "Before",
                "coupon_type": "fixed_amount",
                "value": "100",
                "end_at": "2099-01-01T00:00:00Z",
            },
            headers=auth(admin),
        )
        coupon_id = created.json()["id"]
        client.put("/v1/coupons/AUDIT2", json={"description": "After"}, headers=auth(admin))

        response = client.get(f"/v1/audit_logs/coupon/{coupon_id}", headers=auth(admin))
        assert response.headers["X-Total-Count"] == "1"
        updated = [log for log in response.json() if log["action"] == "updated"]
        assert updated[0]["changes"] == {"description": {"old": "Before", "new": "After"}}

    def test_unknown_resource_type(self, client, db_session) -> None:  # type: ignore[no-untyped-def]
        admin = make_user(db_session, UserRole.ADMIN)
        response = client.get(f"/v1/audit_logs/invoice/{uuid4()}", headers=auth(admin))
        assert response.status_code == 422
