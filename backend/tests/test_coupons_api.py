"""API tests for the coupon endpoints."""

from datetime import timedelta
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from lms.main import app
from lms.models.shared import utc_now
from lms.models.user import UserRole
from tests.factories import auth, make_course, make_user


@pytest.fixture
def client():  # type: ignore[no-untyped-def]
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def admin(db_session):  # type: ignore[no-untyped-def]
    return make_user(db_session, UserRole.ADMIN)


@pytest.fixture
def student(db_session):  # type: ignore[no-untyped-def]
    return make_user(db_session, UserRole.STUDENT)


@pytest.fixture
def course(db_session):  # type: ignore[no-untyped-def]
    return make_course(db_session, make_user(db_session, UserRole.INSTRUCTOR))


def _payload(**overrides):  # type: ignore[no-untyped-def]
    payload = {
        "code": "save10",
        "description": "Ten percent off",
        "coupon_type": "percentage",
        "value": "10",
        "maximum_discount_cents": 500,
        "end_at": (utc_now() + timedelta(days=30)).isoformat(),
    }
    payload.update(overrides)
    return payload


def _create(client, admin, **overrides):  # type: ignore[no-untyped-def]
    response = client.post("/v1/coupons/", json=_payload(**overrides), headers=auth(admin))
    assert response.status_code == 201, response.text
    return response.json()


class TestCouponAdmin:
    def test_create_normalizes_code(self, client, admin) -> None:  # type: ignore[no-untyped-def]
        data = _create(client, admin)
        assert data["code"] == "SAVE10"
        assert data["used_count"] == 0
        assert data["created_by"] == str(admin.id)

    def test_create_requires_auth(self, client) -> None:  # type: ignore[no-untyped-def]
        assert client.post("/v1/coupons/", json=_payload()).status_code == 401

    def test_create_requires_admin(self, client, student) -> None:  # type: ignore[no-untyped-def]
        response = client.post("/v1/coupons/", json=_payload(), headers=auth(student))
        assert response.status_code == 403

    def test_create_duplicate(self, client, admin) -> None:  # type: ignore[no-untyped-def]
        _create(client, admin)
        response = client.post(
            "/v1/coupons/", json=_payload(code="SAVE10"), headers=auth(admin)
        )
        assert response.status_code == 409

    def test_create_rejects_percentage_over_100(self, client, admin) -> None:  # type: ignore[no-untyped-def]
        response = client.post("/v1/coupons/", json=_payload(value="150"), headers=auth(admin))
        assert response.status_code == 422

    def test_create_rejects_missing_scope_list(self, client, admin) -> None:  # type: ignore[no-untyped-def]
        response = client.post(
            "/v1/coupons/",
            json=_payload(applicable_to="specific_courses"),
            headers=auth(admin),
        )
        assert response.status_code == 422

    def test_list_with_total_count(self, client, admin) -> None:  # type: ignore[no-untyped-def]
        _create(client, admin, code="ONE")
        _create(client, admin, code="TWO", coupon_type="fixed_amount", value="500")

        response = client.get("/v1/coupons/", headers=auth(admin))
        assert response.status_code == 200
        assert response.headers["X-Total-Count"] == "2"

        fixed = client.get("/v1/coupons/?coupon_type=fixed_amount", headers=auth(admin))
        assert [c["code"] for c in fixed.json()] == ["TWO"]

    def test_get_update_delete(self, client, admin) -> None:  # type: ignore[no-untyped-def]
        _create(client, admin)
        assert client.get("/v1/coupons/save10", headers=auth(admin)).status_code == 200

        updated = client.put(
            "/v1/coupons/SAVE10", json={"description": "Updated"}, headers=auth(admin)
        )
        assert updated.status_code == 200
        assert updated.json()["description"] == "Updated"

        assert client.delete("/v1/coupons/SAVE10", headers=auth(admin)).status_code == 204
        assert client.get("/v1/coupons/SAVE10", headers=auth(admin)).status_code == 404

    def test_update_invalid_value(self, client, admin) -> None:  # type: ignore[no-untyped-def]
        _create(client, admin)
        response = client.put("/v1/coupons/SAVE10", json={"value": "101"}, headers=auth(admin))
        assert response.status_code == 422

    def test_missing_coupon(self, client, admin) -> None:  # type: ignore[no-untyped-def]
        assert client.get("/v1/coupons/NOPE", headers=auth(admin)).status_code == 404
        assert client.put("/v1/coupons/NOPE", json={}, headers=auth(admin)).status_code == 404
        assert client.delete("/v1/coupons/NOPE", headers=auth(admin)).status_code == 404

    def test_toggle_status(self, client, admin) -> None:  # type: ignore[no-untyped-def]
        _create(client, admin)
        response = client.put("/v1/coupons/SAVE10/toggle_status", headers=auth(admin))
        assert response.status_code == 200
        assert response.json()["is_active"] is False


class TestCouponRedemption:
    def test_validate(self, client, admin, student, course) -> None:  # type: ignore[no-untyped-def]
        _create(client, admin)
        response = client.post(
            "/v1/coupons/validate",
            json={"code": "save10", "course_id": str(course.id), "course_amount_cents": 3000},
            headers=auth(student),
        )
        assert response.status_code == 200
        data = response.json()
        assert data["valid"] is True
        assert data["message"] == "Coupon is valid"
        assert data["discount_amount_cents"] == 300
        assert data["final_amount_cents"] == 2700
        assert data["savings_cents"] == 300
        assert data["coupon"]["code"] == "SAVE10"
        assert data["coupon"]["description"] == "Ten percent off"

    def test_validate_unknown_code(self, client, student) -> None:  # type: ignore[no-untyped-def]
        response = client.post(
            "/v1/coupons/validate", json={"code": "NOPE"}, headers=auth(student)
        )
        assert response.status_code == 404
        assert response.json()["detail"] == "Invalid coupon code"

    def test_short_code_is_unknown(self, client, student, course) -> None:  # type: ignore[no-untyped-def]
        validate = client.post(
            "/v1/coupons/validate", json={"code": "AB"}, headers=auth(student)
        )
        assert validate.status_code == 404
        assert validate.json()["detail"] == "Invalid coupon code"

        applied = client.post(
            "/v1/coupons/apply",
            json={
                "code": "AB",
                "course_id": str(course.id),
                "order_amount_cents": 3000,
                "order_id": "order-1",
            },
            headers=auth(student),
        )
        assert applied.status_code == 404
        assert applied.json()["detail"] == "Invalid coupon code"

    def test_validate_inactive(self, client, admin, student) -> None:  # type: ignore[no-untyped-def]
        _create(client, admin, is_active=False)
        response = client.post(
            "/v1/coupons/validate", json={"code": "SAVE10"}, headers=auth(student)
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Coupon is inactive"

    def test_validate_wrong_course(self, client, admin, student, course) -> None:  # type: ignore[no-untyped-def]
        _create(client, admin, applicable_to="specific_courses", course_ids=[str(uuid4())])
        response = client.post(
            "/v1/coupons/validate",
            json={"code": "SAVE10", "course_id": str(course.id), "course_amount_cents": 1000},
            headers=auth(student),
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Coupon not applicable to this course"

    def test_apply_then_limit(self, client, admin, student, course) -> None:  # type: ignore[no-untyped-def]
        _create(client, admin)
        body = {
            "code": "SAVE10",
            "course_id": str(course.id),
            "order_amount_cents": 10000,
            "order_id": "order-1",
        }
        first = client.post("/v1/coupons/apply", json=body, headers=auth(student))
        assert first.status_code == 200
        assert first.json()["discount_amount_cents"] == 500
        assert first.json()["final_amount_cents"] == 9500
        assert first.json()["used_count"] == 1

        second = client.post(
            "/v1/coupons/apply", json={**body, "order_id": "order-2"}, headers=auth(student)
        )
        assert second.status_code == 400
        assert second.json()["detail"] == "Coupon usage limit per user reached"

    def test_redemptions_analytics_and_delete_guard(self, client, admin, student, course) -> None:  # type: ignore[no-untyped-def]
        _create(client, admin)
        client.post(
            "/v1/coupons/apply",
            json={
                "code": "SAVE10",
                "course_id": str(course.id),
                "order_amount_cents": 2000,
                "order_id": "order-1",
            },
            headers=auth(student),
        )

        redemptions = client.get("/v1/coupons/SAVE10/redemptions", headers=auth(admin))
        assert redemptions.status_code == 200
        assert redemptions.headers["X-Total-Count"] == "1"
        assert redemptions.json()[0]["user_id"] == str(student.id)
        assert redemptions.json()[0]["order_id"] == "order-1"

        analytics = client.get("/v1/coupons/SAVE10/analytics", headers=auth(admin)).json()
        assert analytics["times_redeemed"] == 1
        assert analytics["unique_users"] == 1
        assert analytics["total_discount_cents"] == 200
        assert analytics["remaining_uses"] is None

        assert client.delete("/v1/coupons/SAVE10", headers=auth(admin)).status_code == 409

    def test_apply_requires_auth(self, client) -> None:  # type: ignore[no-untyped-def]
        response = client.post(
            "/v1/coupons/apply",
            json={
                "code": "SAVE10",
                "course_id": str(uuid4()),
                "order_amount_cents": 100,
                "order_id": "o",
            },
        )
        assert response.status_code == 401
