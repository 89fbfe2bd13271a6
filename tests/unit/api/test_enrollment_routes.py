"""Unit tests for enrollment routes."""

import pytest
from fastapi.testclient import TestClient

from academia.store import AcademiaStore


def _enroll(client: TestClient, offering_id: str, student_id: str = "stu-1"):
    return client.post(
        "/api/v1/enrollments", json={"student_id": student_id, "offering_id": offering_id}
    )


@pytest.mark.unit
class TestEnroll:
    """Tests for POST /enrollments."""

    def test_enroll(self, client: TestClient, make_offering) -> None:
        offering = make_offering()

        response = _enroll(client, offering.id)

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["status"] == "enrolled"
        assert data["final_grade"] is None
        assert data["grade_label"] == "ungraded"
        assert data["progress"] == 0

    def test_enroll_full_offering(self, client: TestClient, make_offering) -> None:
        offering = make_offering(max_seats=1)
        _enroll(client, offering.id, "stu-1")

        response = _enroll(client, offering.id, "stu-2")

        assert response.status_code == 409
        assert response.json()["details"] == {
            "kind": "capacity_exceeded",
            "offering_id": offering.id,
        }

    def test_enroll_duplicate(self, client: TestClient, make_offering) -> None:
        offering = make_offering()
        _enroll(client, offering.id)

        response = _enroll(client, offering.id)

        assert response.status_code == 409
        assert response.json()["details"]["kind"] == "duplicate_enrollment"

    def test_enroll_missing_offering(self, client: TestClient) -> None:
        response = _enroll(client, "missing")

        assert response.status_code == 404

    def test_enroll_inactive_offering(
        self, client: TestClient, store: AcademiaStore, make_offering
    ) -> None:
        offering = make_offering()
        store.deactivate_offering(offering.id)

        response = _enroll(client, offering.id)

        assert response.status_code == 422
        assert response.json()["details"]["field"] == "offering_id"


@pytest.mark.unit
class TestGetEnrollment:
    """Tests for GET /enrollments/{id}."""

    def test_get(self, client: TestClient, make_offering) -> None:
        created = _enroll(client, make_offering().id).json()["data"]

        response = client.get(f"/api/v1/enrollments/{created['id']}")

        assert response.status_code == 200
        assert response.json()["data"]["student_id"] == "stu-1"

    def test_get_not_found(self, client: TestClient) -> None:
        response = client.get("/api/v1/enrollments/missing")

        assert response.status_code == 404
        assert response.json()["details"]["resource"] == "enrollment"


@pytest.mark.unit
class TestScores:
    """Tests for score recording routes."""

    @pytest.fixture
    def enrollment_id(self, client: TestClient, make_offering) -> str:
        created = _enroll(client, make_offering().id).json()["data"]
        client.post(f"/api/v1/enrollments/{created['id']}/start")
        return created["id"]

    def test_put_single_score(self, client: TestClient, enrollment_id: str) -> None:
        response = client.put(
            f"/api/v1/enrollments/{enrollment_id}/scores/final", json={"value": 70}
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["final"] == 70.0
        assert data["final_grade"] == 70.0
        assert data["status"] == "approved"
        assert data["grade_label"] == "good"
        assert data["progress"] == 20

    def test_put_failing_score(self, client: TestClient, enrollment_id: str) -> None:
        response = client.put(
            f"/api/v1/enrollments/{enrollment_id}/scores/final", json={"value": 69.99}
        )

        assert response.json()["data"]["status"] == "failed"

    def test_put_clears_score(self, client: TestClient, enrollment_id: str) -> None:
        client.put(f"/api/v1/enrollments/{enrollment_id}/scores/midterm1", json={"value": 50})

        response = client.put(
            f"/api/v1/enrollments/{enrollment_id}/scores/midterm1", json={"value": None}
        )

        assert response.status_code == 200
        assert response.json()["data"]["midterm1"] is None
        assert response.json()["data"]["final_grade"] is None

    def test_put_unknown_component(self, client: TestClient, enrollment_id: str) -> None:
        response = client.put(
            f"/api/v1/enrollments/{enrollment_id}/scores/quiz", json={"value": 50}
        )

        assert response.status_code == 422

    def test_put_out_of_range(self, client: TestClient, enrollment_id: str) -> None:
        response = client.put(
            f"/api/v1/enrollments/{enrollment_id}/scores/final", json={"value": 100.5}
        )

        assert response.status_code == 422

    def test_patch_several_scores(self, client: TestClient, enrollment_id: str) -> None:
        response = client.patch(
            f"/api/v1/enrollments/{enrollment_id}/scores",
            json={"midterm1": 70, "final": 71},
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["final_grade"] == 70.55
        assert data["midterm2"] is None

    def test_patch_only_touches_sent_components(
        self, client: TestClient, enrollment_id: str
    ) -> None:
        client.patch(f"/api/v1/enrollments/{enrollment_id}/scores", json={"coursework": 80})

        response = client.patch(
            f"/api/v1/enrollments/{enrollment_id}/scores", json={"participation": 100}
        )

        data = response.json()["data"]
        assert data["coursework"] == 80.0
        assert data["participation"] == 100.0

    def test_score_missing_enrollment(self, client: TestClient) -> None:
        response = client.put("/api/v1/enrollments/missing/scores/final", json={"value": 80})

        assert response.status_code == 404


@pytest.mark.unit
class TestTransitions:
    """Tests for start and withdraw routes."""

    def test_start(self, client: TestClient, make_offering) -> None:
        created = _enroll(client, make_offering().id).json()["data"]

        response = client.post(f"/api/v1/enrollments/{created['id']}/start")

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "in-progress"

    def test_withdraw(self, client: TestClient, store: AcademiaStore, make_offering) -> None:
        offering = make_offering()
        created = _enroll(client, offering.id).json()["data"]

        response = client.post(f"/api/v1/enrollments/{created['id']}/withdraw")

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "withdrawn"
        assert store.get_offering(offering.id).enrolled_count == 0

    def test_withdraw_approved_conflict(
        self, client: TestClient, store: AcademiaStore, make_offering
    ) -> None:
        offering = make_offering()
        created = _enroll(client, offering.id).json()["data"]
        client.put(f"/api/v1/enrollments/{created['id']}/scores/final", json={"value": 95})

        response = client.post(f"/api/v1/enrollments/{created['id']}/withdraw")

        assert response.status_code == 409
        details = response.json()["details"]
        assert details["kind"] == "invalid_transition"
        assert details["status"] == "approved"
        assert details["event"] == "withdraw"
        assert store.get_offering(offering.id).enrolled_count == 1


@pytest.mark.unit
class TestEnrollmentStatsRoute:
    """Tests for GET /enrollments/stats."""

    def test_stats(self, client: TestClient, make_offering) -> None:
        offering = make_offering()
        first = _enroll(client, offering.id, "stu-1").json()["data"]
        _enroll(client, offering.id, "stu-2")
        client.put(f"/api/v1/enrollments/{first['id']}/scores/final", json={"value": 90})

        response = client.get(f"/api/v1/enrollments/stats?offering_id={offering.id}")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["total"] == 2
        assert data["by_status"]["approved"] == {
            "count": 1,
            "percentage": 50,
            "average_grade": 90.0,
        }
        assert data["by_status"]["enrolled"]["average_grade"] is None
