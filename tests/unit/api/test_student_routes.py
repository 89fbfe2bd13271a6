"""Unit tests for student routes."""

import pytest
from fastapi.testclient import TestClient

from academia.store import AcademiaStore


@pytest.fixture
def enrollments(store: AcademiaStore, make_offering) -> dict[str, str]:
    """Enroll stu-1 in three offerings: approved, in progress and withdrawn."""
    approved = store.create_enrollment(make_offering(name="A").id, "stu-1")
    store.update_scores(approved.id, {"final": 88})
    ongoing = store.create_enrollment(make_offering(name="B").id, "stu-1")
    store.start_enrollment(ongoing.id)
    withdrawn = store.create_enrollment(make_offering(name="C").id, "stu-1")
    store.withdraw_enrollment(withdrawn.id)
    return {"approved": approved.id, "ongoing": ongoing.id, "withdrawn": withdrawn.id}


@pytest.mark.unit
class TestStudentEnrollments:
    """Tests for GET /students/{id}/enrollments."""

    def test_list_all(self, client: TestClient, enrollments: dict[str, str]) -> None:
        response = client.get("/api/v1/students/stu-1/enrollments")

        assert response.status_code == 200
        ids = [e["id"] for e in response.json()["data"]]
        # Most recent first
        assert ids == [enrollments["withdrawn"], enrollments["ongoing"], enrollments["approved"]]

    def test_list_active(self, client: TestClient, enrollments: dict[str, str]) -> None:
        data = client.get("/api/v1/students/stu-1/enrollments?active=true").json()["data"]

        assert [e["id"] for e in data] == [enrollments["ongoing"]]

    def test_list_by_status(self, client: TestClient, enrollments: dict[str, str]) -> None:
        data = client.get("/api/v1/students/stu-1/enrollments?status=approved").json()["data"]

        assert [e["id"] for e in data] == [enrollments["approved"]]

    def test_active_and_terminal_status_is_empty(
        self, client: TestClient, enrollments: dict[str, str]
    ) -> None:
        data = client.get(
            "/api/v1/students/stu-1/enrollments?active=true&status=approved"
        ).json()["data"]

        assert data == []

    def test_invalid_status(self, client: TestClient) -> None:
        response = client.get("/api/v1/students/stu-1/enrollments?status=graduated")

        assert response.status_code == 422

    def test_unknown_student(self, client: TestClient) -> None:
        response = client.get("/api/v1/students/nobody/enrollments")

        assert response.status_code == 200
        assert response.json()["data"] == []


@pytest.mark.unit
class TestStudentGrades:
    """Tests for GET /students/{id}/grades."""

    def test_grades(self, client: TestClient, enrollments: dict[str, str]) -> None:
        response = client.get("/api/v1/students/stu-1/grades")

        assert response.status_code == 200
        assert response.json()["data"] == {
            "student_id": "stu-1",
            "total_courses": 3,
            "approved": 1,
            "failed": 0,
            "average_grade": 88.0,
            "highest_grade": 88.0,
            "lowest_grade": 88.0,
        }
