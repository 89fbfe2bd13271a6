"""Per-student enrollment and grade endpoints."""

from fastapi import APIRouter, Query

from academia.api.dependencies import EnrollmentServiceDep
from academia.api.models import (
    APIResponse,
    EnrollmentResponse,
    StudentGradeStatsResponse,
    enrollment_to_response,
)
from academia.lifecycle import ACTIVE_STATUSES, EnrollmentStatus

router = APIRouter(prefix="/students", tags=["students"])


@router.get("/{student_id}/enrollments", response_model=APIResponse[list[EnrollmentResponse]])
def list_student_enrollments(
    student_id: str,
    service: EnrollmentServiceDep,
    active: bool = Query(default=False, description="Only enrolled/in-progress enrollments"),
    enrollment_status: EnrollmentStatus | None = Query(
        default=None, alias="status", description="Filter by status"
    ),
) -> APIResponse[list[EnrollmentResponse]]:
    """List a student's enrollments, most recent first."""
    statuses: set[EnrollmentStatus] | None = None
    if active:
        statuses = set(ACTIVE_STATUSES)
    if enrollment_status is not None:
        statuses = {enrollment_status} if statuses is None else statuses & {enrollment_status}

    enrollments = service.list_enrollments(student_id=student_id, statuses=statuses)
    return APIResponse(data=[enrollment_to_response(e) for e in enrollments])


@router.get("/{student_id}/grades", response_model=APIResponse[StudentGradeStatsResponse])
def get_student_grades(
    student_id: str, service: EnrollmentServiceDep
) -> APIResponse[StudentGradeStatsResponse]:
    """Get a student's grade summary across offerings."""
    stats = service.get_student_grade_stats(student_id)
    return APIResponse(data=StudentGradeStatsResponse.model_validate(stats))
