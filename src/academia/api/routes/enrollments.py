"""Enrollment endpoints."""

from fastapi import APIRouter, Query, status

from academia.api.dependencies import EnrollmentServiceDep
from academia.api.models import (
    APIResponse,
    EnrollmentCreate,
    EnrollmentResponse,
    EnrollmentStatsResponse,
    ScoresUpdate,
    ScoreUpdate,
    enrollment_to_response,
)
from academia.grading import ScoreComponent

router = APIRouter(prefix="/enrollments", tags=["enrollments"])


@router.post(
    "",
    response_model=APIResponse[EnrollmentResponse],
    status_code=status.HTTP_201_CREATED,
)
def enroll(
    request: EnrollmentCreate, service: EnrollmentServiceDep
) -> APIResponse[EnrollmentResponse]:
    """Enroll a student in an offering."""
    enrollment = service.enroll(request.student_id, request.offering_id)
    return APIResponse(data=enrollment_to_response(enrollment))


@router.get("/stats", response_model=APIResponse[EnrollmentStatsResponse])
def get_enrollment_stats(
    service: EnrollmentServiceDep,
    offering_id: str | None = Query(default=None, description="Filter by offering ID"),
) -> APIResponse[EnrollmentStatsResponse]:
    """Get enrollment counts and average grade per status."""
    stats = service.get_enrollment_stats(offering_id=offering_id)
    return APIResponse(data=EnrollmentStatsResponse.model_validate(stats))


@router.get("/{enrollment_id}", response_model=APIResponse[EnrollmentResponse])
def get_enrollment(
    enrollment_id: str, service: EnrollmentServiceDep
) -> APIResponse[EnrollmentResponse]:
    """Get an enrollment by ID."""
    enrollment = service.get_enrollment(enrollment_id)
    return APIResponse(data=enrollment_to_response(enrollment))


@router.put(
    "/{enrollment_id}/scores/{component}",
    response_model=APIResponse[EnrollmentResponse],
)
def record_score(
    enrollment_id: str,
    component: ScoreComponent,
    score: ScoreUpdate,
    service: EnrollmentServiceDep,
) -> APIResponse[EnrollmentResponse]:
    """Record one component score."""
    enrollment = service.record_score(enrollment_id, component.value, score.value)
    return APIResponse(data=enrollment_to_response(enrollment))


@router.patch("/{enrollment_id}/scores", response_model=APIResponse[EnrollmentResponse])
def record_scores(
    enrollment_id: str, scores: ScoresUpdate, service: EnrollmentServiceDep
) -> APIResponse[EnrollmentResponse]:
    """Record the component scores present in the request body."""
    enrollment = service.record_scores(enrollment_id, scores.model_dump(exclude_unset=True))
    return APIResponse(data=enrollment_to_response(enrollment))


@router.post("/{enrollment_id}/start", response_model=APIResponse[EnrollmentResponse])
def start_enrollment(
    enrollment_id: str, service: EnrollmentServiceDep
) -> APIResponse[EnrollmentResponse]:
    """Mark an enrollment as in progress."""
    enrollment = service.start(enrollment_id)
    return APIResponse(data=enrollment_to_response(enrollment))


@router.post("/{enrollment_id}/withdraw", response_model=APIResponse[EnrollmentResponse])
def withdraw(enrollment_id: str, service: EnrollmentServiceDep) -> APIResponse[EnrollmentResponse]:
    """Withdraw an enrollment and release its seat."""
    enrollment = service.withdraw(enrollment_id)
    return APIResponse(data=enrollment_to_response(enrollment))
