"""Pydantic models for REST API."""

from datetime import datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from academia.lifecycle import Modality, OfferingStatus

T = TypeVar("T")

Score = float | None


class APIResponse(BaseModel, Generic[T]):
    """Standard API response wrapper."""

    data: T | None = None
    error: str | None = None
    details: dict[str, Any] | None = None


# Offering models


class OfferingCreate(BaseModel):
    """Request model for creating a course offering."""

    subject_id: str = Field(..., min_length=1, max_length=36)
    instructor_id: str = Field(..., min_length=1, max_length=36)
    name: str = Field(..., min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=1000)
    start_date: datetime
    end_date: datetime
    modality: Modality
    room: str | None = Field(default=None, max_length=50)
    schedule: str = Field(..., min_length=1, max_length=200)
    max_seats: int = Field(..., ge=1, le=100)


class OfferingUpdate(BaseModel):
    """Request model for updating an offering (partial update)."""

    name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=1000)
    start_date: datetime | None = None
    end_date: datetime | None = None
    modality: Modality | None = None
    room: str | None = Field(default=None, max_length=50)
    schedule: str | None = Field(default=None, min_length=1, max_length=200)
    max_seats: int | None = Field(default=None, ge=1, le=100)


class OfferingResponse(BaseModel):
    """Response model for a course offering."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    subject_id: str
    instructor_id: str
    name: str
    description: str | None
    start_date: datetime
    end_date: datetime
    modality: str
    room: str | None
    schedule: str
    max_seats: int
    enrolled_count: int
    available_seats: int
    occupancy: int
    status: OfferingStatus
    active: bool
    created_at: datetime
    updated_at: datetime


def offering_to_response(offering: Any) -> OfferingResponse:
    """Convert a CourseOffering model to OfferingResponse."""
    return OfferingResponse.model_validate(offering)


class OccupancyResponse(BaseModel):
    """Response model for an offering's seat usage."""

    model_config = ConfigDict(from_attributes=True)

    offering_id: str
    max_seats: int
    enrolled_count: int
    available_seats: int
    occupancy_percentage: int
    status: str


def occupancy_to_response(report: Any) -> OccupancyResponse:
    """Convert an OccupancyReport to OccupancyResponse."""
    return OccupancyResponse.model_validate(report)


class OfferingStatsResponse(BaseModel):
    """Response model for offering statistics."""

    model_config = ConfigDict(from_attributes=True)

    total_offerings: int
    active_offerings: int
    total_enrolled: int
    avg_enrolled_per_offering: float
    total_seats: int


class ModalityStatsResponse(BaseModel):
    """Response model for per-modality statistics."""

    model_config = ConfigDict(from_attributes=True)

    modality: str
    count: int
    total_enrolled: int


class StartOfferingResponse(BaseModel):
    """Response model for starting all enrollments of an offering."""

    offering_id: str
    started: int


# Enrollment models


class EnrollmentCreate(BaseModel):
    """Request model for enrolling a student."""

    student_id: str = Field(..., min_length=1, max_length=36)
    offering_id: str = Field(..., min_length=1, max_length=36)


class ScoreUpdate(BaseModel):
    """Request model for recording one component score. Null clears it."""

    value: Score = Field(..., ge=0, le=100)


class ScoresUpdate(BaseModel):
    """Request model for recording several component scores.

    Only the components present in the request body are changed.
    """

    midterm1: Score = Field(default=None, ge=0, le=100)
    midterm2: Score = Field(default=None, ge=0, le=100)
    final: Score = Field(default=None, ge=0, le=100)
    coursework: Score = Field(default=None, ge=0, le=100)
    participation: Score = Field(default=None, ge=0, le=100)


class EnrollmentResponse(BaseModel):
    """Response model for an enrollment."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    offering_id: str
    student_id: str
    enrolled_at: datetime
    status: str
    final_grade: float | None
    grade_label: str
    progress: int
    midterm1: float | None
    midterm2: float | None
    final: float | None
    coursework: float | None
    participation: float | None
    created_at: datetime
    updated_at: datetime


def enrollment_to_response(enrollment: Any) -> EnrollmentResponse:
    """Convert an Enrollment model to EnrollmentResponse."""
    return EnrollmentResponse.model_validate(enrollment)


class StatusBreakdownResponse(BaseModel):
    """Response model for one status in enrollment statistics."""

    model_config = ConfigDict(from_attributes=True)

    count: int
    percentage: int
    average_grade: float | None


class EnrollmentStatsResponse(BaseModel):
    """Response model for enrollment statistics."""

    model_config = ConfigDict(from_attributes=True)

    total: int
    by_status: dict[str, StatusBreakdownResponse]


class StudentGradeStatsResponse(BaseModel):
    """Response model for a student's grade summary."""

    model_config = ConfigDict(from_attributes=True)

    student_id: str
    total_courses: int
    approved: int
    failed: int
    average_grade: float | None
    highest_grade: float | None
    lowest_grade: float | None
