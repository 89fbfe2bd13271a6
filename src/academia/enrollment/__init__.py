"""Enrollment package - enrollment, grading and withdrawal operations."""

from academia.enrollment.models import OccupancyReport
from academia.enrollment.service import EnrollmentService

__all__ = [
    "EnrollmentService",
    "OccupancyReport",
]
