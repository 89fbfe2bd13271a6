"""Store - Persistent storage for course offerings and enrollments."""

from academia.store.capacity import (
    CapacityAccountant,
    available_seats,
    has_available_seats,
)
from academia.store.database import Database
from academia.store.models import (
    CourseOffering,
    Enrollment,
    EnrollmentStats,
    ModalityStats,
    OfferingStats,
    StatusBreakdown,
    StudentGradeStats,
)
from academia.store.store import OFFERING_TIMINGS, AcademiaStore

__all__ = [
    "OFFERING_TIMINGS",
    "AcademiaStore",
    "CapacityAccountant",
    "CourseOffering",
    "Database",
    "Enrollment",
    "EnrollmentStats",
    "ModalityStats",
    "OfferingStats",
    "StatusBreakdown",
    "StudentGradeStats",
    "available_seats",
    "has_available_seats",
]
