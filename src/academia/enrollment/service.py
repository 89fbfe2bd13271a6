"""EnrollmentService - enrollment, grading and withdrawal operations."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING

from academia.enrollment.models import OccupancyReport
from academia.exceptions import AcademiaError
from academia.grading import parse_component
from academia.store import available_seats

if TYPE_CHECKING:
    from academia.lifecycle import EnrollmentStatus
    from academia.store import (
        AcademiaStore,
        Enrollment,
        EnrollmentStats,
        StudentGradeStats,
    )

logger = logging.getLogger(__name__)


class EnrollmentService:
    """Caller-facing operations on enrollments.

    The service assumes the caller has already been authorized to act on the
    given student/offering pair. Typed failures from the store propagate
    unchanged; nothing is retried here.
    """

    def __init__(self, store: AcademiaStore) -> None:
        """Initialize the service.

        Args:
            store: AcademiaStore used for persistence.
        """
        self.store = store

    def enroll(self, student_id: str, offering_id: str) -> Enrollment:
        """Admit a student to an offering if a seat is free.

        Args:
            student_id: The student's unique ID.
            offering_id: The offering's unique ID.

        Returns:
            The new enrollment, in "enrolled" status.

        Raises:
            OfferingNotFoundError: If the offering doesn't exist.
            ValidationError: If the offering is deactivated.
            DuplicateEnrollmentError: If the student is already enrolled.
            CapacityExceededError: If the offering is full.
        """
        try:
            enrollment = self.store.create_enrollment(offering_id, student_id)
        except AcademiaError as e:
            logger.warning(
                "Enrollment of student %s in offering %s rejected: %s", student_id, offering_id, e
            )
            raise
        logger.info(
            "Enrolled student %s in offering %s (enrollment %s)",
            student_id,
            offering_id,
            enrollment.id,
        )
        return enrollment

    def record_score(self, enrollment_id: str, component: str, value: float | None) -> Enrollment:
        """Record one component score and re-derive grade and status.

        Args:
            enrollment_id: The enrollment's unique ID.
            component: One of midterm1, midterm2, final, coursework, participation.
            value: Score in [0, 100], or None to clear the component.

        Returns:
            The updated enrollment.
        """
        component = parse_component(component).value
        return self.record_scores(enrollment_id, {component: value})

    def record_scores(
        self, enrollment_id: str, scores: Mapping[str, float | None]
    ) -> Enrollment:
        """Record several component scores at once.

        Raises:
            ValidationError: On unknown components or out-of-range scores.
            EnrollmentNotFoundError: If the enrollment doesn't exist.
            InvalidTransitionError: If the enrollment is withdrawn.
        """
        enrollment, previous = self.store.update_scores(enrollment_id, dict(scores))
        logger.info(
            "Recorded %s for enrollment %s (final grade %s)",
            ", ".join(sorted(scores)),
            enrollment_id,
            enrollment.final_grade,
        )
        if enrollment.status != previous.value:
            logger.info(
                "Enrollment %s moved %s -> %s", enrollment_id, previous.value, enrollment.status
            )
        return enrollment

    def start(self, enrollment_id: str) -> Enrollment:
        """Mark an enrollment as in progress.

        Raises:
            EnrollmentNotFoundError: If the enrollment doesn't exist.
            InvalidTransitionError: If the enrollment is in a terminal status.
        """
        enrollment = self.store.start_enrollment(enrollment_id)
        logger.info("Enrollment %s is in progress", enrollment_id)
        return enrollment

    def start_offering(self, offering_id: str) -> int:
        """Mark every enrolled student of an offering as in progress.

        Returns:
            Number of enrollments moved.
        """
        moved = self.store.start_offering_enrollments(offering_id)
        logger.info("Started %d enrollments in offering %s", moved, offering_id)
        return moved

    def withdraw(self, enrollment_id: str) -> Enrollment:
        """Withdraw an enrollment and release its seat.

        Raises:
            EnrollmentNotFoundError: If the enrollment doesn't exist.
            InvalidTransitionError: If the enrollment is approved, failed or
                already withdrawn. The seat count is left unchanged.
        """
        try:
            enrollment = self.store.withdraw_enrollment(enrollment_id)
        except AcademiaError as e:
            logger.warning("Withdrawal of enrollment %s rejected: %s", enrollment_id, e)
            raise
        logger.info(
            "Withdrew enrollment %s from offering %s", enrollment_id, enrollment.offering_id
        )
        return enrollment

    def get_enrollment(self, enrollment_id: str) -> Enrollment:
        return self.store.get_enrollment(enrollment_id)

    def list_enrollments(
        self,
        offering_id: str | None = None,
        student_id: str | None = None,
        statuses: Iterable[EnrollmentStatus] | None = None,
    ) -> list[Enrollment]:
        """List enrollments filtered by offering, student and/or status."""
        return self.store.list_enrollments(
            offering_id=offering_id, student_id=student_id, statuses=statuses
        )

    def get_enrollment_stats(self, offering_id: str | None = None) -> EnrollmentStats:
        return self.store.get_enrollment_stats(offering_id=offering_id)

    def get_student_grade_stats(self, student_id: str) -> StudentGradeStats:
        return self.store.get_student_grade_stats(student_id)

    def get_offering_occupancy(self, offering_id: str) -> OccupancyReport:
        """Report seat usage of an offering.

        Raises:
            OfferingNotFoundError: If the offering doesn't exist.
        """
        offering = self.store.get_offering(offering_id)
        return OccupancyReport(
            offering_id=offering.id,
            max_seats=offering.max_seats,
            enrolled_count=offering.enrolled_count,
            available_seats=available_seats(offering),
            occupancy_percentage=offering.occupancy,
            status=offering.status.value,
        )

    def reconcile_offering(self, offering_id: str) -> OccupancyReport:
        """Rebuild an offering's seat count from its enrollments and report it."""
        before = self.store.get_offering(offering_id).enrolled_count
        after = self.store.reconcile_offering(offering_id)
        if after != before:
            logger.warning(
                "Offering %s seat count drifted: stored %d, actual %d", offering_id, before, after
            )
        return self.get_offering_occupancy(offering_id)
