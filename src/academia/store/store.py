"""AcademiaStore - Main API for offering and enrollment persistence."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime
from typing import Any

from sqlalchemy import case, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from academia.exceptions import (
    DuplicateEnrollmentError,
    EnrollmentNotFoundError,
    InvalidTransitionError,
    OfferingNotFoundError,
    ValidationError,
)
from academia.grading import parse_component, percentage, round_half_up, validate_score
from academia.lifecycle import (
    EnrollmentStatus,
    StatusEvent,
    next_status,
    parse_modality,
    status_for_grade,
    utcnow,
    validate_offering,
)
from academia.lifecycle.offering import to_naive_utc
from academia.store.capacity import CapacityAccountant
from academia.store.database import DEFAULT_BUSY_TIMEOUT, Database
from academia.store.models import (
    CourseOffering,
    Enrollment,
    EnrollmentStats,
    ModalityStats,
    OfferingStats,
    StatusBreakdown,
    StudentGradeStats,
)

logger = logging.getLogger(__name__)

OFFERING_TIMINGS = ("upcoming", "current")

_UPDATABLE_OFFERING_FIELDS = frozenset(
    {
        "name",
        "description",
        "start_date",
        "end_date",
        "modality",
        "room",
        "schedule",
        "max_seats",
    }
)


class AcademiaStore:
    """Main API for store operations.

    Provides CRUD operations for course offerings and the transactional
    enrollment operations (admit, score, start, withdraw) that must keep the
    seat count consistent with the enrollment records.
    """

    def __init__(
        self, db_path: str = "academia.db", busy_timeout: float = DEFAULT_BUSY_TIMEOUT
    ) -> None:
        """Initialize the store with an SQLite database.

        Creates database and tables if they don't exist.

        Args:
            db_path: Path to SQLite database file
            busy_timeout: Seconds a writer waits for the database lock
        """
        self._db = Database(db_path, busy_timeout=busy_timeout)
        self._db.create_tables()
        self._capacity = CapacityAccountant()

    @property
    def database(self) -> Database:
        return self._db

    def close(self) -> None:
        """Close the database connection."""
        self._db.close()

    # --- Offering Operations ---

    def create_offering(
        self,
        subject_id: str,
        instructor_id: str,
        name: str,
        start_date: datetime,
        end_date: datetime,
        modality: str,
        schedule: str,
        max_seats: int,
        room: str | None = None,
        description: str | None = None,
    ) -> CourseOffering:
        """Create a new course offering.

        Args:
            subject_id: Reference to the subject being taught
            instructor_id: Reference to the instructor
            name: Display name
            start_date: First day of the offering
            end_date: Last day; must be after start_date
            modality: "on-site", "online" or "hybrid"
            schedule: Free-form schedule string (e.g. "Mon/Wed 10:00-12:00")
            max_seats: Seat limit (1-100)
            room: Room, required unless the offering is online
            description: Optional longer description

        Returns:
            Created CourseOffering with generated ID and zero enrolled

        Raises:
            ValidationError: If a scheduling or capacity invariant is violated
        """
        modality = parse_modality(modality).value
        validate_offering(start_date, end_date, modality, room, max_seats)

        session = self._db.get_session()
        try:
            offering = CourseOffering(
                subject_id=subject_id,
                instructor_id=instructor_id,
                name=name,
                description=description,
                start_date=to_naive_utc(start_date),
                end_date=to_naive_utc(end_date),
                modality=modality,
                room=room,
                schedule=schedule,
                max_seats=max_seats,
            )
            session.add(offering)
            session.commit()
            session.refresh(offering)
            logger.info("Created offering %s (%s, %d seats)", offering.id, name, max_seats)
            return offering
        finally:
            session.close()

    def get_offering(self, offering_id: str) -> CourseOffering:
        """Get offering by ID.

        Raises:
            OfferingNotFoundError: If offering doesn't exist
        """
        session = self._db.get_session()
        try:
            offering = session.get(CourseOffering, offering_id)
            if offering is None:
                raise OfferingNotFoundError(offering_id)
            return offering
        finally:
            session.close()

    def list_offerings(
        self,
        active_only: bool = True,
        instructor_id: str | None = None,
        subject_id: str | None = None,
        timing: str | None = None,
        with_seats: bool = False,
        now: datetime | None = None,
    ) -> list[CourseOffering]:
        """List offerings with optional filters.

        Args:
            active_only: Exclude deactivated offerings
            instructor_id: Filter by instructor (optional)
            subject_id: Filter by subject (optional)
            timing: "upcoming" (not started yet) or "current" (under way)
            with_seats: Only offerings with at least one free seat
            now: Reference time for timing filters (defaults to now)

        Returns:
            List of offerings, ordered by start_date ascending
        """
        if timing is not None and timing not in OFFERING_TIMINGS:
            raise ValidationError(
                f"timing must be one of {OFFERING_TIMINGS}, got {timing!r}", field="timing"
            )
        now = utcnow() if now is None else to_naive_utc(now)

        session = self._db.get_session()
        try:
            stmt = select(CourseOffering)

            if active_only or timing is not None:
                stmt = stmt.where(CourseOffering.active.is_(True))
            if instructor_id is not None:
                stmt = stmt.where(CourseOffering.instructor_id == instructor_id)
            if subject_id is not None:
                stmt = stmt.where(CourseOffering.subject_id == subject_id)
            if timing == "upcoming":
                stmt = stmt.where(CourseOffering.start_date > now)
            elif timing == "current":
                stmt = stmt.where(
                    CourseOffering.start_date <= now,
                    CourseOffering.end_date >= now,
                )
            if with_seats:
                stmt = stmt.where(CourseOffering.enrolled_count < CourseOffering.max_seats)

            stmt = stmt.order_by(CourseOffering.start_date)
            result = session.execute(stmt)
            return list(result.scalars().all())
        finally:
            session.close()

    def update_offering(self, offering_id: str, **changes: Any) -> CourseOffering:
        """Update offering fields. Only provided (non-None) fields are updated.

        The merged result is validated as a whole, so moving the start date
        past the end date or shrinking max_seats below the enrolled count is
        rejected.

        Args:
            offering_id: The offering's unique ID
            **changes: Any of name, description, start_date, end_date,
                modality, room, schedule, max_seats

        Returns:
            The updated CourseOffering

        Raises:
            OfferingNotFoundError: If offering doesn't exist
            ValidationError: If the merged offering violates an invariant
        """
        unknown = set(changes) - _UPDATABLE_OFFERING_FIELDS
        if unknown:
            raise TypeError(f"Cannot update offering fields: {', '.join(sorted(unknown))}")
        changes = {k: v for k, v in changes.items() if v is not None}

        session = self._db.get_session()
        try:
            offering = self._lock_offering(session, offering_id)

            if "modality" in changes:
                changes["modality"] = parse_modality(changes["modality"]).value
            for key in ("start_date", "end_date"):
                if key in changes:
                    changes[key] = to_naive_utc(changes[key])

            merged = {key: getattr(offering, key) for key in _UPDATABLE_OFFERING_FIELDS}
            merged.update(changes)
            validate_offering(
                merged["start_date"],
                merged["end_date"],
                merged["modality"],
                merged["room"],
                merged["max_seats"],
                enrolled_count=offering.enrolled_count,
            )

            for key, value in changes.items():
                setattr(offering, key, value)

            session.commit()
            session.refresh(offering)
            return offering
        finally:
            session.close()

    def deactivate_offering(self, offering_id: str) -> CourseOffering:
        """Soft-delete an offering. Enrollments are kept.

        Raises:
            OfferingNotFoundError: If offering doesn't exist
        """
        session = self._db.get_session()
        try:
            offering = session.get(CourseOffering, offering_id)
            if offering is None:
                raise OfferingNotFoundError(offering_id)

            offering.active = False
            session.commit()
            session.refresh(offering)
            logger.info("Deactivated offering %s", offering_id)
            return offering
        finally:
            session.close()

    def reconcile_offering(self, offering_id: str) -> int:
        """Rebuild an offering's enrolled count from its enrollment records.

        Returns:
            The corrected enrolled count

        Raises:
            OfferingNotFoundError: If offering doesn't exist
        """
        session = self._db.get_session()
        try:
            count = self._capacity.reconcile(session, offering_id)
            session.commit()
            return count
        finally:
            session.close()

    def get_offering_stats(self) -> OfferingStats:
        """Get aggregated stats over all offerings."""
        session = self._db.get_session()
        try:
            stmt = select(
                func.count(CourseOffering.id).label("total"),
                func.sum(case((CourseOffering.active.is_(True), 1), else_=0)).label("active"),
                func.sum(CourseOffering.enrolled_count).label("enrolled"),
                func.avg(CourseOffering.enrolled_count).label("avg_enrolled"),
                func.sum(CourseOffering.max_seats).label("seats"),
            )
            result = session.execute(stmt).one()

            return OfferingStats(
                total_offerings=result.total or 0,
                active_offerings=result.active or 0,
                total_enrolled=result.enrolled or 0,
                avg_enrolled_per_offering=float(result.avg_enrolled or 0.0),
                total_seats=result.seats or 0,
            )
        finally:
            session.close()

    def get_stats_by_modality(self) -> list[ModalityStats]:
        """Get offering count and enrolled students per modality."""
        session = self._db.get_session()
        try:
            stmt = (
                select(
                    CourseOffering.modality,
                    func.count(CourseOffering.id).label("count"),
                    func.sum(CourseOffering.enrolled_count).label("enrolled"),
                )
                .group_by(CourseOffering.modality)
                .order_by(CourseOffering.modality)
            )
            return [
                ModalityStats(
                    modality=row.modality,
                    count=row.count,
                    total_enrolled=row.enrolled or 0,
                )
                for row in session.execute(stmt)
            ]
        finally:
            session.close()

    # --- Enrollment Operations ---

    def create_enrollment(self, offering_id: str, student_id: str) -> Enrollment:
        """Admit a student to an offering, taking one seat.

        The seat increment and the enrollment insert run in one transaction:
        if either fails, neither is persisted.

        Args:
            offering_id: The offering's unique ID
            student_id: The student's unique ID

        Returns:
            Created Enrollment in the initial "enrolled" status

        Raises:
            OfferingNotFoundError: If offering doesn't exist
            ValidationError: If the offering is deactivated
            DuplicateEnrollmentError: If the student is already enrolled
            CapacityExceededError: If the offering is full
        """
        session = self._db.get_session()
        try:
            # Report duplicates before capacity, so a full offering still
            # tells a returning student they are already in it
            if self._find_pair(session, offering_id, student_id) is not None:
                raise DuplicateEnrollmentError(offering_id, student_id)

            self._capacity.increment_enrollment(session, offering_id)

            enrollment = Enrollment(offering_id=offering_id, student_id=student_id)
            session.add(enrollment)
            session.commit()
            session.refresh(enrollment)
            return enrollment
        except IntegrityError as e:
            session.rollback()
            if "UNIQUE constraint failed" in str(e) or "uq_enrollment_offering_student" in str(e):
                raise DuplicateEnrollmentError(offering_id, student_id) from e
            raise
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def get_enrollment(self, enrollment_id: str) -> Enrollment:
        """Get enrollment by ID.

        Raises:
            EnrollmentNotFoundError: If enrollment doesn't exist
        """
        session = self._db.get_session()
        try:
            enrollment = session.get(Enrollment, enrollment_id)
            if enrollment is None:
                raise EnrollmentNotFoundError(enrollment_id)
            return enrollment
        finally:
            session.close()

    def get_enrollment_by_pair(self, offering_id: str, student_id: str) -> Enrollment:
        """Get the enrollment of a student in an offering.

        Raises:
            EnrollmentNotFoundError: If the student is not enrolled there
        """
        session = self._db.get_session()
        try:
            enrollment = self._find_pair(session, offering_id, student_id)
            if enrollment is None:
                raise EnrollmentNotFoundError(f"{offering_id}/{student_id}")
            return enrollment
        finally:
            session.close()

    def list_enrollments(
        self,
        offering_id: str | None = None,
        student_id: str | None = None,
        statuses: Iterable[EnrollmentStatus] | None = None,
    ) -> list[Enrollment]:
        """List enrollments with optional filters.

        Args:
            offering_id: Filter by offering (optional)
            student_id: Filter by student (optional)
            statuses: Only these statuses (optional)

        Returns:
            Enrollments of one offering oldest first; otherwise most recent first
        """
        session = self._db.get_session()
        try:
            stmt = select(Enrollment)

            if offering_id is not None:
                stmt = stmt.where(Enrollment.offering_id == offering_id)
            if student_id is not None:
                stmt = stmt.where(Enrollment.student_id == student_id)
            if statuses is not None:
                stmt = stmt.where(Enrollment.status.in_([s.value for s in statuses]))

            if offering_id is not None and student_id is None:
                stmt = stmt.order_by(Enrollment.enrolled_at, Enrollment.id)
            else:
                stmt = stmt.order_by(Enrollment.enrolled_at.desc(), Enrollment.id)
            result = session.execute(stmt)
            return list(result.scalars().all())
        finally:
            session.close()

    def update_scores(
        self, enrollment_id: str, scores: dict[str, float | None]
    ) -> tuple[Enrollment, EnrollmentStatus]:
        """Set component scores, recompute the final grade and apply the status rule.

        Args:
            enrollment_id: The enrollment's unique ID
            scores: Component name to score; None clears a component

        Returns:
            The updated Enrollment and its status before the update

        Raises:
            ValidationError: On unknown components or out-of-range scores
            EnrollmentNotFoundError: If enrollment doesn't exist
            InvalidTransitionError: If the enrollment is withdrawn
        """
        cleaned = {
            parse_component(name).value: validate_score(name, value)
            for name, value in scores.items()
        }

        session = self._db.get_session()
        try:
            enrollment = self._lock_enrollment(session, enrollment_id)
            previous = enrollment.enrollment_status
            if previous is EnrollmentStatus.WITHDRAWN:
                raise InvalidTransitionError(previous.value, "record-score", enrollment_id)

            grade = enrollment.set_scores(cleaned)
            enrollment.enrollment_status = status_for_grade(previous, grade, enrollment_id)

            session.commit()
            session.refresh(enrollment)
            return enrollment, previous
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def start_enrollment(self, enrollment_id: str) -> Enrollment:
        """Move an enrollment from "enrolled" to "in-progress".

        Raises:
            EnrollmentNotFoundError: If enrollment doesn't exist
            InvalidTransitionError: If the enrollment is in a terminal status
        """
        session = self._db.get_session()
        try:
            enrollment = self._lock_enrollment(session, enrollment_id)
            enrollment.enrollment_status = next_status(
                enrollment.status, StatusEvent.START, enrollment_id
            )
            session.commit()
            session.refresh(enrollment)
            return enrollment
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def start_offering_enrollments(self, offering_id: str) -> int:
        """Move every "enrolled" enrollment of an offering to "in-progress".

        Returns:
            Number of enrollments moved

        Raises:
            OfferingNotFoundError: If offering doesn't exist
        """
        session = self._db.get_session()
        try:
            if session.get(CourseOffering, offering_id) is None:
                raise OfferingNotFoundError(offering_id)

            result = session.execute(
                update(Enrollment)
                .where(
                    Enrollment.offering_id == offering_id,
                    Enrollment.status == EnrollmentStatus.ENROLLED.value,
                )
                .values(status=EnrollmentStatus.IN_PROGRESS.value)
                .execution_options(synchronize_session=False)
            )
            session.commit()
            return result.rowcount  # type: ignore[attr-defined]
        finally:
            session.close()

    def withdraw_enrollment(self, enrollment_id: str) -> Enrollment:
        """Withdraw an enrollment and release its seat in one transaction.

        Raises:
            EnrollmentNotFoundError: If enrollment doesn't exist
            InvalidTransitionError: If the enrollment is not enrolled/in-progress
        """
        session = self._db.get_session()
        try:
            enrollment = self._lock_enrollment(session, enrollment_id)
            enrollment.enrollment_status = next_status(
                enrollment.status, StatusEvent.WITHDRAW, enrollment_id
            )
            session.flush()
            self._capacity.decrement_enrollment(session, enrollment.offering_id)

            session.commit()
            session.refresh(enrollment)
            return enrollment
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def get_enrollment_stats(self, offering_id: str | None = None) -> EnrollmentStats:
        """Get enrollment counts and average grade per status.

        Args:
            offering_id: Filter by offering (None = all)
        """
        session = self._db.get_session()
        try:
            stmt = select(
                Enrollment.status,
                func.count(Enrollment.id).label("count"),
                func.avg(Enrollment.final_grade).label("avg_grade"),
            ).group_by(Enrollment.status)
            if offering_id is not None:
                stmt = stmt.where(Enrollment.offering_id == offering_id)

            rows = session.execute(stmt).all()
            total = sum(row.count for row in rows)

            by_status = {
                row.status: StatusBreakdown(
                    count=row.count,
                    percentage=percentage(row.count, total),
                    average_grade=(
                        round_half_up(row.avg_grade, 2) if row.avg_grade is not None else None
                    ),
                )
                for row in rows
            }
            return EnrollmentStats(total=total, by_status=by_status)
        finally:
            session.close()

    def get_student_grade_stats(self, student_id: str) -> StudentGradeStats:
        """Get a grade summary for one student across all offerings."""
        session = self._db.get_session()
        try:
            stmt = select(
                func.count(Enrollment.id).label("total"),
                func.sum(
                    case((Enrollment.status == EnrollmentStatus.APPROVED.value, 1), else_=0)
                ).label("approved"),
                func.sum(
                    case((Enrollment.status == EnrollmentStatus.FAILED.value, 1), else_=0)
                ).label("failed"),
                func.avg(Enrollment.final_grade).label("avg_grade"),
                func.max(Enrollment.final_grade).label("max_grade"),
                func.min(Enrollment.final_grade).label("min_grade"),
            ).where(Enrollment.student_id == student_id)

            result = session.execute(stmt).one()

            return StudentGradeStats(
                student_id=student_id,
                total_courses=result.total or 0,
                approved=result.approved or 0,
                failed=result.failed or 0,
                average_grade=(
                    round_half_up(result.avg_grade, 2) if result.avg_grade is not None else None
                ),
                highest_grade=result.max_grade,
                lowest_grade=result.min_grade,
            )
        finally:
            session.close()

    # --- Helpers ---

    @staticmethod
    def _find_pair(session: Session, offering_id: str, student_id: str) -> Enrollment | None:
        stmt = select(Enrollment).where(
            Enrollment.offering_id == offering_id,
            Enrollment.student_id == student_id,
        )
        return session.execute(stmt).scalar_one_or_none()

    @staticmethod
    def _lock_enrollment(session: Session, enrollment_id: str) -> Enrollment:
        """Take the write lock on an enrollment row, then load it.

        Writing before reading means the status we check cannot change under
        us before commit (a concurrent withdraw/score update waits).
        """
        touched = session.execute(
            update(Enrollment)
            .where(Enrollment.id == enrollment_id)
            .values(updated_at=func.now())
            .execution_options(synchronize_session=False)
        )
        if touched.rowcount == 0:  # type: ignore[attr-defined]
            raise EnrollmentNotFoundError(enrollment_id)
        enrollment = session.get(Enrollment, enrollment_id, populate_existing=True)
        if enrollment is None:
            raise EnrollmentNotFoundError(enrollment_id)
        return enrollment

    @staticmethod
    def _lock_offering(session: Session, offering_id: str) -> CourseOffering:
        """Take the write lock on an offering row, then load it."""
        touched = session.execute(
            update(CourseOffering)
            .where(CourseOffering.id == offering_id)
            .values(updated_at=func.now())
            .execution_options(synchronize_session=False)
        )
        if touched.rowcount == 0:  # type: ignore[attr-defined]
            raise OfferingNotFoundError(offering_id)
        offering = session.get(CourseOffering, offering_id, populate_existing=True)
        if offering is None:
            raise OfferingNotFoundError(offering_id)
        return offering
