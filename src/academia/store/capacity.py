"""Capacity Accountant - seat accounting for course offerings.

Every seat change is a single conditional UPDATE, so the compare and the
write happen in one statement at the storage layer. Two requests racing for
the last seat cannot both see it as free: the second UPDATE matches no row.
The mutating calls take the caller's session and never commit, so they join
whatever transaction the caller is running (enrollment insert, withdrawal).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import func, select, update

from academia.exceptions import (
    CapacityExceededError,
    OfferingNotFoundError,
    ValidationError,
)
from academia.lifecycle import EnrollmentStatus
from academia.store.models import CourseOffering, Enrollment

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


def has_available_seats(offering: CourseOffering) -> bool:
    return offering.enrolled_count < offering.max_seats


def available_seats(offering: CourseOffering) -> int:
    return max(offering.max_seats - offering.enrolled_count, 0)


class CapacityAccountant:
    """Atomic seat increments and releases against an offering's limit."""

    def increment_enrollment(self, session: Session, offering_id: str) -> None:
        """Take one seat on an active offering.

        Args:
            session: Session whose transaction the update joins.
            offering_id: The offering's unique ID.

        Raises:
            OfferingNotFoundError: If the offering doesn't exist.
            ValidationError: If the offering is deactivated.
            CapacityExceededError: If no seat is available.
        """
        stmt = (
            update(CourseOffering)
            .where(
                CourseOffering.id == offering_id,
                CourseOffering.active.is_(True),
                CourseOffering.enrolled_count < CourseOffering.max_seats,
            )
            .values(enrolled_count=CourseOffering.enrolled_count + 1)
            .execution_options(synchronize_session=False)
        )
        result = session.execute(stmt)
        if result.rowcount == 1:  # type: ignore[attr-defined]
            logger.info("Seat taken on offering %s", offering_id)
            return

        # Nothing matched: work out which guard rejected the update
        offering = session.get(CourseOffering, offering_id, populate_existing=True)
        if offering is None:
            raise OfferingNotFoundError(offering_id)
        if not offering.active:
            raise ValidationError(
                f"Offering '{offering_id}' is not active", field="offering_id"
            )
        logger.warning(
            "Offering %s is full (%d/%d)",
            offering_id,
            offering.enrolled_count,
            offering.max_seats,
        )
        raise CapacityExceededError(offering_id)

    def decrement_enrollment(self, session: Session, offering_id: str) -> None:
        """Release one seat, never going below zero.

        Args:
            session: Session whose transaction the update joins.
            offering_id: The offering's unique ID.

        Raises:
            OfferingNotFoundError: If the offering doesn't exist.
        """
        stmt = (
            update(CourseOffering)
            .where(
                CourseOffering.id == offering_id,
                CourseOffering.enrolled_count > 0,
            )
            .values(enrolled_count=CourseOffering.enrolled_count - 1)
            .execution_options(synchronize_session=False)
        )
        result = session.execute(stmt)
        if result.rowcount == 1:  # type: ignore[attr-defined]
            logger.info("Seat released on offering %s", offering_id)
            return

        if session.get(CourseOffering, offering_id) is None:
            raise OfferingNotFoundError(offering_id)
        logger.warning("Offering %s already at zero enrolled; nothing to release", offering_id)

    def reconcile(self, session: Session, offering_id: str) -> int:
        """Recount the seat-holding enrollments and overwrite the stored count.

        Args:
            session: Session whose transaction the update joins.
            offering_id: The offering's unique ID.

        Returns:
            The corrected enrolled count.

        Raises:
            OfferingNotFoundError: If the offering doesn't exist.
        """
        # Write first so the recount runs under the write lock
        touched = session.execute(
            update(CourseOffering)
            .where(CourseOffering.id == offering_id)
            .values(enrolled_count=CourseOffering.enrolled_count)
            .execution_options(synchronize_session=False)
        )
        if touched.rowcount == 0:  # type: ignore[attr-defined]
            raise OfferingNotFoundError(offering_id)

        count = session.execute(
            select(func.count(Enrollment.id)).where(
                Enrollment.offering_id == offering_id,
                Enrollment.status != EnrollmentStatus.WITHDRAWN.value,
            )
        ).scalar_one()

        session.execute(
            update(CourseOffering)
            .where(CourseOffering.id == offering_id)
            .values(enrolled_count=count)
            .execution_options(synchronize_session=False)
        )
        logger.info("Reconciled offering %s to %d enrolled", offering_id, count)
        return count
