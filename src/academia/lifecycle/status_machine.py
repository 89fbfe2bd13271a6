"""Enrollment Status Machine - explicit transition table."""

from __future__ import annotations

from academia.exceptions import InvalidTransitionError
from academia.grading import is_passing
from academia.lifecycle.models import EnrollmentStatus, StatusEvent

_E = EnrollmentStatus
_V = StatusEvent

# (current status, event) -> next status. Pairs not listed are invalid.
TRANSITIONS: dict[tuple[EnrollmentStatus, StatusEvent], EnrollmentStatus] = {
    (_E.ENROLLED, _V.START): _E.IN_PROGRESS,
    (_E.IN_PROGRESS, _V.START): _E.IN_PROGRESS,
    (_E.ENROLLED, _V.WITHDRAW): _E.WITHDRAWN,
    (_E.IN_PROGRESS, _V.WITHDRAW): _E.WITHDRAWN,
    (_E.ENROLLED, _V.GRADE_PASSING): _E.APPROVED,
    (_E.IN_PROGRESS, _V.GRADE_PASSING): _E.APPROVED,
    (_E.APPROVED, _V.GRADE_PASSING): _E.APPROVED,
    (_E.FAILED, _V.GRADE_PASSING): _E.APPROVED,
    # A failing grade only fails a course that is under way; approval is kept
    (_E.ENROLLED, _V.GRADE_FAILING): _E.ENROLLED,
    (_E.IN_PROGRESS, _V.GRADE_FAILING): _E.FAILED,
    (_E.APPROVED, _V.GRADE_FAILING): _E.APPROVED,
    (_E.FAILED, _V.GRADE_FAILING): _E.FAILED,
}

ACTIVE_STATUSES = frozenset({_E.ENROLLED, _E.IN_PROGRESS})
TERMINAL_STATUSES = frozenset({_E.APPROVED, _E.FAILED, _E.WITHDRAWN})
SEAT_HOLDING_STATUSES = frozenset(s for s in EnrollmentStatus if s is not _E.WITHDRAWN)


def next_status(
    current: EnrollmentStatus | str,
    event: StatusEvent,
    enrollment_id: str | None = None,
) -> EnrollmentStatus:
    """Look up the status that follows ``current`` on ``event``.

    Raises:
        InvalidTransitionError: If the table has no entry for the pair.
    """
    current = EnrollmentStatus(current)
    try:
        return TRANSITIONS[(current, event)]
    except KeyError:
        raise InvalidTransitionError(current.value, event.value, enrollment_id) from None


def grade_event(grade: float) -> StatusEvent:
    """Classify a defined final grade as a passing or failing event."""
    return _V.GRADE_PASSING if is_passing(grade) else _V.GRADE_FAILING


def status_for_grade(
    current: EnrollmentStatus | str,
    grade: float | None,
    enrollment_id: str | None = None,
) -> EnrollmentStatus:
    """Status after the final grade is recomputed.

    An undefined grade leaves the status untouched.
    """
    current = EnrollmentStatus(current)
    if grade is None:
        return current
    return next_status(current, grade_event(grade), enrollment_id)


def can_withdraw(status: EnrollmentStatus | str) -> bool:
    return EnrollmentStatus(status) in ACTIVE_STATUSES


def is_active(status: EnrollmentStatus | str) -> bool:
    return EnrollmentStatus(status) in ACTIVE_STATUSES


def holds_seat(status: EnrollmentStatus | str) -> bool:
    """Completed enrollments keep their seat; only withdrawal releases it."""
    return EnrollmentStatus(status) in SEAT_HOLDING_STATUSES
