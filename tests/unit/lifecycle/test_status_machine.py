"""Unit tests for the Enrollment Status Machine."""

import pytest

from academia.exceptions import InvalidTransitionError
from academia.lifecycle import (
    TERMINAL_STATUSES,
    EnrollmentStatus,
    StatusEvent,
    can_withdraw,
    holds_seat,
    is_active,
    next_status,
    status_for_grade,
)

E = EnrollmentStatus


@pytest.mark.unit
class TestEnrollmentStatusEnum:
    """Tests for EnrollmentStatus enum."""

    def test_enrollment_status_values(self) -> None:
        assert E.ENROLLED.value == "enrolled"
        assert E.IN_PROGRESS.value == "in-progress"
        assert E.APPROVED.value == "approved"
        assert E.FAILED.value == "failed"
        assert E.WITHDRAWN.value == "withdrawn"

    def test_terminal_statuses(self) -> None:
        assert TERMINAL_STATUSES == {E.APPROVED, E.FAILED, E.WITHDRAWN}


@pytest.mark.unit
class TestStart:
    """Tests for the start event."""

    def test_enrolled_to_in_progress(self) -> None:
        assert next_status(E.ENROLLED, StatusEvent.START) is E.IN_PROGRESS

    def test_in_progress_is_idempotent(self) -> None:
        assert next_status(E.IN_PROGRESS, StatusEvent.START) is E.IN_PROGRESS

    @pytest.mark.parametrize("status", [E.APPROVED, E.FAILED, E.WITHDRAWN])
    def test_start_from_terminal_raises(self, status: EnrollmentStatus) -> None:
        with pytest.raises(InvalidTransitionError):
            next_status(status, StatusEvent.START)


@pytest.mark.unit
class TestWithdraw:
    """Tests for the withdraw event."""

    @pytest.mark.parametrize("status", [E.ENROLLED, E.IN_PROGRESS])
    def test_withdraw_from_active(self, status: EnrollmentStatus) -> None:
        assert next_status(status, StatusEvent.WITHDRAW) is E.WITHDRAWN
        assert can_withdraw(status)

    @pytest.mark.parametrize("status", [E.APPROVED, E.FAILED, E.WITHDRAWN])
    def test_withdraw_from_terminal_raises(self, status: EnrollmentStatus) -> None:
        with pytest.raises(InvalidTransitionError) as exc_info:
            next_status(status, StatusEvent.WITHDRAW, enrollment_id="enr-1")

        assert exc_info.value.current == status.value
        assert exc_info.value.enrollment_id == "enr-1"
        assert not can_withdraw(status)

    def test_accepts_plain_strings(self) -> None:
        assert next_status("in-progress", StatusEvent.WITHDRAW) is E.WITHDRAWN


@pytest.mark.unit
class TestStatusForGrade:
    """Tests for grade-driven transitions."""

    def test_undefined_grade_keeps_status(self) -> None:
        assert status_for_grade(E.IN_PROGRESS, None) is E.IN_PROGRESS

    def test_exactly_passing_grade_approves(self) -> None:
        assert status_for_grade(E.IN_PROGRESS, 70) is E.APPROVED

    def test_just_below_passing_fails_in_progress(self) -> None:
        assert status_for_grade(E.IN_PROGRESS, 69.99) is E.FAILED

    def test_failing_grade_keeps_enrolled(self) -> None:
        """A course that has not started is not failed by an early low score."""
        assert status_for_grade(E.ENROLLED, 40) is E.ENROLLED

    def test_passing_grade_approves_enrolled(self) -> None:
        assert status_for_grade(E.ENROLLED, 95) is E.APPROVED

    def test_passing_grade_overrides_failed(self) -> None:
        assert status_for_grade(E.FAILED, 75) is E.APPROVED

    def test_failing_regrade_keeps_approved(self) -> None:
        """Only an in-progress course can fail."""
        assert status_for_grade(E.APPROVED, 50) is E.APPROVED

    def test_failing_regrade_keeps_failed(self) -> None:
        assert status_for_grade(E.FAILED, 40) is E.FAILED

    def test_recomputation_is_idempotent(self) -> None:
        once = status_for_grade(E.IN_PROGRESS, 82)
        assert status_for_grade(once, 82) is once

    @pytest.mark.parametrize("grade", [10, 70, 100])
    def test_grade_on_withdrawn_raises(self, grade: float) -> None:
        with pytest.raises(InvalidTransitionError):
            status_for_grade(E.WITHDRAWN, grade)


@pytest.mark.unit
class TestPredicates:
    """Tests for status predicates."""

    def test_is_active(self) -> None:
        assert is_active(E.ENROLLED)
        assert is_active(E.IN_PROGRESS)
        assert not is_active(E.APPROVED)

    def test_holds_seat(self) -> None:
        """Completion keeps the seat; withdrawal releases it."""
        assert holds_seat(E.APPROVED)
        assert holds_seat(E.FAILED)
        assert holds_seat(E.ENROLLED)
        assert not holds_seat(E.WITHDRAWN)
