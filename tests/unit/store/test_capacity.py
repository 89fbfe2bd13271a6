"""Unit tests for the Capacity Accountant."""

import pytest

from academia.exceptions import CapacityExceededError, OfferingNotFoundError, ValidationError
from academia.store import (
    AcademiaStore,
    CapacityAccountant,
    Enrollment,
    available_seats,
    has_available_seats,
)


@pytest.fixture
def accountant() -> CapacityAccountant:
    return CapacityAccountant()


def _seats(store: AcademiaStore, offering_id: str) -> int:
    return store.get_offering(offering_id).enrolled_count


@pytest.mark.unit
class TestSeatHelpers:
    """Tests for has_available_seats and available_seats."""

    def test_helpers(self, make_offering) -> None:
        offering = make_offering(max_seats=2)
        assert has_available_seats(offering)
        assert available_seats(offering) == 2

        offering.enrolled_count = 2
        assert not has_available_seats(offering)
        assert available_seats(offering) == 0


@pytest.mark.unit
class TestIncrement:
    """Tests for increment_enrollment."""

    def test_increment_until_full(
        self, store: AcademiaStore, make_offering, accountant: CapacityAccountant
    ) -> None:
        offering = make_offering(max_seats=2)
        session = store.database.get_session()
        try:
            accountant.increment_enrollment(session, offering.id)
            accountant.increment_enrollment(session, offering.id)
            with pytest.raises(CapacityExceededError):
                accountant.increment_enrollment(session, offering.id)
            session.commit()
        finally:
            session.close()

        assert _seats(store, offering.id) == 2

    def test_increment_does_not_commit(
        self, store: AcademiaStore, make_offering, accountant: CapacityAccountant
    ) -> None:
        offering = make_offering()
        session = store.database.get_session()
        try:
            accountant.increment_enrollment(session, offering.id)
            session.rollback()
        finally:
            session.close()

        assert _seats(store, offering.id) == 0

    def test_increment_missing_offering(
        self, store: AcademiaStore, accountant: CapacityAccountant
    ) -> None:
        session = store.database.get_session()
        try:
            with pytest.raises(OfferingNotFoundError):
                accountant.increment_enrollment(session, "missing")
        finally:
            session.close()

    def test_increment_inactive_offering(
        self, store: AcademiaStore, make_offering, accountant: CapacityAccountant
    ) -> None:
        offering = make_offering()
        store.deactivate_offering(offering.id)
        session = store.database.get_session()
        try:
            with pytest.raises(ValidationError):
                accountant.increment_enrollment(session, offering.id)
        finally:
            session.close()


@pytest.mark.unit
class TestDecrement:
    """Tests for decrement_enrollment."""

    def test_decrement_floors_at_zero(
        self, store: AcademiaStore, make_offering, accountant: CapacityAccountant
    ) -> None:
        offering = make_offering()
        session = store.database.get_session()
        try:
            accountant.increment_enrollment(session, offering.id)
            accountant.decrement_enrollment(session, offering.id)
            accountant.decrement_enrollment(session, offering.id)
            session.commit()
        finally:
            session.close()

        assert _seats(store, offering.id) == 0

    def test_decrement_missing_offering(
        self, store: AcademiaStore, accountant: CapacityAccountant
    ) -> None:
        session = store.database.get_session()
        try:
            with pytest.raises(OfferingNotFoundError):
                accountant.decrement_enrollment(session, "missing")
        finally:
            session.close()


@pytest.mark.unit
class TestReconcile:
    """Tests for reconcile."""

    def test_reconcile_repairs_drift(self, store: AcademiaStore, make_offering) -> None:
        offering = make_offering(max_seats=5)
        store.create_enrollment(offering.id, "stu-1")
        store.create_enrollment(offering.id, "stu-2")
        leaving = store.create_enrollment(offering.id, "stu-3")
        store.withdraw_enrollment(leaving.id)

        # Insert a record behind the accountant's back
        session = store.database.get_session()
        try:
            session.add(Enrollment(offering_id=offering.id, student_id="stu-4"))
            session.commit()
        finally:
            session.close()
        assert _seats(store, offering.id) == 2

        assert store.reconcile_offering(offering.id) == 3
        assert _seats(store, offering.id) == 3

    def test_completed_enrollments_counted(self, store: AcademiaStore, make_offering) -> None:
        offering = make_offering()
        enrollment = store.create_enrollment(offering.id, "stu-1")
        store.update_scores(enrollment.id, {"final": 95})

        assert store.reconcile_offering(offering.id) == 1

    def test_reconcile_missing_offering(self, store: AcademiaStore) -> None:
        with pytest.raises(OfferingNotFoundError):
            store.reconcile_offering("missing")
