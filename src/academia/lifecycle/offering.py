"""Course Offering Lifecycle - scheduling invariants and derived status."""

from __future__ import annotations

from datetime import UTC, datetime

from academia.exceptions import ValidationError
from academia.grading import percentage
from academia.lifecycle.models import Modality, OfferingStatus

MIN_SEATS = 1
MAX_SEATS = 100

# Modalities that meet in a physical room
_ROOM_MODALITIES = frozenset({Modality.ON_SITE, Modality.HYBRID})


def utcnow() -> datetime:
    """Current time as a naive UTC datetime (the storage convention)."""
    return datetime.now(UTC).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    """Normalize an aware datetime to naive UTC; naive values pass through."""
    if value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)


def parse_modality(value: Modality | str) -> Modality:
    try:
        return Modality(value)
    except ValueError as e:
        valid = ", ".join(m.value for m in Modality)
        raise ValidationError(
            f"Modality must be one of: {valid} (got {value!r})", field="modality"
        ) from e


def requires_room(modality: Modality | str) -> bool:
    return parse_modality(modality) in _ROOM_MODALITIES


def validate_offering(
    start_date: datetime,
    end_date: datetime,
    modality: Modality | str,
    room: str | None,
    max_seats: int,
    enrolled_count: int = 0,
) -> None:
    """Check the scheduling and capacity invariants of an offering.

    Args:
        start_date: First day of the offering.
        end_date: Last day of the offering; must be strictly after start_date.
        modality: Delivery modality.
        room: Room name; required for on-site and hybrid offerings.
        max_seats: Seat limit, between 1 and 100.
        enrolled_count: Seats already taken; max_seats may not drop below it.

    Raises:
        ValidationError: Naming the first offending field.
    """
    if to_naive_utc(end_date) <= to_naive_utc(start_date):
        raise ValidationError("End date must be after start date", field="end_date")

    if requires_room(modality) and not (room and room.strip()):
        raise ValidationError(
            "Room is required for on-site and hybrid offerings", field="room"
        )

    if not MIN_SEATS <= max_seats <= MAX_SEATS:
        raise ValidationError(
            f"Maximum seats must be between {MIN_SEATS} and {MAX_SEATS}", field="max_seats"
        )

    if enrolled_count > max_seats:
        raise ValidationError(
            f"Maximum seats cannot be below the {enrolled_count} students already enrolled",
            field="max_seats",
        )


def derive_status(
    active: bool,
    start_date: datetime,
    end_date: datetime,
    now: datetime | None = None,
) -> OfferingStatus:
    """Derive the temporal status of an offering. Never stored."""
    if not active:
        return OfferingStatus.INACTIVE

    now = utcnow() if now is None else to_naive_utc(now)
    if now < to_naive_utc(start_date):
        return OfferingStatus.UPCOMING
    if now > to_naive_utc(end_date):
        return OfferingStatus.FINISHED
    return OfferingStatus.ACTIVE


def occupancy_percentage(enrolled: int, maximum: int) -> int:
    """Share of seats taken, as a rounded percentage."""
    return percentage(enrolled, maximum)
