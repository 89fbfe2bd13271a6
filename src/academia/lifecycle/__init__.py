"""Lifecycle rules for enrollments and course offerings."""

from academia.lifecycle.models import (
    EnrollmentStatus,
    Modality,
    OfferingStatus,
    StatusEvent,
)
from academia.lifecycle.offering import (
    derive_status,
    occupancy_percentage,
    parse_modality,
    requires_room,
    utcnow,
    validate_offering,
)
from academia.lifecycle.status_machine import (
    ACTIVE_STATUSES,
    SEAT_HOLDING_STATUSES,
    TERMINAL_STATUSES,
    TRANSITIONS,
    can_withdraw,
    holds_seat,
    is_active,
    next_status,
    status_for_grade,
)

__all__ = [
    "ACTIVE_STATUSES",
    "SEAT_HOLDING_STATUSES",
    "TERMINAL_STATUSES",
    "TRANSITIONS",
    "EnrollmentStatus",
    "Modality",
    "OfferingStatus",
    "StatusEvent",
    "can_withdraw",
    "derive_status",
    "holds_seat",
    "is_active",
    "next_status",
    "occupancy_percentage",
    "parse_modality",
    "requires_room",
    "status_for_grade",
    "utcnow",
    "validate_offering",
]
