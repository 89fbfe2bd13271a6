"""Custom exceptions shared by all Academia components."""

from __future__ import annotations

from typing import Any


class AcademiaError(Exception):
    """Base exception for Academia errors."""

    kind = "error"

    def details(self) -> dict[str, Any]:
        """Structured detail for the calling layer."""
        return {"kind": self.kind}


class ConfigError(AcademiaError):
    """Configuration is invalid or unreadable."""

    kind = "config_error"


class ValidationError(AcademiaError):
    """Malformed input (dates out of order, score out of range, ...)."""

    kind = "validation_error"

    def __init__(self, message: str, field: str) -> None:
        super().__init__(message)
        self.field = field

    def details(self) -> dict[str, Any]:
        return {"kind": self.kind, "field": self.field}


class CapacityExceededError(AcademiaError):
    """Enrollment attempted on an offering with no available seats."""

    kind = "capacity_exceeded"

    def __init__(self, offering_id: str) -> None:
        super().__init__(f"Offering '{offering_id}' has no available seats")
        self.offering_id = offering_id

    def details(self) -> dict[str, Any]:
        return {"kind": self.kind, "offering_id": self.offering_id}


class DuplicateEnrollmentError(AcademiaError):
    """Student is already enrolled in the offering."""

    kind = "duplicate_enrollment"

    def __init__(self, offering_id: str, student_id: str) -> None:
        super().__init__(
            f"Student '{student_id}' is already enrolled in offering '{offering_id}'"
        )
        self.offering_id = offering_id
        self.student_id = student_id

    def details(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "offering_id": self.offering_id,
            "student_id": self.student_id,
        }


class InvalidTransitionError(AcademiaError):
    """Status change attempted from a state that does not allow it."""

    kind = "invalid_transition"

    def __init__(self, current: str, event: str, enrollment_id: str | None = None) -> None:
        target = f" for enrollment '{enrollment_id}'" if enrollment_id else ""
        super().__init__(f"Cannot apply '{event}' to status '{current}'{target}")
        self.current = current
        self.event = event
        self.enrollment_id = enrollment_id

    def details(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "status": self.current,
            "event": self.event,
            "enrollment_id": self.enrollment_id,
        }


class NotFoundError(AcademiaError):
    """Referenced record does not exist."""

    kind = "not_found"
    resource = "record"

    def __init__(self, identifier: str) -> None:
        super().__init__(f"{self.resource.capitalize()} with id '{identifier}' not found")
        self.identifier = identifier

    def details(self) -> dict[str, Any]:
        return {"kind": self.kind, "resource": self.resource, "id": self.identifier}


class OfferingNotFoundError(NotFoundError):
    """Course offering with given ID does not exist."""

    resource = "offering"


class EnrollmentNotFoundError(NotFoundError):
    """Enrollment with given ID does not exist."""

    resource = "enrollment"
