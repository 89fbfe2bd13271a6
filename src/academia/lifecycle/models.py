"""Enums for enrollment and course offering lifecycles."""

from enum import StrEnum


class EnrollmentStatus(StrEnum):
    """Lifecycle state of a student's registration in an offering."""

    ENROLLED = "enrolled"
    IN_PROGRESS = "in-progress"
    APPROVED = "approved"
    FAILED = "failed"
    WITHDRAWN = "withdrawn"


class StatusEvent(StrEnum):
    """Inputs driving the enrollment status machine."""

    START = "start"
    WITHDRAW = "withdraw"
    GRADE_PASSING = "grade-passing"
    GRADE_FAILING = "grade-failing"


class Modality(StrEnum):
    """How an offering is delivered."""

    ON_SITE = "on-site"
    ONLINE = "online"
    HYBRID = "hybrid"


class OfferingStatus(StrEnum):
    """Temporal status of an offering, derived on read."""

    INACTIVE = "inactive"
    UPCOMING = "upcoming"
    ACTIVE = "active"
    FINISHED = "finished"
