"""Data models for the Enrollment service."""

from dataclasses import dataclass


@dataclass
class OccupancyReport:
    """Seat usage of one offering.

    Attributes:
        offering_id: The offering's unique ID.
        max_seats: Seat limit.
        enrolled_count: Seats taken.
        available_seats: Seats left, never negative.
        occupancy_percentage: Seats taken as a rounded percentage.
        status: Derived temporal status (inactive/upcoming/active/finished).
    """

    offering_id: str
    max_seats: int
    enrolled_count: int
    available_seats: int
    occupancy_percentage: int
    status: str
