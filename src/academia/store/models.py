"""SQLAlchemy models for the Academia store."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime  # noqa: TC003 - used at runtime for SQLAlchemy
from typing import Any

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    mapped_column,
    relationship,
)

from academia.grading import (
    ScoreComponent,
    compute_final_grade,
    grade_label,
    progress_percentage,
)
from academia.lifecycle import (
    EnrollmentStatus,
    Modality,
    OfferingStatus,
    derive_status,
    occupancy_percentage,
    utcnow,
)


def generate_uuid() -> str:
    """Generate a new UUID string."""
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class CourseOffering(Base):
    """Course offering model - a scheduled instance of a subject."""

    __tablename__ = "course_offerings"
    __table_args__ = (
        CheckConstraint("enrolled_count >= 0", name="ck_offering_enrolled_non_negative"),
        CheckConstraint("enrolled_count <= max_seats", name="ck_offering_enrolled_within_cap"),
        CheckConstraint("max_seats BETWEEN 1 AND 100", name="ck_offering_max_seats_range"),
        CheckConstraint("end_date > start_date", name="ck_offering_dates_ordered"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    subject_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    instructor_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    start_date: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    end_date: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    modality: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    room: Mapped[str | None] = mapped_column(String(50), nullable=True)
    schedule: Mapped[str] = mapped_column(String(200), nullable=False)
    max_seats: Mapped[int] = mapped_column(Integer, nullable=False)
    enrolled_count: Mapped[int] = mapped_column(Integer, nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    enrollments: Mapped[list[Enrollment]] = relationship(
        "Enrollment", back_populates="offering"
    )

    def __init__(
        self,
        subject_id: str,
        instructor_id: str,
        name: str,
        start_date: datetime,
        end_date: datetime,
        modality: str,
        schedule: str,
        max_seats: int,
        id: str | None = None,
        description: str | None = None,
        room: str | None = None,
        enrolled_count: int = 0,
        active: bool = True,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.subject_id = subject_id
        self.instructor_id = instructor_id
        self.name = name
        self.description = description
        self.start_date = start_date
        self.end_date = end_date
        self.modality = modality
        self.room = room
        self.schedule = schedule
        self.max_seats = max_seats
        self.enrolled_count = enrolled_count
        self.active = active

    @property
    def offering_modality(self) -> Modality:
        """Get modality as Modality enum."""
        return Modality(self.modality)

    @property
    def available_seats(self) -> int:
        return max(self.max_seats - self.enrolled_count, 0)

    @property
    def occupancy(self) -> int:
        """Percentage of seats taken."""
        return occupancy_percentage(self.enrolled_count, self.max_seats)

    @property
    def status(self) -> OfferingStatus:
        """Temporal status at the time of reading."""
        return derive_status(self.active, self.start_date, self.end_date)

    def __repr__(self) -> str:
        return (
            f"<CourseOffering(id={self.id!r}, name={self.name!r}, "
            f"seats={self.enrolled_count}/{self.max_seats})>"
        )


class Enrollment(Base):
    """Enrollment model - one student's registration in one offering."""

    __tablename__ = "enrollments"
    __table_args__ = (
        UniqueConstraint("offering_id", "student_id", name="uq_enrollment_offering_student"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    offering_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("course_offerings.id"), nullable=False, index=True
    )
    student_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    enrolled_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    final_grade: Mapped[float | None] = mapped_column(Float, nullable=True)
    midterm1: Mapped[float | None] = mapped_column(Float, nullable=True)
    midterm2: Mapped[float | None] = mapped_column(Float, nullable=True)
    final: Mapped[float | None] = mapped_column(Float, nullable=True)
    coursework: Mapped[float | None] = mapped_column(Float, nullable=True)
    participation: Mapped[float | None] = mapped_column(Float, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    offering: Mapped[CourseOffering] = relationship(
        "CourseOffering", back_populates="enrollments"
    )

    def __init__(
        self,
        offering_id: str,
        student_id: str,
        id: str | None = None,
        enrolled_at: datetime | None = None,
        status: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.offering_id = offering_id
        self.student_id = student_id
        self.enrolled_at = enrolled_at if enrolled_at is not None else utcnow()
        self.status = status if status is not None else EnrollmentStatus.ENROLLED.value

    @property
    def enrollment_status(self) -> EnrollmentStatus:
        """Get status as EnrollmentStatus enum."""
        return EnrollmentStatus(self.status)

    @enrollment_status.setter
    def enrollment_status(self, value: EnrollmentStatus) -> None:
        """Set status from EnrollmentStatus enum."""
        self.status = value.value

    @property
    def scores(self) -> dict[str, float | None]:
        """Component scores keyed by component name."""
        return {c.value: getattr(self, c.value) for c in ScoreComponent}

    def set_scores(self, scores: dict[str, float | None]) -> float | None:
        """Assign component scores and recompute the final grade.

        Returns:
            The recomputed final grade (None when nothing is graded).
        """
        for name, value in scores.items():
            setattr(self, ScoreComponent(name).value, value)
        self.final_grade = compute_final_grade(self.scores)
        return self.final_grade

    @property
    def progress(self) -> int:
        """Percentage of components graded."""
        return progress_percentage(self.scores)

    @property
    def grade_label(self) -> str:
        return grade_label(self.final_grade).value

    def __repr__(self) -> str:
        return (
            f"<Enrollment(id={self.id!r}, offering_id={self.offering_id!r}, "
            f"student_id={self.student_id!r}, status={self.status!r})>"
        )


@dataclass
class OfferingStats:
    """Aggregated statistics over course offerings."""

    total_offerings: int = 0
    active_offerings: int = 0
    total_enrolled: int = 0
    avg_enrolled_per_offering: float = 0.0
    total_seats: int = 0


@dataclass
class ModalityStats:
    """Offering count and enrolled students for one modality."""

    modality: str
    count: int
    total_enrolled: int


@dataclass
class StatusBreakdown:
    """Enrollment count, share and average grade for one status."""

    count: int
    percentage: int
    average_grade: float | None


@dataclass
class EnrollmentStats:
    """Aggregated statistics over enrollments."""

    total: int = 0
    by_status: dict[str, StatusBreakdown] = field(default_factory=dict)


@dataclass
class StudentGradeStats:
    """Grade summary for one student across offerings."""

    student_id: str
    total_courses: int = 0
    approved: int = 0
    failed: int = 0
    average_grade: float | None = None
    highest_grade: float | None = None
    lowest_grade: float | None = None
