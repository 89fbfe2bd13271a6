"""Data models for the Grade Calculator."""

from __future__ import annotations

from enum import StrEnum


class ScoreComponent(StrEnum):
    """Graded inputs contributing to the final grade."""

    MIDTERM1 = "midterm1"
    MIDTERM2 = "midterm2"
    FINAL = "final"
    COURSEWORK = "coursework"
    PARTICIPATION = "participation"


# Share of the total grade per component; sums to 1.0
COMPONENT_WEIGHTS: dict[ScoreComponent, float] = {
    ScoreComponent.MIDTERM1: 0.25,
    ScoreComponent.MIDTERM2: 0.25,
    ScoreComponent.FINAL: 0.30,
    ScoreComponent.COURSEWORK: 0.15,
    ScoreComponent.PARTICIPATION: 0.05,
}

PASSING_GRADE = 70.0
MIN_SCORE = 0.0
MAX_SCORE = 100.0


class GradeLabel(StrEnum):
    """Qualitative band for a final grade."""

    UNGRADED = "ungraded"
    EXCELLENT = "excellent"
    VERY_GOOD = "very-good"
    GOOD = "good"
    FAIR = "fair"
    INSUFFICIENT = "insufficient"
