"""Grade Calculator - weighted final grade over partial component scores."""

from __future__ import annotations

import math
from collections.abc import Mapping

from academia.exceptions import ValidationError
from academia.grading.models import (
    COMPONENT_WEIGHTS,
    MAX_SCORE,
    MIN_SCORE,
    PASSING_GRADE,
    GradeLabel,
    ScoreComponent,
)

PartialScores = Mapping[str, float | None]

# Lower bound of each band, checked in order
_LABEL_BANDS: list[tuple[float, GradeLabel]] = [
    (90.0, GradeLabel.EXCELLENT),
    (80.0, GradeLabel.VERY_GOOD),
    (PASSING_GRADE, GradeLabel.GOOD),
    (60.0, GradeLabel.FAIR),
]


def parse_component(name: str) -> ScoreComponent:
    """Resolve a component name.

    Raises:
        ValidationError: If the name is not a known component.
    """
    try:
        return ScoreComponent(name)
    except ValueError as e:
        valid = ", ".join(c.value for c in ScoreComponent)
        raise ValidationError(
            f"Unknown score component '{name}' (expected one of: {valid})", field=name
        ) from e


def validate_score(component: str, value: float | None) -> float | None:
    """Check that a score is within [0, 100]. ``None`` means "not graded yet".

    Raises:
        ValidationError: If the score is out of range.
    """
    if value is None:
        return None
    if not MIN_SCORE <= value <= MAX_SCORE:
        raise ValidationError(
            f"Score for '{component}' must be between {MIN_SCORE:g} and {MAX_SCORE:g}, "
            f"got {value}",
            field=component,
        )
    return float(value)


def _present(scores: PartialScores) -> dict[ScoreComponent, float]:
    present = {}
    for name, value in scores.items():
        component = parse_component(name)
        score = validate_score(component.value, value)
        if score is not None:
            present[component] = score
    return present


def compute_final_grade(scores: PartialScores) -> float | None:
    """Compute the final grade from whichever component scores are present.

    Weights are renormalized over the present components, so a student
    graded only on ``final`` and ``coursework`` gets the weighted mean of
    those two. The result is rounded to 2 decimal places.

    Args:
        scores: Mapping of component name to score. Missing components and
            components mapped to None are excluded.

    Returns:
        The final grade, or None when no component has been graded.

    Raises:
        ValidationError: On unknown components or scores outside [0, 100].
    """
    present = _present(scores)

    weighted_sum = 0.0
    weight_sum = 0.0
    for component, score in present.items():
        weight = COMPONENT_WEIGHTS[component]
        weighted_sum += score * weight
        weight_sum += weight

    if weight_sum == 0:
        return None
    return round_half_up(weighted_sum / weight_sum, 2)


def is_passing(grade: float | None) -> bool:
    """Whether a final grade meets the passing threshold."""
    return grade is not None and grade >= PASSING_GRADE


def grade_label(grade: float | None) -> GradeLabel:
    """Map a final grade to its qualitative band."""
    if grade is None:
        return GradeLabel.UNGRADED
    for lower, label in _LABEL_BANDS:
        if grade >= lower:
            return label
    return GradeLabel.INSUFFICIENT


def progress_percentage(scores: PartialScores) -> int:
    """Percentage of the components that have been graded."""
    present = _present(scores)
    return percentage(len(present), len(ScoreComponent))


def round_half_up(value: float, places: int = 0) -> float:
    """Round with halves going up (12.5 -> 13), unlike the builtin ``round``."""
    factor = 10**places
    return math.floor(value * factor + 0.5) / factor


def percentage(part: int, whole: int) -> int:
    """``part`` as a whole-number percentage of ``whole``; 0 when ``whole`` is 0."""
    if whole == 0:
        return 0
    return math.floor(part / whole * 100 + 0.5)
