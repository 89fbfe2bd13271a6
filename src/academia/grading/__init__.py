"""Grade Calculator - pure weighted grading over component scores."""

from academia.grading.calculator import (
    PartialScores,
    compute_final_grade,
    grade_label,
    is_passing,
    parse_component,
    percentage,
    progress_percentage,
    round_half_up,
    validate_score,
)
from academia.grading.models import (
    COMPONENT_WEIGHTS,
    PASSING_GRADE,
    GradeLabel,
    ScoreComponent,
)

__all__ = [
    "COMPONENT_WEIGHTS",
    "PASSING_GRADE",
    "GradeLabel",
    "PartialScores",
    "ScoreComponent",
    "compute_final_grade",
    "grade_label",
    "is_passing",
    "parse_component",
    "percentage",
    "progress_percentage",
    "round_half_up",
    "validate_score",
]
