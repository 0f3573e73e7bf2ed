"""Domain services."""

from perfeval.domain.services.aggregation import (
    CompetencyAverage,
    aggregate_department,
    competency_average,
    department_overall_average,
    overall_average,
    to_competency_responses,
)
from perfeval.domain.services.dashboard import DashboardSummary, build_dashboard
from perfeval.domain.services.responses import (
    ResponseMatrix,
    fill_matrix,
    init_matrix,
    set_rating,
)
from perfeval.domain.services.submission import build_submission
from perfeval.domain.services.targeting import (
    TargetingResult,
    has_already_responded,
    resolve_targeting,
    validate_selection,
)

__all__ = [
    "CompetencyAverage",
    "DashboardSummary",
    "ResponseMatrix",
    "TargetingResult",
    "aggregate_department",
    "build_dashboard",
    "build_submission",
    "competency_average",
    "department_overall_average",
    "fill_matrix",
    "has_already_responded",
    "init_matrix",
    "overall_average",
    "resolve_targeting",
    "set_rating",
    "to_competency_responses",
    "validate_selection",
]
