"""
Rating aggregation for previews and department reports.

Per-record averages are owned by the evaluation API; the helpers here only
compute the local preview before submission and the per-department chart.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from perfeval.domain.errors import ValidationError
from perfeval.domain.models import Competency, CompetencyResponse, EvaluationRecord
from perfeval.domain.services.responses import ResponseMatrix


@dataclass(slots=True, frozen=True)
class CompetencyAverage:
    competency: str
    average: float


def competency_average(ratings: Sequence[int]) -> float:
    if not ratings:
        return 0.0
    return sum(ratings) / len(ratings)


def to_competency_responses(
    matrix: ResponseMatrix,
    competencies: Iterable[Competency] | None = None,
) -> list[CompetencyResponse]:
    """
    Flatten a response matrix into the submission shape.

    With ``competencies`` the output follows the evaluation's definition
    order; without it, the matrix insertion order (which ``init_matrix``
    already aligns with the definition order).
    """
    if competencies is None:
        names = list(matrix)
    else:
        names = [competency.competency for competency in competencies]
        missing = [name for name in names if name not in matrix]
        if missing:
            raise ValidationError(f"No ratings for competencies: {', '.join(missing)}")

    return [
        CompetencyResponse(
            competency=name,
            responses=tuple(matrix[name]),
            average=competency_average(matrix[name]),
        )
        for name in names
    ]


def overall_average(responses: Sequence[CompetencyResponse]) -> float:
    """Mean of the per-competency averages."""
    if not responses:
        return 0.0
    averages = [
        item.average if item.average is not None else competency_average(item.responses)
        for item in responses
    ]
    return sum(averages) / len(averages)


def aggregate_department(records: Sequence[EvaluationRecord]) -> list[CompetencyAverage]:
    """
    Average each competency across a department's records.

    The divisor is the total number of records, so a competency missing from
    a record counts as 0 for that record. Output follows first-seen order.
    """
    if not records:
        return []

    totals: dict[str, float] = {}
    for record in records:
        for result in record.results:
            totals[result.competency] = totals.get(result.competency, 0.0) + (result.average or 0)

    record_count = len(records)
    return [
        CompetencyAverage(competency=name, average=total / record_count)
        for name, total in totals.items()
    ]


def department_overall_average(records: Sequence[EvaluationRecord]) -> float:
    if not records:
        return 0.0
    return sum(record.overall_average or 0 for record in records) / len(records)
