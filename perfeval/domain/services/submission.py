"""
Evaluation record construction.

Turns a filled response matrix into the payload the evaluation API accepts,
blocking submissions that the targeting rules or the record snapshot rule out.
"""

from __future__ import annotations

from collections.abc import Iterable

import structlog
from perfeval.domain.errors import DuplicateSubmissionError, TargetResolutionError, ValidationError
from perfeval.domain.models import Evaluation, EvaluationRecord, SubmissionPayload, User
from perfeval.domain.services.aggregation import to_competency_responses
from perfeval.domain.services.responses import ResponseMatrix
from perfeval.domain.services.targeting import (
    TargetingResult,
    has_already_responded,
    validate_selection,
)

logger = structlog.get_logger(__name__)


def build_submission(
    *,
    evaluation: Evaluation,
    targeting: TargetingResult,
    evaluator: User,
    matrix: ResponseMatrix,
    comments: str = "",
    existing_records: Iterable[EvaluationRecord] = (),
    selected_user_id: str | None = None,
) -> SubmissionPayload:
    """Validate a submission attempt and build its payload."""
    if has_already_responded(existing_records, evaluator.user_id, evaluation.evaluation_id):
        logger.info(
            "submission_blocked",
            reason="already_responded",
            evaluation_id=evaluation.evaluation_id,
            evaluator_id=evaluator.user_id,
        )
        raise DuplicateSubmissionError(
            f"Evaluator {evaluator.user_id} already responded to evaluation "
            f"{evaluation.evaluation_id}"
        )

    if not evaluation.published:
        raise ValidationError(f"Evaluation {evaluation.evaluation_id} is not published")
    if not evaluation.competencies:
        raise ValidationError(f"Evaluation {evaluation.evaluation_id} has no competencies")

    if not targeting.editable and not targeting.resolved:
        logger.info(
            "submission_blocked",
            reason="unresolved_target",
            evaluation_id=evaluation.evaluation_id,
            evaluator_id=evaluator.user_id,
        )
        raise TargetResolutionError(
            f"No evaluated user could be resolved for evaluation {evaluation.evaluation_id}"
        )
    if targeting.editable and not selected_user_id:
        raise TargetResolutionError("Select the colleague being evaluated")

    evaluated_user_id = validate_selection(targeting, selected_user_id)
    responses = to_competency_responses(matrix, evaluation.competencies)

    return SubmissionPayload(
        evaluation=evaluation.evaluation_id,
        evaluated_user=evaluated_user_id,
        evaluator=evaluator.user_id,
        department=evaluation.department_id,
        responses=tuple(responses),
        comments=comments.strip(),
    )
