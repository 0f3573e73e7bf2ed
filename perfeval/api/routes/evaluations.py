from __future__ import annotations

import asyncio
from collections.abc import Callable

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status
from perfeval.api.deps import (
    get_api_client,
    get_current_user,
    require_section,
    upstream_http_error,
)
from perfeval.api.schemas.common import DepartmentItem, EmployeeItem, EvaluationItem
from perfeval.api.schemas.evaluations import (
    CompetencyCreateRequest,
    CompetencyResult,
    CompetencyUpdateRequest,
    EvaluationCreateRequest,
    EvaluationFormResponse,
    QuestionCreateRequest,
    RatingOption,
    RatingPreviewRequest,
    RatingPreviewResponse,
    RecordCreateRequest,
    RecordCreateResponse,
    TargetingInfo,
)
from perfeval.domain import (
    Competency,
    DuplicateSubmissionError,
    Evaluation,
    EvaluationRecord,
    TargetResolutionError,
    User,
    ValidationError,
)
from perfeval.domain.reference_data import MAX_RATING, MIN_RATING, rating_label
from perfeval.domain.services.aggregation import overall_average, to_competency_responses
from perfeval.domain.services.authoring import (
    add_competency,
    add_question,
    can_author,
    change_competency_category,
    draft_evaluation,
    remove_competency,
    remove_question,
    search_evaluations,
    toggle_published,
)
from perfeval.domain.services.responses import ResponseMatrix, fill_matrix, init_matrix, set_rating
from perfeval.domain.services.submission import build_submission
from perfeval.domain.services.targeting import (
    TargetingResult,
    has_already_responded,
    resolve_targeting,
)
from perfeval.libs.evaluation_api import EvaluationApiClient, EvaluationApiError

router = APIRouter(prefix="/evaluations", tags=["Evaluations"])
logger = structlog.get_logger(__name__)

require_author = require_section("evaluations")


@router.get("", response_model=list[EvaluationItem])
async def list_evaluations(
    search: str | None = Query(None, description="Case-insensitive name filter"),
    department_id: str | None = Query(None, description="Only this department's evaluations"),
    client: EvaluationApiClient = Depends(get_api_client),  # noqa: B008
    _: User = Depends(require_author),  # noqa: B008
) -> list[EvaluationItem]:
    try:
        if department_id:
            evaluations = await client.list_department_evaluations(department_id)
        else:
            evaluations = await client.list_evaluations()
    except EvaluationApiError as exc:
        raise upstream_http_error(exc) from exc

    if search:
        evaluations = search_evaluations(evaluations, search)
    return [EvaluationItem.from_domain(evaluation) for evaluation in evaluations]


@router.post("", response_model=EvaluationItem, status_code=status.HTTP_201_CREATED)
async def create_evaluation(
    payload: EvaluationCreateRequest,
    client: EvaluationApiClient = Depends(get_api_client),  # noqa: B008
    user: User = Depends(require_author),  # noqa: B008
) -> EvaluationItem:
    try:
        evaluation = draft_evaluation(
            name=payload.name,
            department_id=payload.department_id,
            evaluation_type=payload.evaluation_type,
            competencies=[
                Competency(competency=item.competency.value, questions=tuple(item.questions))
                for item in payload.competencies
            ],
            due_date=payload.due_date,
            published=payload.published,
        )
    except ValidationError as exc:
        raise _unprocessable(exc) from exc

    try:
        created = await client.create_evaluation(evaluation)
    except EvaluationApiError as exc:
        raise upstream_http_error(exc) from exc

    logger.info(
        "evaluation_created",
        evaluation_id=created.evaluation_id,
        department_id=created.department_id,
        user_id=user.user_id,
    )
    return EvaluationItem.from_domain(created)


@router.patch("/{evaluation_id}/publish", response_model=EvaluationItem)
async def toggle_publish(
    evaluation_id: str,
    client: EvaluationApiClient = Depends(get_api_client),  # noqa: B008
    user: User = Depends(require_author),  # noqa: B008
) -> EvaluationItem:
    updated = await _edit(client, evaluation_id, toggle_published)
    logger.info(
        "evaluation_publish_toggled",
        evaluation_id=evaluation_id,
        published=updated.published,
        user_id=user.user_id,
    )
    return EvaluationItem.from_domain(updated)


@router.post("/{evaluation_id}/competencies", response_model=EvaluationItem)
async def create_competency(
    evaluation_id: str,
    payload: CompetencyCreateRequest,
    client: EvaluationApiClient = Depends(get_api_client),  # noqa: B008
    _: User = Depends(require_author),  # noqa: B008
) -> EvaluationItem:
    updated = await _edit(
        client, evaluation_id, lambda evaluation: add_competency(evaluation, payload.category)
    )
    return EvaluationItem.from_domain(updated)


@router.patch("/{evaluation_id}/competencies/{competency_index}", response_model=EvaluationItem)
async def update_competency(
    evaluation_id: str,
    competency_index: int,
    payload: CompetencyUpdateRequest,
    client: EvaluationApiClient = Depends(get_api_client),  # noqa: B008
    _: User = Depends(require_author),  # noqa: B008
) -> EvaluationItem:
    updated = await _edit(
        client,
        evaluation_id,
        lambda evaluation: change_competency_category(
            evaluation, competency_index, payload.category
        ),
    )
    return EvaluationItem.from_domain(updated)


@router.delete("/{evaluation_id}/competencies/{competency_index}", response_model=EvaluationItem)
async def delete_competency(
    evaluation_id: str,
    competency_index: int,
    client: EvaluationApiClient = Depends(get_api_client),  # noqa: B008
    _: User = Depends(require_author),  # noqa: B008
) -> EvaluationItem:
    updated = await _edit(
        client, evaluation_id, lambda evaluation: remove_competency(evaluation, competency_index)
    )
    return EvaluationItem.from_domain(updated)


@router.post(
    "/{evaluation_id}/competencies/{competency_index}/questions",
    response_model=EvaluationItem,
)
async def create_question(
    evaluation_id: str,
    competency_index: int,
    payload: QuestionCreateRequest,
    client: EvaluationApiClient = Depends(get_api_client),  # noqa: B008
    _: User = Depends(require_author),  # noqa: B008
) -> EvaluationItem:
    updated = await _edit(
        client,
        evaluation_id,
        lambda evaluation: add_question(evaluation, competency_index, payload.text),
    )
    return EvaluationItem.from_domain(updated)


@router.delete(
    "/{evaluation_id}/competencies/{competency_index}/questions/{question_index}",
    response_model=EvaluationItem,
)
async def delete_question(
    evaluation_id: str,
    competency_index: int,
    question_index: int,
    client: EvaluationApiClient = Depends(get_api_client),  # noqa: B008
    _: User = Depends(require_author),  # noqa: B008
) -> EvaluationItem:
    updated = await _edit(
        client,
        evaluation_id,
        lambda evaluation: remove_question(evaluation, competency_index, question_index),
    )
    return EvaluationItem.from_domain(updated)


@router.get("/{evaluation_id}/form", response_model=EvaluationFormResponse)
async def get_evaluation_form(
    evaluation_id: str,
    client: EvaluationApiClient = Depends(get_api_client),  # noqa: B008
    user: User = Depends(get_current_user),  # noqa: B008
) -> EvaluationFormResponse:
    """
    Everything needed to render the record form.

    - Who is evaluated and whether the user picks them
    - Default ratings for every question
    - Whether the user already answered this evaluation
    """
    evaluation, targeting, records = await _load_targeting(client, evaluation_id, user)

    try:
        matrix = init_matrix(evaluation.competencies)
    except ValidationError as exc:
        raise _unprocessable(exc) from exc

    return EvaluationFormResponse(
        evaluation=EvaluationItem.from_domain(evaluation),
        targeting=_targeting_info(targeting),
        responses={name: list(ratings) for name, ratings in matrix.items()},
        rating_options=[
            RatingOption(value=value, label=rating_label(value))
            for value in range(MIN_RATING, MAX_RATING + 1)
        ],
        already_responded=has_already_responded(records, user.user_id, evaluation_id),
        can_edit=can_author(user.role),
    )


@router.post("/{evaluation_id}/preview", response_model=RatingPreviewResponse)
async def preview_ratings(
    evaluation_id: str,
    payload: RatingPreviewRequest,
    client: EvaluationApiClient = Depends(get_api_client),  # noqa: B008
    _: User = Depends(get_current_user),  # noqa: B008
) -> RatingPreviewResponse:
    """Averages the form would show before the record is submitted."""
    try:
        evaluation = await client.get_evaluation(evaluation_id)
    except EvaluationApiError as exc:
        raise upstream_http_error(exc) from exc

    try:
        matrix = init_matrix(evaluation.competencies)
        if payload.fill is not None:
            matrix = fill_matrix(matrix, payload.fill)
        matrix = _apply_ratings(matrix, payload.responses)
        responses = to_competency_responses(matrix, evaluation.competencies)
    except ValidationError as exc:
        raise _unprocessable(exc) from exc

    return RatingPreviewResponse(
        results=[
            CompetencyResult(
                competency=item.competency,
                responses=list(item.responses),
                average=item.average,
            )
            for item in responses
        ],
        overall_average=overall_average(responses),
    )


@router.post(
    "/{evaluation_id}/records",
    response_model=RecordCreateResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_record(
    evaluation_id: str,
    payload: RecordCreateRequest,
    client: EvaluationApiClient = Depends(get_api_client),  # noqa: B008
    user: User = Depends(get_current_user),  # noqa: B008
) -> RecordCreateResponse:
    evaluation, targeting, records = await _load_targeting(client, evaluation_id, user)

    try:
        matrix = _apply_ratings(init_matrix(evaluation.competencies), payload.responses)
        submission = build_submission(
            evaluation=evaluation,
            targeting=targeting,
            evaluator=user,
            matrix=matrix,
            comments=payload.comments,
            existing_records=records,
            selected_user_id=payload.evaluated_user_id,
        )
    except ValidationError as exc:
        raise _unprocessable(exc) from exc
    except (DuplicateSubmissionError, TargetResolutionError) as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc

    try:
        record = await client.create_evaluation_record(submission)
    except EvaluationApiError as exc:
        raise upstream_http_error(exc) from exc

    return RecordCreateResponse(
        id=record.record_id,
        evaluation_id=record.evaluation_id,
        evaluated_user_id=record.evaluated_user_id,
        department_id=record.department_id,
        results=[
            CompetencyResult(
                competency=item.competency,
                responses=list(item.responses),
                average=item.average,
            )
            for item in record.results
        ],
        overall_average=record.overall_average,
        completed=record.completed,
    )


async def _edit(
    client: EvaluationApiClient,
    evaluation_id: str,
    edit: Callable[[Evaluation], Evaluation],
) -> Evaluation:
    """Fetch, apply a template edit and save; edits that break the template are 422."""
    try:
        evaluation = await client.get_evaluation(evaluation_id)
        edited = edit(evaluation)
        return await client.update_evaluation(edited)
    except ValidationError as exc:
        raise _unprocessable(exc) from exc
    except EvaluationApiError as exc:
        raise upstream_http_error(exc) from exc


async def _load_targeting(
    client: EvaluationApiClient, evaluation_id: str, user: User
) -> tuple[Evaluation, TargetingResult, list[EvaluationRecord]]:
    try:
        evaluation, employees, departments, records = await asyncio.gather(
            client.get_evaluation(evaluation_id),
            client.list_employees(),
            client.list_departments(),
            client.list_evaluation_records(evaluation_id),
        )
    except EvaluationApiError as exc:
        raise upstream_http_error(exc) from exc

    try:
        targeting = resolve_targeting(evaluation, user, employees, departments)
    except ValidationError as exc:
        raise _unprocessable(exc) from exc
    return evaluation, targeting, records


def _apply_ratings(matrix: ResponseMatrix, ratings: dict[str, list[int]]) -> ResponseMatrix:
    for competency, values in ratings.items():
        for index, value in enumerate(values):
            matrix = set_rating(matrix, competency, index, value)
    return matrix


def _targeting_info(targeting: TargetingResult) -> TargetingInfo:
    return TargetingInfo(
        evaluated_user_id=targeting.evaluated_user_id,
        editable=targeting.editable,
        candidates=[EmployeeItem.from_domain(employee) for employee in targeting.candidates],
        department=(
            DepartmentItem.from_domain(targeting.department) if targeting.department else None
        ),
    )


def _unprocessable(exc: Exception) -> HTTPException:
    return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
