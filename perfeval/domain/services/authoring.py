"""
Evaluation template editing.

Each edit returns a new ``Evaluation``; the input is never mutated.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace
from datetime import date

from perfeval.domain.errors import ValidationError
from perfeval.domain.models import (
    Competency,
    CompetencyCategory,
    Evaluation,
    EvaluationType,
    Role,
)

AUTHOR_ROLES = frozenset({Role.ADMIN, Role.MANAGER})


def can_author(role: Role) -> bool:
    return role in AUTHOR_ROLES


def draft_evaluation(
    *,
    name: str,
    department_id: str,
    evaluation_type: str,
    competencies: Iterable[Competency] = (),
    due_date: date | None = None,
    published: bool = False,
) -> Evaluation:
    """
    Build a new evaluation template before it is sent to the API.

    Without competencies the template starts with a single empty one, as the
    editor does. Categories must be known and unique.
    """
    title = name.strip()
    if not title:
        raise ValidationError("Evaluation name cannot be empty")
    if not department_id:
        raise ValidationError("An evaluation belongs to a department")

    evaluation = Evaluation(
        evaluation_id="",
        name=title,
        department_id=department_id,
        evaluation_type=EvaluationType.parse(evaluation_type).value,
        competencies=(),
        due_date=due_date,
        published=published,
    )
    items = tuple(competencies)
    if not items:
        return add_competency(evaluation)

    for item in items:
        evaluation = add_competency(evaluation, _category(item.competency))
        evaluation = _replace_competency(
            evaluation,
            len(evaluation.competencies) - 1,
            Competency(
                competency=item.competency,
                questions=tuple(text.strip() for text in item.questions if text.strip()),
            ),
        )
    return evaluation


def add_competency(
    evaluation: Evaluation,
    category: CompetencyCategory | None = None,
) -> Evaluation:
    """Append an empty competency, by default the first category not yet used."""
    used = {item.competency for item in evaluation.competencies}
    if category is None:
        category = next((item for item in CompetencyCategory if item.value not in used), None)
        if category is None:
            raise ValidationError("Every competency category is already in the evaluation")
    elif category.value in used:
        raise ValidationError(f"Competency {category.value} is already in the evaluation")

    competency = Competency(competency=category.value, questions=())
    return replace(evaluation, competencies=evaluation.competencies + (competency,))


def remove_competency(evaluation: Evaluation, index: int) -> Evaluation:
    _check_index(evaluation, index)
    if len(evaluation.competencies) <= 1:
        raise ValidationError("An evaluation needs at least one competency")
    competencies = evaluation.competencies[:index] + evaluation.competencies[index + 1 :]
    return replace(evaluation, competencies=competencies)


def change_competency_category(evaluation: Evaluation, index: int, category: str) -> Evaluation:
    _check_index(evaluation, index)
    if not CompetencyCategory.contains(category):
        raise ValidationError(f"Unknown competency category: {category!r}")
    # ratings are keyed by category, so it must stay unique within the evaluation
    for position, item in enumerate(evaluation.competencies):
        if position != index and item.competency == category:
            raise ValidationError(f"Competency {category} is already in the evaluation")
    return _replace_competency(
        evaluation, index, replace(evaluation.competencies[index], competency=category)
    )


def add_question(evaluation: Evaluation, index: int, text: str) -> Evaluation:
    _check_index(evaluation, index)
    question = text.strip()
    if not question:
        raise ValidationError("Question text cannot be empty")
    competency = evaluation.competencies[index]
    return _replace_competency(
        evaluation, index, replace(competency, questions=competency.questions + (question,))
    )


def remove_question(evaluation: Evaluation, index: int, question_index: int) -> Evaluation:
    _check_index(evaluation, index)
    competency = evaluation.competencies[index]
    if not 0 <= question_index < len(competency.questions):
        raise ValidationError(f"Question index {question_index} out of range")
    questions = competency.questions[:question_index] + competency.questions[question_index + 1 :]
    return _replace_competency(evaluation, index, replace(competency, questions=questions))


def toggle_published(evaluation: Evaluation) -> Evaluation:
    return replace(evaluation, published=not evaluation.published)


def search_evaluations(evaluations: Iterable[Evaluation], term: str) -> list[Evaluation]:
    """Case-insensitive match on the evaluation name."""
    needle = term.strip().lower()
    return [evaluation for evaluation in evaluations if needle in evaluation.name.lower()]


def published_for_department(
    evaluations: Iterable[Evaluation], department_id: str
) -> list[Evaluation]:
    return [
        evaluation
        for evaluation in evaluations
        if evaluation.department_id == department_id and evaluation.published
    ]


def _replace_competency(evaluation: Evaluation, index: int, competency: Competency) -> Evaluation:
    competencies = list(evaluation.competencies)
    competencies[index] = competency
    return replace(evaluation, competencies=tuple(competencies))


def _check_index(evaluation: Evaluation, index: int) -> None:
    if not 0 <= index < len(evaluation.competencies):
        raise ValidationError(f"Competency index {index} out of range")


def _category(name: str) -> CompetencyCategory:
    if not CompetencyCategory.contains(name):
        raise ValidationError(f"Unknown competency category: {name!r}")
    return CompetencyCategory(name)
