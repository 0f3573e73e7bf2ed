"""
Targeting rules for evaluation records.

Decides, for an evaluation and the acting user, who is being evaluated,
whether that choice is open to the user, and which colleagues may be picked
for peer evaluations. Everything here works on read-only snapshots fetched
by the caller.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

import structlog
from perfeval.domain.errors import ValidationError
from perfeval.domain.models import (
    Department,
    Employee,
    Evaluation,
    EvaluationRecord,
    EvaluationType,
    User,
)

logger = structlog.get_logger(__name__)


@dataclass(slots=True, frozen=True)
class TargetingResult:
    """Outcome of resolving the evaluated party for an evaluation."""

    evaluation_type: EvaluationType
    evaluated_user_id: str | None
    editable: bool
    candidates: tuple[Employee, ...]
    department: Department | None
    acting_employee: Employee | None = None

    @property
    def resolved(self) -> bool:
        """True when a submission can proceed without a manual selection."""
        return self.evaluated_user_id is not None


def find_acting_employee(user: User, employees: Iterable[Employee]) -> Employee | None:
    return next((employee for employee in employees if employee.user_id == user.user_id), None)


def find_department(department_id: str, departments: Iterable[Department]) -> Department | None:
    return next(
        (department for department in departments if department.department_id == department_id),
        None,
    )


def resolve_targeting(
    evaluation: Evaluation,
    acting_user: User,
    employees: Sequence[Employee],
    departments: Sequence[Department],
) -> TargetingResult:
    """
    Resolve who is evaluated and who may be selected.

    - self: the acting user when they have an employee record, else the
      department manager
    - manager: always the department manager
    - peer: left to the caller, chosen from the department colleagues

    An unknown department yields ``evaluated_user_id=None`` instead of an
    error so the caller can block the submission.
    """
    evaluation_type = EvaluationType.parse(evaluation.evaluation_type)

    acting_employee = find_acting_employee(acting_user, employees)
    department = find_department(evaluation.department_id, departments)
    candidates = tuple(
        _peer_candidates(evaluation.department_id, acting_user, acting_employee, employees)
    )
    manager_id = department.manager_id if department is not None else None

    if evaluation_type is EvaluationType.SELF:
        evaluated_user_id = acting_user.user_id if acting_employee is not None else manager_id
        editable = False
    elif evaluation_type is EvaluationType.MANAGER:
        evaluated_user_id = manager_id
        editable = False
    else:
        evaluated_user_id = None
        editable = True

    logger.debug(
        "targeting_resolved",
        evaluation_id=evaluation.evaluation_id,
        evaluation_type=evaluation_type.value,
        acting_user_id=acting_user.user_id,
        department_found=department is not None,
        evaluated_user_id=evaluated_user_id,
        candidate_count=len(candidates),
    )

    return TargetingResult(
        evaluation_type=evaluation_type,
        evaluated_user_id=evaluated_user_id,
        editable=editable,
        candidates=candidates,
        department=department,
        acting_employee=acting_employee,
    )


def _peer_candidates(
    department_id: str,
    acting_user: User,
    acting_employee: Employee | None,
    employees: Iterable[Employee],
) -> Iterable[Employee]:
    for employee in employees:
        if employee.department_id != department_id:
            continue
        if acting_employee is not None:
            if employee.employee_id == acting_employee.employee_id:
                continue
        elif employee.user_id == acting_user.user_id:
            continue
        yield employee


def validate_selection(result: TargetingResult, evaluated_user_id: str | None) -> str:
    """
    Check the evaluated user picked by the caller against the targeting result.

    Returns the identity to submit. For fixed targets a missing selection
    falls back to the resolved identity.
    """
    if not result.editable:
        if evaluated_user_id is not None and evaluated_user_id != result.evaluated_user_id:
            raise ValidationError(
                f"Evaluated user is fixed for {result.evaluation_type.value} evaluations"
            )
        if result.evaluated_user_id is None:
            raise ValidationError("Evaluated user could not be resolved")
        return result.evaluated_user_id

    if not evaluated_user_id:
        raise ValidationError("An evaluated employee must be selected")
    allowed = {candidate.user_id for candidate in result.candidates if candidate.user_id}
    if evaluated_user_id not in allowed:
        raise ValidationError(f"User {evaluated_user_id} is not a selectable colleague")
    return evaluated_user_id


def has_already_responded(
    records: Iterable[EvaluationRecord],
    evaluator_id: str,
    evaluation_id: str | None = None,
) -> bool:
    """Whether the evaluator already has a record (optionally for one evaluation).

    Only as fresh as the fetched snapshot; the evaluation API has the final
    word on duplicates.
    """
    return any(
        record.evaluator_id == evaluator_id
        and (evaluation_id is None or record.evaluation_id == evaluation_id)
        for record in records
    )
