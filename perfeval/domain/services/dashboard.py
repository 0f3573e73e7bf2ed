from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from perfeval.domain.models import (
    Department,
    Employee,
    Evaluation,
    EvaluationRecord,
    Role,
    User,
)
from perfeval.domain.services.authoring import published_for_department
from perfeval.domain.services.targeting import find_acting_employee, find_department


@dataclass(slots=True, frozen=True)
class DashboardSummary:
    role: Role
    department: Department | None
    active_evaluations: int
    completed_records: int
    employee_count: int
    available_evaluations: tuple[Evaluation, ...]


def dashboard_department(
    user: User,
    employees: Sequence[Employee],
    departments: Sequence[Department],
) -> Department | None:
    """Managers see the department they lead; everyone else their own."""
    if user.role is Role.MANAGER:
        managed = next(
            (department for department in departments if department.manager_id == user.user_id),
            None,
        )
        if managed is not None:
            return managed

    employee = find_acting_employee(user, employees)
    if employee is None:
        return None
    return find_department(employee.department_id, departments)


def build_dashboard(
    user: User,
    evaluations: Sequence[Evaluation],
    employees: Sequence[Employee],
    departments: Sequence[Department],
    department_records: Sequence[EvaluationRecord] = (),
) -> DashboardSummary:
    department = dashboard_department(user, employees, departments)
    available: tuple[Evaluation, ...] = ()
    if department is not None:
        available = tuple(published_for_department(evaluations, department.department_id))

    return DashboardSummary(
        role=user.role,
        department=department,
        active_evaluations=sum(1 for evaluation in evaluations if evaluation.published),
        completed_records=sum(1 for record in department_records if record.completed),
        employee_count=len(employees),
        available_evaluations=available,
    )
