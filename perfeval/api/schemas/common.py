from __future__ import annotations

from perfeval.domain.models import Competency, Department, Employee, Evaluation, User
from perfeval.domain.reference_data import competency_label
from pydantic import BaseModel


class UserItem(BaseModel):
    id: str
    email: str
    name: str
    role: str

    @classmethod
    def from_domain(cls, user: User) -> UserItem:
        return cls(id=user.user_id, email=user.email, name=user.name, role=user.role.value)


class DepartmentItem(BaseModel):
    id: str
    name: str
    manager_id: str | None = None
    is_active: bool = True

    @classmethod
    def from_domain(cls, department: Department) -> DepartmentItem:
        return cls(
            id=department.department_id,
            name=department.name,
            manager_id=department.manager_id,
            is_active=department.is_active,
        )


class EmployeeItem(BaseModel):
    id: str
    name: str
    user_id: str | None = None
    department_id: str
    position: str = ""
    is_remote: bool = False

    @classmethod
    def from_domain(cls, employee: Employee) -> EmployeeItem:
        return cls(
            id=employee.employee_id,
            name=employee.name,
            user_id=employee.user_id,
            department_id=employee.department_id,
            position=employee.position,
            is_remote=employee.is_remote,
        )


class CompetencyItem(BaseModel):
    competency: str
    label: str
    questions: list[str]

    @classmethod
    def from_domain(cls, competency: Competency) -> CompetencyItem:
        return cls(
            competency=competency.competency,
            label=competency_label(competency.competency),
            questions=list(competency.questions),
        )


class EvaluationItem(BaseModel):
    id: str
    name: str
    department_id: str
    evaluation_type: str
    due_date: str | None = None
    published: bool
    competencies: list[CompetencyItem]

    @classmethod
    def from_domain(cls, evaluation: Evaluation) -> EvaluationItem:
        return cls(
            id=evaluation.evaluation_id,
            name=evaluation.name,
            department_id=evaluation.department_id,
            evaluation_type=evaluation.evaluation_type,
            due_date=evaluation.due_date.isoformat() if evaluation.due_date else None,
            published=evaluation.published,
            competencies=[CompetencyItem.from_domain(item) for item in evaluation.competencies],
        )
