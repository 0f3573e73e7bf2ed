"""
Wire models for the evaluation API.

The API speaks camelCase JSON with Mongo-style ``_id`` keys. These pydantic
models absorb that shape and hand plain domain dataclasses to the rest of the
console.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from perfeval.domain.models import (
    Competency,
    CompetencyResponse,
    Department,
    Employee,
    Evaluation,
    EvaluationRecord,
)
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

_ID = AliasChoices("_id", "id")


def _reference(value: Any) -> Any:
    # populated references arrive as nested documents
    if isinstance(value, dict):
        return value.get("_id") or value.get("id")
    return value


class WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class CompetencyWire(WireModel):
    competency: str
    questions: list[str] = Field(default_factory=list)

    def to_domain(self) -> Competency:
        return Competency(competency=self.competency, questions=tuple(self.questions))


class EvaluationWire(WireModel):
    id: str = Field(validation_alias=_ID)
    name: str
    department: str
    evaluation_type: str = Field(validation_alias="evaluationType")
    competencies: list[CompetencyWire] = Field(default_factory=list)
    due_date: date | None = Field(default=None, validation_alias="dueDate")
    published: bool = False
    created_at: datetime | None = Field(default=None, validation_alias="createdAt")
    updated_at: datetime | None = Field(default=None, validation_alias="updatedAt")

    @field_validator("department", mode="before")
    @classmethod
    def department_reference(cls, value: Any) -> Any:
        return _reference(value)

    @field_validator("due_date", mode="before")
    @classmethod
    def date_part(cls, value: Any) -> Any:
        if isinstance(value, str) and len(value) > 10:
            return value[:10]
        return value

    def to_domain(self) -> Evaluation:
        return Evaluation(
            evaluation_id=self.id,
            name=self.name,
            department_id=self.department,
            evaluation_type=self.evaluation_type,
            competencies=tuple(item.to_domain() for item in self.competencies),
            due_date=self.due_date,
            published=self.published,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class ManagerWire(WireModel):
    id: str = Field(validation_alias=_ID)
    email: str = ""
    role: str | None = None


class DepartmentWire(WireModel):
    id: str = Field(validation_alias=_ID)
    name: str
    manager: ManagerWire | None = None
    is_active: bool = Field(default=True, validation_alias="isActive")

    @field_validator("manager", mode="before")
    @classmethod
    def manager_reference(cls, value: Any) -> Any:
        if isinstance(value, str):
            return {"_id": value}
        return value

    def to_domain(self) -> Department:
        return Department(
            department_id=self.id,
            name=self.name,
            manager_id=self.manager.id if self.manager else None,
            manager_email=self.manager.email if self.manager else "",
            is_active=self.is_active,
        )


class EmployeeWire(WireModel):
    id: str = Field(validation_alias=_ID)
    name: str
    department: str
    user: str | None = None
    position: str = ""
    is_remote: bool = Field(default=False, validation_alias="isRemote")
    email: str | None = None

    @field_validator("department", "user", mode="before")
    @classmethod
    def references(cls, value: Any) -> Any:
        return _reference(value)

    def to_domain(self) -> Employee:
        return Employee(
            employee_id=self.id,
            name=self.name,
            department_id=self.department,
            user_id=self.user or None,
            position=self.position,
            is_remote=self.is_remote,
            email=self.email or "",
        )


class CompetencyResponseWire(WireModel):
    competency: str
    responses: list[int] = Field(default_factory=list)
    average: float | None = None

    def to_domain(self) -> CompetencyResponse:
        return CompetencyResponse(
            competency=self.competency,
            responses=tuple(self.responses),
            average=self.average,
        )


class EvaluationRecordWire(WireModel):
    id: str = Field(validation_alias=_ID)
    evaluation: str
    evaluated_user: str = Field(validation_alias="evaluatedUser")
    evaluator: str | None = None
    department: str
    results: list[CompetencyResponseWire] | None = None
    responses: list[CompetencyResponseWire] | None = None
    overall_average: float | None = Field(default=None, validation_alias="overallAverage")
    comments: str | None = None
    completed: bool = False
    created_at: datetime | None = Field(default=None, validation_alias="createdAt")
    updated_at: datetime | None = Field(default=None, validation_alias="updatedAt")

    @field_validator("evaluation", "evaluated_user", "evaluator", "department", mode="before")
    @classmethod
    def references(cls, value: Any) -> Any:
        return _reference(value)

    def to_domain(self) -> EvaluationRecord:
        # freshly created records echo "responses"; aggregated ones carry "results"
        results = self.results if self.results is not None else self.responses or []
        return EvaluationRecord(
            record_id=self.id,
            evaluation_id=self.evaluation,
            evaluated_user_id=self.evaluated_user,
            evaluator_id=self.evaluator,
            department_id=self.department,
            results=tuple(item.to_domain() for item in results),
            overall_average=self.overall_average,
            comments=self.comments or "",
            completed=self.completed,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


def evaluation_to_wire(evaluation: Evaluation) -> dict[str, Any]:
    """Serialise an evaluation for create/update requests."""
    return {
        "name": evaluation.name,
        "department": evaluation.department_id,
        "evaluationType": evaluation.evaluation_type,
        "competencies": [
            {"competency": item.competency, "questions": list(item.questions)}
            for item in evaluation.competencies
        ],
        "dueDate": evaluation.due_date.isoformat() if evaluation.due_date else None,
        "published": evaluation.published,
    }


def employee_to_wire(employee: Employee) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "name": employee.name,
        "department": employee.department_id,
        "position": employee.position,
        "isRemote": employee.is_remote,
    }
    if employee.user_id:
        payload["user"] = employee.user_id
    return payload
