from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any

from perfeval.domain.errors import ValidationError


class Role(str, Enum):
    ADMIN = "Admin"
    MANAGER = "Manager"
    EMPLOYEE = "Employee"

    @classmethod
    def normalize(cls, value: str) -> Role:
        """Map any casing of a role name (``"admin"``, ``"MANAGER"``) onto the enum."""
        candidate = value.strip().capitalize()
        for role in cls:
            if role.value == candidate:
                return role
        raise ValidationError(f"Unsupported role: {value!r}")


class EvaluationType(str, Enum):
    SELF = "self"
    PEER = "peer"
    MANAGER = "manager"

    @classmethod
    def parse(cls, value: str) -> EvaluationType:
        try:
            return cls(value)
        except ValueError as exc:
            raise ValidationError(f"Unknown evaluation type: {value!r}") from exc


class CompetencyCategory(str, Enum):
    COMMUNICATION = "COMMUNICATION"
    TEAMWORK = "TEAMWORK"
    LEADERSHIP = "LEADERSHIP"
    TECHNICAL_SKILL = "TECHNICAL_SKILL"
    ADAPTABILITY = "ADAPTABILITY"

    @classmethod
    def contains(cls, value: str) -> bool:
        return value in {category.value for category in cls}


@dataclass(slots=True)
class User:
    """Represents the authenticated actor using the console."""

    user_id: str
    email: str = ""
    name: str = ""
    role: Role = Role.EMPLOYEE


@dataclass(slots=True, frozen=True)
class Competency:
    """A named group of rating questions inside an evaluation."""

    competency: str
    questions: tuple[str, ...] = ()


@dataclass(slots=True, frozen=True)
class Evaluation:
    """An evaluation template published to a department."""

    evaluation_id: str
    name: str
    department_id: str
    evaluation_type: str
    competencies: tuple[Competency, ...] = ()
    due_date: date | None = None
    published: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(slots=True, frozen=True)
class Department:
    department_id: str
    name: str
    manager_id: str | None = None
    manager_email: str = ""
    is_active: bool = True


@dataclass(slots=True, frozen=True)
class Employee:
    employee_id: str
    name: str
    department_id: str
    user_id: str | None = None
    position: str = ""
    is_remote: bool = False
    email: str = ""


@dataclass(slots=True, frozen=True)
class CompetencyResponse:
    """Ratings given for one competency, one per question."""

    competency: str
    responses: tuple[int, ...]
    average: float | None = None

    def to_wire(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "competency": self.competency,
            "responses": list(self.responses),
        }
        if self.average is not None:
            payload["average"] = self.average
        return payload


@dataclass(slots=True, frozen=True)
class EvaluationRecord:
    """A submitted evaluation as returned by the evaluation API."""

    record_id: str
    evaluation_id: str
    evaluated_user_id: str
    evaluator_id: str | None
    department_id: str
    results: tuple[CompetencyResponse, ...] = ()
    overall_average: float | None = None
    comments: str = ""
    completed: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(slots=True, frozen=True)
class SubmissionPayload:
    """The record creation request handed to the data-access layer."""

    evaluation: str
    evaluated_user: str
    evaluator: str
    department: str
    responses: tuple[CompetencyResponse, ...] = ()
    comments: str = ""

    def to_wire(self) -> dict[str, Any]:
        return {
            "evaluation": self.evaluation,
            "evaluatedUser": self.evaluated_user,
            "evaluator": self.evaluator,
            "department": self.department,
            "responses": [
                {"competency": item.competency, "responses": list(item.responses)}
                for item in self.responses
            ],
            "comments": self.comments,
        }
