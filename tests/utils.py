from __future__ import annotations

from datetime import date

from perfeval.core.auth import create_access_token
from perfeval.domain import (
    Competency,
    CompetencyResponse,
    Department,
    Employee,
    Evaluation,
    EvaluationRecord,
    Role,
    User,
)

ENGINEERING = "dep-eng"
OPERATIONS = "dep-ops"
ENGINEERING_MANAGER = "user-mgr"

COMPETENCIES = (
    Competency("COMMUNICATION", ("Explains ideas clearly", "Listens actively")),
    Competency(
        "TEAMWORK",
        ("Shares knowledge", "Supports colleagues", "Resolves conflicts"),
    ),
)


def make_token(user_id: str, role: str = "employee", email: str | None = None) -> str:
    """Sign a token the way the evaluation API does (lower-case role claim)."""
    return create_access_token(user_id, role=role, email=email or f"{user_id}@example.com")


def auth_headers(user_id: str, role: str = "employee") -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(user_id, role)}"}


def make_user(user_id: str, role: Role = Role.EMPLOYEE) -> User:
    return User(user_id=user_id, email=f"{user_id}@example.com", name=user_id, role=role)


def make_departments() -> list[Department]:
    return [
        Department(ENGINEERING, "Engineering", manager_id=ENGINEERING_MANAGER),
        Department(OPERATIONS, "Operations", manager_id="user-ops-mgr"),
    ]


def make_employees() -> list[Employee]:
    return [
        Employee("emp-1", "Ana", ENGINEERING, user_id="user-ana", position="Developer"),
        Employee("emp-2", "Beto", ENGINEERING, user_id="user-beto", position="Developer"),
        Employee("emp-3", "Carla", ENGINEERING, user_id=None, position="Intern"),
        Employee("emp-4", "Dario", OPERATIONS, user_id="user-dario", position="Analyst"),
    ]


def make_evaluation(
    evaluation_id: str = "ev-self",
    evaluation_type: str = "self",
    department_id: str = ENGINEERING,
    published: bool = True,
    competencies: tuple[Competency, ...] = COMPETENCIES,
) -> Evaluation:
    return Evaluation(
        evaluation_id=evaluation_id,
        name=f"Q3 {evaluation_type} review",
        department_id=department_id,
        evaluation_type=evaluation_type,
        competencies=competencies,
        due_date=date(2026, 12, 31),
        published=published,
    )


def make_record(
    record_id: str,
    results: list[tuple[str, float | None]],
    *,
    evaluation_id: str = "ev-self",
    evaluator_id: str | None = "user-ana",
    completed: bool = True,
    overall_average: float | None = None,
) -> EvaluationRecord:
    return EvaluationRecord(
        record_id=record_id,
        evaluation_id=evaluation_id,
        evaluated_user_id="user-ana",
        evaluator_id=evaluator_id,
        department_id=ENGINEERING,
        results=tuple(
            CompetencyResponse(competency=name, responses=(), average=average)
            for name, average in results
        ),
        overall_average=overall_average,
        completed=completed,
    )
