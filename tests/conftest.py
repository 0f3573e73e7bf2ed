from __future__ import annotations

from collections.abc import Iterator
from dataclasses import replace

import pytest
from fastapi.testclient import TestClient
from perfeval.api.deps import get_api_client, get_public_api_client
from perfeval.api.main import app
from perfeval.domain import (
    CompetencyResponse,
    Department,
    Employee,
    Evaluation,
    EvaluationRecord,
    Role,
    SubmissionPayload,
    User,
)
from perfeval.domain.services.aggregation import competency_average, overall_average
from perfeval.libs.evaluation_api import (
    Credentials,
    EvaluationApiError,
    EvaluationNotFoundError,
    SessionExpiredError,
)
from tests.utils import make_departments, make_employees, make_evaluation, make_token


class FakeEvaluationApi:
    """In-memory stand-in for the evaluation API client."""

    base_url = "http://evaluation-api.test"

    def __init__(
        self,
        evaluations: list[Evaluation],
        employees: list[Employee],
        departments: list[Department],
        records: list[EvaluationRecord] | None = None,
        reachable: bool = True,
    ) -> None:
        self.evaluations = {evaluation.evaluation_id: evaluation for evaluation in evaluations}
        self.employees = employees
        self.departments = departments
        self.records = list(records or [])
        self.reachable = reachable
        self.submitted: list[SubmissionPayload] = []
        self.failure: Exception | None = None
        self.accounts: dict[str, tuple[str, User]] = {}

    def _check(self) -> None:
        if self.failure is not None:
            raise self.failure

    async def ping(self) -> bool:
        return self.reachable

    async def login(self, email: str, password: str) -> tuple[Credentials, User]:
        self._check()
        account = self.accounts.get(email)
        if account is None or account[0] != password:
            raise SessionExpiredError("Session expired. Please login again.", 401)
        user = account[1]
        return Credentials(token=make_token(user.user_id, user.role.value.lower())), user

    async def register_user(
        self, *, email: str, password: str, role: Role, name: str | None = None
    ) -> dict:
        self._check()
        if email in self.accounts:
            raise EvaluationApiError("User already exists", 409)
        user = User(
            user_id=f"user-{len(self.accounts) + 1}", email=email, name=name or email, role=role
        )
        self.accounts[email] = (password, user)
        return {"email": email, "role": role.value}

    async def create_evaluation(self, evaluation: Evaluation) -> Evaluation:
        self._check()
        created = replace(evaluation, evaluation_id=f"ev-{len(self.evaluations) + 1}")
        self.evaluations[created.evaluation_id] = created
        return created

    async def list_department_evaluations(self, department_id: str) -> list[Evaluation]:
        self._check()
        return [item for item in self.evaluations.values() if item.department_id == department_id]

    async def get_employee(self, employee_id: str) -> Employee:
        self._check()
        for employee in self.employees:
            if employee.employee_id == employee_id:
                return employee
        raise EvaluationNotFoundError(f"Employee {employee_id} not found", 404)

    async def create_employee(self, employee: Employee) -> Employee:
        self._check()
        created = replace(employee, employee_id=f"emp-{len(self.employees) + 1}")
        self.employees.append(created)
        return created

    async def update_employee(self, employee: Employee) -> Employee:
        current = await self.get_employee(employee.employee_id)
        self.employees[self.employees.index(current)] = employee
        return employee

    async def list_evaluations(self) -> list[Evaluation]:
        self._check()
        return list(self.evaluations.values())

    async def get_evaluation(self, evaluation_id: str) -> Evaluation:
        self._check()
        try:
            return self.evaluations[evaluation_id]
        except KeyError as exc:
            raise EvaluationNotFoundError(f"Evaluation {evaluation_id} not found", 404) from exc

    async def update_evaluation(self, evaluation: Evaluation) -> Evaluation:
        self._check()
        self.evaluations[evaluation.evaluation_id] = evaluation
        return evaluation

    async def list_employees(self) -> list[Employee]:
        self._check()
        return self.employees

    async def list_departments(self) -> list[Department]:
        self._check()
        return self.departments

    async def list_evaluation_records(self, evaluation_id: str) -> list[EvaluationRecord]:
        self._check()
        return [record for record in self.records if record.evaluation_id == evaluation_id]

    async def list_department_records(self, department_id: str) -> list[EvaluationRecord]:
        self._check()
        return [record for record in self.records if record.department_id == department_id]

    async def create_evaluation_record(self, payload: SubmissionPayload) -> EvaluationRecord:
        self._check()
        self.submitted.append(payload)
        results = tuple(
            CompetencyResponse(
                competency=item.competency,
                responses=item.responses,
                average=competency_average(item.responses),
            )
            for item in payload.responses
        )
        record = EvaluationRecord(
            record_id=f"rec-{len(self.records) + 1}",
            evaluation_id=payload.evaluation,
            evaluated_user_id=payload.evaluated_user,
            evaluator_id=payload.evaluator,
            department_id=payload.department,
            results=results,
            overall_average=overall_average(results),
            comments=payload.comments,
            completed=True,
        )
        self.records.append(record)
        return record


@pytest.fixture()
def departments() -> list[Department]:
    return make_departments()


@pytest.fixture()
def employees() -> list[Employee]:
    return make_employees()


@pytest.fixture()
def fake_api(departments: list[Department], employees: list[Employee]) -> FakeEvaluationApi:
    evaluations = [
        make_evaluation("ev-self", "self"),
        make_evaluation("ev-peer", "peer"),
        make_evaluation("ev-mgr", "manager"),
        make_evaluation("ev-draft", "self", published=False),
    ]
    return FakeEvaluationApi(evaluations, employees, departments)


@pytest.fixture()
def test_client(fake_api: FakeEvaluationApi) -> Iterator[TestClient]:
    app.dependency_overrides[get_api_client] = lambda: fake_api
    app.dependency_overrides[get_public_api_client] = lambda: fake_api
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.pop(get_api_client, None)
    app.dependency_overrides.pop(get_public_api_client, None)
