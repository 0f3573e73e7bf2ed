"""
Client for the evaluation API.

The API owns persistence and the authoritative averages. Credentials are
passed in explicitly and attached per request by ``authorize_headers``.
Idempotent reads are retried with exponential backoff; writes are sent once.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, TypeVar

import httpx
import jwt
import structlog
from perfeval.core.config import get_settings
from perfeval.domain.models import (
    Department,
    Employee,
    Evaluation,
    EvaluationRecord,
    Role,
    SubmissionPayload,
    User,
)
from perfeval.libs.wire import (
    DepartmentWire,
    EmployeeWire,
    EvaluationRecordWire,
    EvaluationWire,
    employee_to_wire,
    evaluation_to_wire,
)

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class EvaluationApiError(Exception):
    """Raised for failed calls to the evaluation API."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class SessionExpiredError(EvaluationApiError):
    """Raised on 401; the caller must send the user back to login."""


class EvaluationNotFoundError(EvaluationApiError):
    """Raised when the requested resource does not exist."""


@dataclass(slots=True, frozen=True)
class Credentials:
    """Bearer token of the user on whose behalf the console calls the API."""

    token: str


def authorize_headers(
    headers: Mapping[str, str], credentials: Credentials | None
) -> dict[str, str]:
    """Return a copy of ``headers`` carrying the bearer token, if any."""
    decorated = dict(headers)
    if credentials is not None and credentials.token:
        decorated["Authorization"] = f"Bearer {credentials.token}"
    return decorated


class EvaluationApiClient:
    """Async client for the evaluation API."""

    def __init__(
        self,
        credentials: Credentials | None = None,
        base_url: str | None = None,
        timeout_seconds: int | None = None,
        max_retries: int | None = None,
        backoff_seconds: float = 1.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        settings = get_settings()
        self.credentials = credentials
        self.base_url = (base_url or settings.evaluation_api_base_url).rstrip("/")
        self.timeout = (
            timeout_seconds
            if timeout_seconds is not None
            else settings.evaluation_api_timeout_seconds
        )
        self.max_retries = max(
            1, max_retries if max_retries is not None else settings.evaluation_api_max_retries
        )
        self.backoff_seconds = backoff_seconds
        self.transport = transport

    # Authentication

    async def login(self, email: str, password: str) -> tuple[Credentials, User]:
        """Exchange email/password for a token and the normalised identity."""
        data = await self._request(
            "POST", "/api/auth/login", json={"email": email, "password": password}
        )
        token = data["access_token"]
        user_data = data.get("user") or {}
        # the token is verified by the API on every call; here we only read the subject
        claims = jwt.decode(token, options={"verify_signature": False})
        user = User(
            user_id=str(claims.get("sub", "")),
            email=user_data.get("email", ""),
            name=user_data.get("name") or user_data.get("email", ""),
            role=Role.normalize(user_data.get("role", "")),
        )
        await logger.ainfo("evaluation_api_login", user_id=user.user_id, role=user.role.value)
        return Credentials(token=token), user

    async def register_user(
        self, *, email: str, password: str, role: Role, name: str | None = None
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {"email": email, "password": password, "role": role.value}
        if name:
            payload["name"] = name
        return await self._request("POST", "/api/auth/register", json=payload)

    # Departments

    async def list_departments(self) -> list[Department]:
        data = await self._request("GET", "/api/departments")
        return _parse_list(data, lambda item: DepartmentWire.model_validate(item).to_domain())

    # Evaluations

    async def list_evaluations(self) -> list[Evaluation]:
        data = await self._request("GET", "/api/evaluations")
        return _parse_list(data, _evaluation)

    async def get_evaluation(self, evaluation_id: str) -> Evaluation:
        data = await self._request("GET", f"/api/evaluations/{evaluation_id}")
        if not data:
            raise EvaluationNotFoundError(f"Evaluation {evaluation_id} not found", 404)
        return _evaluation(data)

    async def list_department_evaluations(self, department_id: str) -> list[Evaluation]:
        data = await self._request("GET", f"/api/evaluations/department/{department_id}")
        return _parse_list(data, _evaluation)

    async def create_evaluation(self, evaluation: Evaluation) -> Evaluation:
        data = await self._request("POST", "/api/evaluations", json=evaluation_to_wire(evaluation))
        return _evaluation(data)

    async def update_evaluation(self, evaluation: Evaluation) -> Evaluation:
        data = await self._request(
            "PUT",
            f"/api/evaluations/{evaluation.evaluation_id}",
            json=evaluation_to_wire(evaluation),
        )
        return _evaluation(data)

    # Employees

    async def list_employees(self) -> list[Employee]:
        data = await self._request("GET", "/api/employees")
        return _parse_list(data, _employee)

    async def get_employee(self, employee_id: str) -> Employee:
        data = await self._request("GET", f"/api/employees/{employee_id}")
        if not data:
            raise EvaluationNotFoundError(f"Employee {employee_id} not found", 404)
        return _employee(data)

    async def create_employee(self, employee: Employee) -> Employee:
        data = await self._request("POST", "/api/employees", json=employee_to_wire(employee))
        return _employee(data)

    async def update_employee(self, employee: Employee) -> Employee:
        data = await self._request(
            "PUT", f"/api/employees/{employee.employee_id}", json=employee_to_wire(employee)
        )
        return _employee(data)

    # Evaluation records

    async def create_evaluation_record(self, payload: SubmissionPayload) -> EvaluationRecord:
        data = await self._request("POST", "/api/evaluation-records", json=payload.to_wire())
        record = _record(data)
        await logger.ainfo(
            "evaluation_record_created",
            record_id=record.record_id,
            evaluation_id=payload.evaluation,
            evaluator_id=payload.evaluator,
        )
        return record

    async def list_department_records(self, department_id: str) -> list[EvaluationRecord]:
        data = await self._request("GET", f"/api/evaluation-records/department/{department_id}")
        return _parse_list(data, _record)

    async def list_evaluation_records(self, evaluation_id: str) -> list[EvaluationRecord]:
        data = await self._request("GET", f"/api/evaluation-records/evaluation/{evaluation_id}")
        return _parse_list(data, _record)

    async def ping(self) -> bool:
        """Cheap reachability probe used by the health endpoint."""
        try:
            async with self._client() as client:
                response = await client.get(f"{self.base_url}/api/departments")
        except httpx.HTTPError:
            return False
        return response.status_code < 500

    # Transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
    ) -> Any:
        """Send a request and unwrap the ``data`` envelope."""
        headers = authorize_headers({"Content-Type": "application/json"}, self.credentials)
        attempts = self.max_retries if method == "GET" else 1
        last_error: EvaluationApiError | None = None

        for attempt in range(attempts):
            try:
                async with self._client() as client:
                    response = await client.request(
                        method, f"{self.base_url}{path}", headers=headers, json=json
                    )
            except httpx.TimeoutException:
                last_error = EvaluationApiError(f"Request timed out (attempt {attempt + 1})")
                await logger.awarning(
                    "evaluation_api_timeout",
                    method=method,
                    path=path,
                    attempt=attempt + 1,
                    timeout_seconds=self.timeout,
                )
            except httpx.RequestError as exc:
                last_error = EvaluationApiError(f"Request failed: {exc}")
                await logger.awarning(
                    "evaluation_api_request_error",
                    method=method,
                    path=path,
                    error=str(exc),
                    attempt=attempt + 1,
                )
            else:
                if response.status_code < 400:
                    return _unwrap(response)
                if response.status_code < 500:
                    raise _client_error(response)
                last_error = EvaluationApiError(
                    _error_message(response), status_code=response.status_code
                )
                await logger.awarning(
                    "evaluation_api_server_error",
                    method=method,
                    path=path,
                    status_code=response.status_code,
                    attempt=attempt + 1,
                )

            if attempt < attempts - 1:
                await asyncio.sleep(self.backoff_seconds * 2**attempt)

        raise last_error or EvaluationApiError("All retries exhausted")


def _unwrap(response: httpx.Response) -> Any:
    if response.status_code == 204 or not response.content:
        return None
    try:
        body = response.json()
    except ValueError as exc:
        raise EvaluationApiError(
            "Evaluation API response was not valid JSON", status_code=response.status_code
        ) from exc
    if isinstance(body, dict) and "data" in body:
        return body["data"]
    return body


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"Evaluation API error {response.status_code}"


def _client_error(response: httpx.Response) -> EvaluationApiError:
    message = _error_message(response)
    if response.status_code == 401:
        logger.warning("evaluation_api_session_expired")
        return SessionExpiredError("Session expired. Please login again.", status_code=401)
    if response.status_code == 404:
        return EvaluationNotFoundError(message, status_code=404)
    return EvaluationApiError(message, status_code=response.status_code)


def _parse_list(data: Any, parse: Callable[[Any], T]) -> list[T]:
    return [parse(item) for item in data or []]


def _evaluation(item: Any) -> Evaluation:
    return EvaluationWire.model_validate(item).to_domain()


def _employee(item: Any) -> Employee:
    return EmployeeWire.model_validate(item).to_domain()


def _record(item: Any) -> EvaluationRecord:
    return EvaluationRecordWire.model_validate(item).to_domain()
