from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, Query, status
from perfeval.api.deps import get_api_client, require_section, upstream_http_error
from perfeval.api.schemas.common import EmployeeItem
from perfeval.api.schemas.employees import EmployeeWriteRequest
from perfeval.domain import Employee, User
from perfeval.libs.evaluation_api import EvaluationApiClient, EvaluationApiError

router = APIRouter(prefix="/employees", tags=["Employees"])
logger = structlog.get_logger(__name__)

require_admin = require_section("employees")


@router.get("", response_model=list[EmployeeItem])
async def list_employees(
    department_id: str | None = Query(None, description="Only this department's employees"),
    client: EvaluationApiClient = Depends(get_api_client),  # noqa: B008
    _: User = Depends(require_admin),  # noqa: B008
) -> list[EmployeeItem]:
    try:
        employees = await client.list_employees()
    except EvaluationApiError as exc:
        raise upstream_http_error(exc) from exc

    if department_id:
        employees = [item for item in employees if item.department_id == department_id]
    return [EmployeeItem.from_domain(employee) for employee in employees]


@router.get("/{employee_id}", response_model=EmployeeItem)
async def get_employee(
    employee_id: str,
    client: EvaluationApiClient = Depends(get_api_client),  # noqa: B008
    _: User = Depends(require_admin),  # noqa: B008
) -> EmployeeItem:
    try:
        employee = await client.get_employee(employee_id)
    except EvaluationApiError as exc:
        raise upstream_http_error(exc) from exc
    return EmployeeItem.from_domain(employee)


@router.post("", response_model=EmployeeItem, status_code=status.HTTP_201_CREATED)
async def create_employee(
    payload: EmployeeWriteRequest,
    client: EvaluationApiClient = Depends(get_api_client),  # noqa: B008
    user: User = Depends(require_admin),  # noqa: B008
) -> EmployeeItem:
    try:
        created = await client.create_employee(_employee(payload))
    except EvaluationApiError as exc:
        raise upstream_http_error(exc) from exc

    logger.info(
        "employee_created",
        employee_id=created.employee_id,
        department_id=created.department_id,
        user_id=user.user_id,
    )
    return EmployeeItem.from_domain(created)


@router.put("/{employee_id}", response_model=EmployeeItem)
async def update_employee(
    employee_id: str,
    payload: EmployeeWriteRequest,
    client: EvaluationApiClient = Depends(get_api_client),  # noqa: B008
    _: User = Depends(require_admin),  # noqa: B008
) -> EmployeeItem:
    try:
        updated = await client.update_employee(_employee(payload, employee_id))
    except EvaluationApiError as exc:
        raise upstream_http_error(exc) from exc
    return EmployeeItem.from_domain(updated)


def _employee(payload: EmployeeWriteRequest, employee_id: str = "") -> Employee:
    return Employee(
        employee_id=employee_id,
        name=payload.name.strip(),
        department_id=payload.department_id,
        user_id=payload.user_id or None,
        position=payload.position.strip(),
        is_remote=payload.is_remote,
    )
