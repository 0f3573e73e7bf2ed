from __future__ import annotations

import asyncio

from fastapi import APIRouter, Depends
from perfeval.api.deps import get_api_client, get_current_user, upstream_http_error
from perfeval.api.schemas.common import DepartmentItem, EvaluationItem
from perfeval.api.schemas.dashboard import DashboardResponse
from perfeval.domain import User
from perfeval.domain.services.dashboard import build_dashboard, dashboard_department
from perfeval.libs.evaluation_api import EvaluationApiClient, EvaluationApiError

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("", response_model=DashboardResponse)
async def get_dashboard(
    client: EvaluationApiClient = Depends(get_api_client),  # noqa: B008
    user: User = Depends(get_current_user),  # noqa: B008
) -> DashboardResponse:
    try:
        evaluations, employees, departments = await asyncio.gather(
            client.list_evaluations(),
            client.list_employees(),
            client.list_departments(),
        )
        department = dashboard_department(user, employees, departments)
        records = (
            await client.list_department_records(department.department_id)
            if department is not None
            else []
        )
    except EvaluationApiError as exc:
        raise upstream_http_error(exc) from exc

    summary = build_dashboard(user, evaluations, employees, departments, records)
    return DashboardResponse(
        role=summary.role.value,
        department=(
            DepartmentItem.from_domain(summary.department) if summary.department else None
        ),
        active_evaluations=summary.active_evaluations,
        completed_records=summary.completed_records,
        employee_count=summary.employee_count,
        available_evaluations=[
            EvaluationItem.from_domain(evaluation) for evaluation in summary.available_evaluations
        ],
    )
