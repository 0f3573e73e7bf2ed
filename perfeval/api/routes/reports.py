from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends
from perfeval.api.deps import get_api_client, require_section, upstream_http_error
from perfeval.api.schemas.reports import CompetencyAverageItem, DepartmentReportResponse
from perfeval.domain import User
from perfeval.domain.services.aggregation import aggregate_department, department_overall_average
from perfeval.libs.evaluation_api import EvaluationApiClient, EvaluationApiError

router = APIRouter(prefix="/reports", tags=["Reports"])
logger = structlog.get_logger(__name__)


@router.get("/departments/{department_id}", response_model=DepartmentReportResponse)
async def department_report(
    department_id: str,
    client: EvaluationApiClient = Depends(get_api_client),  # noqa: B008
    user: User = Depends(require_section("reports")),  # noqa: B008
) -> DepartmentReportResponse:
    """Per-competency averages across every record of a department."""
    try:
        records = await client.list_department_records(department_id)
    except EvaluationApiError as exc:
        raise upstream_http_error(exc) from exc

    averages = aggregate_department(records)
    logger.info(
        "department_report_built",
        department_id=department_id,
        record_count=len(records),
        competency_count=len(averages),
        user_id=user.user_id,
    )
    return DepartmentReportResponse(
        department_id=department_id,
        record_count=len(records),
        completed_count=sum(1 for record in records if record.completed),
        overall_average=department_overall_average(records),
        competencies=[
            CompetencyAverageItem(competency=item.competency, average=item.average)
            for item in averages
        ],
    )
