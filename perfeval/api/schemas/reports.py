from __future__ import annotations

from pydantic import BaseModel


class CompetencyAverageItem(BaseModel):
    competency: str
    average: float


class DepartmentReportResponse(BaseModel):
    department_id: str
    record_count: int
    completed_count: int
    overall_average: float
    competencies: list[CompetencyAverageItem]
