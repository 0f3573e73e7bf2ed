from __future__ import annotations

from perfeval.api.schemas.common import DepartmentItem, EvaluationItem
from pydantic import BaseModel


class DashboardResponse(BaseModel):
    role: str
    department: DepartmentItem | None
    active_evaluations: int
    completed_records: int
    employee_count: int
    available_evaluations: list[EvaluationItem]
