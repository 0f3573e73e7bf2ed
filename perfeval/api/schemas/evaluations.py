from __future__ import annotations

from datetime import date

from perfeval.api.schemas.common import DepartmentItem, EmployeeItem, EvaluationItem
from perfeval.domain.models import CompetencyCategory
from pydantic import BaseModel, Field


class RatingOption(BaseModel):
    value: int
    label: str


class TargetingInfo(BaseModel):
    evaluated_user_id: str | None
    editable: bool
    candidates: list[EmployeeItem]
    department: DepartmentItem | None


class EvaluationFormResponse(BaseModel):
    evaluation: EvaluationItem
    targeting: TargetingInfo
    responses: dict[str, list[int]] = Field(
        ..., description="Default ratings per competency, one per question"
    )
    rating_options: list[RatingOption]
    already_responded: bool
    can_edit: bool = Field(..., description="Whether the user may edit this template")


# --- Authoring ---


class CompetencyInput(BaseModel):
    competency: CompetencyCategory
    questions: list[str] = Field(default_factory=list)


class EvaluationCreateRequest(BaseModel):
    name: str = Field(..., min_length=1)
    department_id: str = Field(..., min_length=1)
    evaluation_type: str = Field(..., description="self, peer or manager")
    due_date: date | None = None
    published: bool = False
    competencies: list[CompetencyInput] = Field(
        default_factory=list, description="Starts with one empty competency when omitted"
    )


class CompetencyCreateRequest(BaseModel):
    category: CompetencyCategory | None = Field(
        None, description="Defaults to the first category not yet in the evaluation"
    )


class CompetencyUpdateRequest(BaseModel):
    category: str


class QuestionCreateRequest(BaseModel):
    text: str = Field(..., min_length=1)


# --- Records ---


class RecordCreateRequest(BaseModel):
    evaluated_user_id: str | None = Field(
        None,
        description=(
            "Required for peer evaluations; when the target is fixed it may be omitted, "
            "and any other id is rejected"
        ),
    )
    responses: dict[str, list[int]] = Field(
        default_factory=dict, description="Ratings per competency; omitted cells keep the default"
    )
    comments: str = ""


class RatingPreviewRequest(BaseModel):
    fill: int | None = Field(None, description="Rating applied to every question first")
    responses: dict[str, list[int]] = Field(default_factory=dict)


class CompetencyResult(BaseModel):
    competency: str
    responses: list[int]
    average: float | None = None


class RatingPreviewResponse(BaseModel):
    results: list[CompetencyResult]
    overall_average: float


class RecordCreateResponse(BaseModel):
    id: str
    evaluation_id: str
    evaluated_user_id: str
    department_id: str
    results: list[CompetencyResult]
    overall_average: float | None = None
    completed: bool
