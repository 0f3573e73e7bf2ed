from perfeval.domain.errors import DuplicateSubmissionError, TargetResolutionError, ValidationError
from perfeval.domain.models import (
    Competency,
    CompetencyCategory,
    CompetencyResponse,
    Department,
    Employee,
    Evaluation,
    EvaluationRecord,
    EvaluationType,
    Role,
    SubmissionPayload,
    User,
)

__all__ = [
    "Competency",
    "CompetencyCategory",
    "CompetencyResponse",
    "Department",
    "DuplicateSubmissionError",
    "Employee",
    "Evaluation",
    "EvaluationRecord",
    "EvaluationType",
    "Role",
    "SubmissionPayload",
    "TargetResolutionError",
    "User",
    "ValidationError",
]
