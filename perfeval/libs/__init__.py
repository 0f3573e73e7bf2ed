"""Shared library helpers."""

from perfeval.libs.evaluation_api import (
    Credentials,
    EvaluationApiClient,
    EvaluationApiError,
    EvaluationNotFoundError,
    SessionExpiredError,
    authorize_headers,
)

__all__ = [
    "Credentials",
    "EvaluationApiClient",
    "EvaluationApiError",
    "EvaluationNotFoundError",
    "SessionExpiredError",
    "authorize_headers",
]
