from __future__ import annotations


class ValidationError(Exception):
    """Raised when a domain function receives malformed input."""


class TargetResolutionError(Exception):
    """Raised when a submission has no resolvable evaluated user."""


class DuplicateSubmissionError(Exception):
    """Raised when the evaluator already submitted a record for the evaluation."""
