from __future__ import annotations

from collections.abc import Iterable, Mapping

from perfeval.domain.errors import ValidationError
from perfeval.domain.models import Competency
from perfeval.domain.reference_data import DEFAULT_RATING, MAX_RATING, MIN_RATING, is_valid_rating

# competency name -> one rating per question, in question order
ResponseMatrix = Mapping[str, tuple[int, ...]]


def init_matrix(competencies: Iterable[Competency]) -> dict[str, tuple[int, ...]]:
    """Seed every question of every competency with the neutral rating."""
    matrix: dict[str, tuple[int, ...]] = {}
    for competency in competencies:
        if competency.competency in matrix:
            raise ValidationError(f"Competency {competency.competency} appears more than once")
        matrix[competency.competency] = (DEFAULT_RATING,) * len(competency.questions)
    return matrix


def set_rating(
    matrix: ResponseMatrix,
    competency: str,
    question_index: int,
    value: int,
) -> dict[str, tuple[int, ...]]:
    """
    Return a copy of ``matrix`` with a single cell changed.

    The tuples of the other competencies are carried over as-is, so callers
    can detect untouched entries by identity.
    """
    if competency not in matrix:
        raise ValidationError(f"Unknown competency: {competency!r}")

    ratings = matrix[competency]
    if (
        isinstance(question_index, bool)
        or not isinstance(question_index, int)
        or not 0 <= question_index < len(ratings)
    ):
        raise ValidationError(
            f"Question index {question_index} out of range for {competency} "
            f"({len(ratings)} questions)"
        )
    if not is_valid_rating(value):
        raise ValidationError(f"Rating must be an integer between {MIN_RATING} and {MAX_RATING}")

    updated = dict(matrix)
    updated[competency] = ratings[:question_index] + (value,) + ratings[question_index + 1 :]
    return updated


def fill_matrix(matrix: ResponseMatrix, value: int) -> dict[str, tuple[int, ...]]:
    """Set every rating in the matrix to ``value``."""
    if not is_valid_rating(value):
        raise ValidationError(f"Rating must be an integer between {MIN_RATING} and {MAX_RATING}")
    return {name: (value,) * len(ratings) for name, ratings in matrix.items()}
