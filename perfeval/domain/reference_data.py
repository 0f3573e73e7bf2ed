from __future__ import annotations

from perfeval.domain.errors import ValidationError
from perfeval.domain.models import CompetencyCategory, Role

MIN_RATING = 1
MAX_RATING = 5
DEFAULT_RATING = 3

RATING_LABELS: dict[int, str] = {
    1: "Inadecuado",
    2: "Satisfactorio",
    3: "Aceptable",
    4: "Competente",
    5: "Excepcional",
}

COMPETENCY_LABELS: dict[CompetencyCategory, str] = {
    CompetencyCategory.COMMUNICATION: "Communication",
    CompetencyCategory.TEAMWORK: "Teamwork",
    CompetencyCategory.LEADERSHIP: "Leadership",
    CompetencyCategory.TECHNICAL_SKILL: "Technical Skill",
    CompetencyCategory.ADAPTABILITY: "Adaptability",
}

# Console sections and the roles that may open them.
SECTION_ROLES: dict[str, frozenset[Role]] = {
    "dashboard": frozenset({Role.ADMIN, Role.MANAGER, Role.EMPLOYEE}),
    "profile": frozenset({Role.ADMIN, Role.MANAGER, Role.EMPLOYEE}),
    "evaluations": frozenset({Role.ADMIN, Role.MANAGER}),
    "reports": frozenset({Role.ADMIN, Role.MANAGER}),
    "employees": frozenset({Role.ADMIN}),
    "register": frozenset({Role.ADMIN}),
}


def is_valid_rating(value: object) -> bool:
    # bool is an int subclass but never a rating
    if isinstance(value, bool) or not isinstance(value, int):
        return False
    return MIN_RATING <= value <= MAX_RATING


def rating_label(value: int) -> str:
    """Return the display label for a rating on the 1-5 scale."""
    if not is_valid_rating(value):
        raise ValidationError(f"Rating must be an integer between {MIN_RATING} and {MAX_RATING}")
    return RATING_LABELS[value]


def can_access(role: Role, section: str) -> bool:
    try:
        allowed = SECTION_ROLES[section]
    except KeyError as exc:
        raise ValidationError(f"Unknown console section: {section!r}") from exc
    return role in allowed


def competency_label(name: str) -> str:
    """Display label for a competency; unknown names are shown as-is."""
    if not CompetencyCategory.contains(name):
        return name
    return COMPETENCY_LABELS[CompetencyCategory(name)]


def accessible_sections(role: Role) -> list[str]:
    return [section for section in SECTION_ROLES if can_access(role, section)]
