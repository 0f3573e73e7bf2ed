from __future__ import annotations

from collections.abc import Callable

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from perfeval.core.auth import TokenError, decode_access_token, identity_from_claims
from perfeval.core.config import get_settings
from perfeval.domain import User
from perfeval.domain.reference_data import SECTION_ROLES, can_access
from perfeval.libs.evaluation_api import (
    Credentials,
    EvaluationApiClient,
    EvaluationApiError,
    EvaluationNotFoundError,
    SessionExpiredError,
)

bearer_scheme = HTTPBearer(auto_error=False)


def get_credentials(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),  # noqa: B008
) -> Credentials:
    """Capture the caller's bearer token so it can be forwarded to the evaluation API."""
    if credentials is None:
        raise _unauthorized("Missing bearer token")
    return Credentials(token=credentials.credentials)


def get_current_user(
    credentials: Credentials = Depends(get_credentials),  # noqa: B008
) -> User:
    """Resolve the acting user from the bearer token."""
    try:
        payload = decode_access_token(credentials.token)
        return identity_from_claims(payload)
    except TokenError as exc:
        raise _unauthorized(str(exc)) from exc


def require_section(section: str) -> Callable[[User], User]:
    """Dependency factory enforcing that the user's role may open a console section."""
    if section not in SECTION_ROLES:
        raise ValueError(f"Unsupported console section requested: {section}")

    allowed = set(get_settings().allowed_roles)
    unsupported = [role.value for role in SECTION_ROLES[section] if role.value not in allowed]
    if unsupported:
        joined_roles = ", ".join(sorted(unsupported))
        raise ValueError(f"Section {section} names unsupported role(s): {joined_roles}")

    def dependency(user: User = Depends(get_current_user)) -> User:  # noqa: B008
        if not can_access(user.role, section):
            raise _forbidden("Insufficient role privileges")
        return user

    return dependency


def get_api_client(
    credentials: Credentials = Depends(get_credentials),  # noqa: B008
) -> EvaluationApiClient:
    """Evaluation API client acting on behalf of the caller."""
    return EvaluationApiClient(credentials=credentials)


def get_public_api_client() -> EvaluationApiClient:
    return EvaluationApiClient()


def upstream_http_error(exc: EvaluationApiError) -> HTTPException:
    """Translate an evaluation API failure into the console's HTTP error."""
    if isinstance(exc, SessionExpiredError):
        return _unauthorized(str(exc))
    if isinstance(exc, EvaluationNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if exc.status_code == status.HTTP_403_FORBIDDEN:
        return _forbidden(str(exc))
    if exc.status_code == status.HTTP_409_CONFLICT:
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def _forbidden(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
