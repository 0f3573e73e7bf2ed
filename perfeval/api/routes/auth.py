"""Authentication routes - login, account registration, profile."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from perfeval.api.deps import (
    get_api_client,
    get_current_user,
    get_public_api_client,
    require_section,
    upstream_http_error,
)
from perfeval.api.schemas.auth import (
    LoginRequest,
    LoginResponse,
    MeResponse,
    RegisterRequest,
    RegisterResponse,
)
from perfeval.api.schemas.common import UserItem
from perfeval.domain import Role, User, ValidationError
from perfeval.domain.reference_data import accessible_sections
from perfeval.libs.evaluation_api import (
    EvaluationApiClient,
    EvaluationApiError,
    SessionExpiredError,
)

logger = structlog.get_logger()
router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="User login",
    description="Exchange email and password for the evaluation API's access token.",
)
async def login(
    payload: LoginRequest,
    client: EvaluationApiClient = Depends(get_public_api_client),  # noqa: B008
) -> LoginResponse:
    try:
        credentials, user = await client.login(payload.email, payload.password)
    except SessionExpiredError as exc:
        # a 401 on login means wrong credentials, not an expired session
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        ) from exc
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    except EvaluationApiError as exc:
        raise upstream_http_error(exc) from exc

    return LoginResponse(access_token=credentials.token, user=UserItem.from_domain(user))


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register console account",
)
async def register(
    payload: RegisterRequest,
    client: EvaluationApiClient = Depends(get_api_client),  # noqa: B008
    admin: User = Depends(require_section("register")),  # noqa: B008
) -> RegisterResponse:
    try:
        role = Role.normalize(payload.role)
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
        ) from exc

    try:
        await client.register_user(
            email=payload.email, password=payload.password, role=role, name=payload.name
        )
    except EvaluationApiError as exc:
        raise upstream_http_error(exc) from exc

    logger.info("user_registered", email=payload.email, role=role.value, admin_id=admin.user_id)
    return RegisterResponse(
        message="Registration successful", email=payload.email, role=role.value
    )


@router.get("/me", response_model=MeResponse, summary="Current user and reachable sections")
async def me(user: User = Depends(get_current_user)) -> MeResponse:  # noqa: B008
    return MeResponse(user=UserItem.from_domain(user), sections=accessible_sections(user.role))
