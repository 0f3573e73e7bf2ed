from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from perfeval.core.config import get_settings
from perfeval.domain.errors import ValidationError
from perfeval.domain.models import Role, User


class TokenError(Exception):
    """Raised when a token cannot be decoded or validated."""


def create_access_token(
    subject: str,
    *,
    role: str,
    email: str | None = None,
    name: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Sign a token shaped like the evaluation API's, for local development and tests."""
    settings = get_settings()

    now = datetime.now(UTC)
    ttl = expires_delta or timedelta(seconds=settings.access_token_ttl_seconds)
    payload: dict[str, Any] = {
        "sub": subject,
        "role": role,
        "iat": int(now.timestamp()),
        "exp": int((now + ttl).timestamp()),
    }

    if email:
        payload["email"] = email
    if name:
        payload["name"] = name

    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict[str, Any]:
    """Decode an access token issued by the evaluation API."""
    settings = get_settings()

    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={
                "verify_signature": settings.jwt_verify_signature,
                "require": ["sub", "exp"],
            },
        )
    except jwt.PyJWTError as exc:  # pragma: no cover - third-party raises numerous subclasses
        raise TokenError("Invalid token") from exc

    return payload


def identity_from_claims(payload: dict[str, Any]) -> User:
    """Build the acting identity from decoded token claims.

    The API issues either a single ``role`` claim or a ``roles`` list, in any
    casing. Both are normalised to the console's ``Admin|Manager|Employee``.
    """
    user_id = payload.get("sub")
    if not user_id:
        raise TokenError("Token missing subject")

    raw_role = payload.get("role")
    if not raw_role:
        roles = payload.get("roles") or []
        raw_role = roles[0] if roles else None
    if not raw_role:
        raise TokenError("Token missing role")

    try:
        role = Role.normalize(str(raw_role))
    except ValidationError as exc:
        raise TokenError(str(exc)) from exc

    _ensure_allowed(role)

    email = payload.get("email", "")
    return User(
        user_id=str(user_id),
        email=email,
        name=payload.get("name") or email,
        role=role,
    )


def _ensure_allowed(role: Role) -> None:
    if role.value not in get_settings().allowed_roles:
        raise TokenError(f"Unsupported role: {role.value}")
