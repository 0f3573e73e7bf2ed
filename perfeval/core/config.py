from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment."""

    app_name: str = Field(default="Performance Evaluation Console", validation_alias="APP_NAME")
    environment: str = Field(default="local", validation_alias="APP_ENV")
    version: str = Field(default="0.1.0")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_format: str = Field(default="json", validation_alias="LOG_FORMAT")
    # front-end origins allowed to call the console
    cors_origins: tuple[str, ...] = Field(
        default=("http://localhost:5173", "http://127.0.0.1:5173"),
        validation_alias="CORS_ORIGINS",
    )

    # Identity tokens are issued by the evaluation API; the console only reads them.
    jwt_secret: str = Field(default="replace-with-secure-secret", validation_alias="JWT_SECRET")
    jwt_algorithm: str = Field(default="HS256", validation_alias="JWT_ALGORITHM")
    jwt_verify_signature: bool = Field(default=True, validation_alias="JWT_VERIFY_SIGNATURE")
    access_token_ttl_seconds: int = Field(default=3600, validation_alias="ACCESS_TOKEN_TTL")
    allowed_roles: tuple[str, ...] = Field(
        default=("Admin", "Manager", "Employee"), validation_alias="ALLOWED_ROLES"
    )

    evaluation_api_base_url: str = Field(
        default="http://localhost:2999",
        validation_alias="EVALUATION_API_BASE_URL",
    )
    evaluation_api_timeout_seconds: int = Field(
        default=15, validation_alias="EVALUATION_API_TIMEOUT_SECONDS"
    )
    evaluation_api_max_retries: int = Field(
        default=3, validation_alias="EVALUATION_API_MAX_RETRIES"
    )

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="allow")


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings."""
    return Settings()
