"""Pydantic schemas for authentication endpoints."""

from __future__ import annotations

from perfeval.api.schemas.common import UserItem
from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3, description="User email address")
    password: str = Field(..., min_length=1, description="User password")


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserItem


class RegisterRequest(BaseModel):
    email: str = Field(..., min_length=3, description="User email address")
    password: str = Field(..., min_length=6, description="Password (min 6 characters)")
    name: str | None = Field(None, max_length=128)
    role: str = Field(default="Employee", description="Admin, Manager or Employee, any casing")


class RegisterResponse(BaseModel):
    message: str
    email: str
    role: str


class MeResponse(BaseModel):
    user: UserItem
    sections: list[str] = Field(..., description="Console sections the role may open")
