"""Pydantic schemas for registration and login."""

from __future__ import annotations

from pydantic import BaseModel, EmailStr, Field, ValidationInfo, field_validator

from tasktracker.schemas.common import check_password_bytes, strip_required
from tasktracker.schemas.user import PASSWORD_MAX_LENGTH, PASSWORD_MIN_LENGTH, UserProfile, confirm_password


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH)
    password_confirmation: str
    department: str | None = Field(None, max_length=255)
    phone: str | None = Field(None, max_length=20)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        return strip_required(value)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        return check_password_bytes(value)

    @field_validator("password_confirmation")
    @classmethod
    def passwords_match(cls, value: str, info: ValidationInfo) -> str:
        return confirm_password(value, info)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    user: UserProfile


__all__ = ["RegisterRequest", "LoginRequest", "TokenResponse"]
