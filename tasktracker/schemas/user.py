"""Pydantic schemas for users and profiles."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, ValidationInfo, field_validator

from tasktracker.models.task import TaskPriority, TaskStatus
from tasktracker.models.user import MemberStatus, UserRole, UserStatus
from tasktracker.schemas.common import check_password_bytes, strip_required

PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 72


def confirm_password(value: str | None, info: ValidationInfo) -> str | None:
    """Shared `password_confirmation` check; skipped when the password itself failed."""
    password = info.data.get("password")
    if password is not None and value != password:
        raise ValueError("Password confirmation does not match")
    return value


class UserCreate(BaseModel):
    """Admin-side account creation."""

    name: str = Field(..., min_length=1, max_length=255, description="Display name")
    email: EmailStr = Field(..., description="Unique login email")
    password: str = Field(..., min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH)
    role: UserRole = Field(UserRole.USER, description="Privilege level")
    status: UserStatus = Field(UserStatus.ACTIVE, description="Account status")
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


class UserUpdate(BaseModel):
    """Admin-side partial update."""

    name: str | None = Field(None, min_length=1, max_length=255)
    email: EmailStr | None = None
    password: str | None = Field(None, min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH)
    role: UserRole | None = None
    status: UserStatus | None = None
    department: str | None = Field(None, max_length=255)
    phone: str | None = Field(None, max_length=20)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str | None) -> str | None:
        return value if value is None else strip_required(value)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str | None) -> str | None:
        return value if value is None else check_password_bytes(value)


class ProfileUpdate(BaseModel):
    """Self-service profile update; changing password needs the current one."""

    name: str | None = Field(None, min_length=1, max_length=255)
    email: EmailStr | None = None
    department: str | None = Field(None, max_length=255)
    phone: str | None = Field(None, max_length=20)
    password: str | None = Field(None, min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH)
    # Declared after `password` so their validators can see it
    password_confirmation: str | None = Field(None, validate_default=True)
    current_password: str | None = Field(None, validate_default=True)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str | None) -> str | None:
        return value if value is None else strip_required(value)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str | None) -> str | None:
        return value if value is None else check_password_bytes(value)

    @field_validator("password_confirmation")
    @classmethod
    def passwords_match(cls, value: str | None, info: ValidationInfo) -> str | None:
        return confirm_password(value, info)

    @field_validator("current_password")
    @classmethod
    def current_password_given(cls, value: str | None, info: ValidationInfo) -> str | None:
        if info.data.get("password") is not None and not value:
            raise ValueError("Current password is required to change the password")
        return value


class UserSummary(BaseModel):
    """Lightweight schema to embed with tasks."""

    id: int
    name: str
    email: str
    initials: str

    model_config = ConfigDict(from_attributes=True)


class AssignedTaskItem(BaseModel):
    id: int
    title: str
    status: TaskStatus
    priority: TaskPriority
    due_date: date | None = None
    is_overdue: bool

    model_config = ConfigDict(from_attributes=True)


class CreatedTaskItem(BaseModel):
    id: int
    title: str
    status: TaskStatus
    assignees_count: int


class UserProfile(BaseModel):
    """Formatted user with counts computed from current data."""

    id: int
    name: str
    email: str
    role: UserRole
    status: UserStatus
    department: str | None = None
    phone: str | None = None
    initials: str
    member_status: MemberStatus
    active_tasks_count: int
    completed_tasks_count: int
    total_tasks_count: int
    pair_tasks_count: int
    paired_with: list[str] = Field(default_factory=list)
    unread_notifications_count: int
    created_at: datetime
    updated_at: datetime
    assigned_tasks: list[AssignedTaskItem] | None = None
    created_tasks: list[CreatedTaskItem] | None = None


class TeamMember(BaseModel):
    id: int
    name: str
    email: str
    department: str | None = None
    initials: str
    member_status: MemberStatus
    active_tasks_count: int

    model_config = ConfigDict(from_attributes=True)


__all__ = [
    "PASSWORD_MIN_LENGTH",
    "PASSWORD_MAX_LENGTH",
    "confirm_password",
    "UserCreate",
    "UserUpdate",
    "ProfileUpdate",
    "UserSummary",
    "AssignedTaskItem",
    "CreatedTaskItem",
    "UserProfile",
    "TeamMember",
]
