"""Pydantic schemas for tasks."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tasktracker.models.task import TaskPriority, TaskStatus
from tasktracker.schemas.common import strip_required
from tasktracker.schemas.user import UserSummary


class TaskCreate(BaseModel):
    """Only the title is required."""

    title: str = Field(..., min_length=1, max_length=255, description="Task title")
    description: str | None = Field(None, description="Free-form description")
    status: TaskStatus = Field(TaskStatus.NEW, description="Workflow status")
    priority: TaskPriority = Field(TaskPriority.MEDIUM, description="Priority level")
    due_date: date | None = Field(None, description="Calendar due date")
    time_estimate: float | None = Field(None, ge=0, description="Estimated hours")
    pair_programmer_id: int | None = Field(None, description="Optional second user")
    assignees: list[int] = Field(default_factory=list, description="User ids to attach")

    @field_validator("title")
    @classmethod
    def strip_title(cls, value: str) -> str:
        return strip_required(value)


class TaskUpdate(BaseModel):
    """Partial update. `assignees`, when sent, replaces the whole set."""

    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    due_date: date | None = None
    time_estimate: float | None = Field(None, ge=0)
    pair_programmer_id: int | None = None
    assignees: list[int] | None = None

    @field_validator("title")
    @classmethod
    def strip_title(cls, value: str | None) -> str | None:
        if value is None:
            return value
        return strip_required(value)


class TaskResponse(BaseModel):
    """Schema returned from API."""

    id: int
    title: str
    description: str | None = None
    status: TaskStatus
    priority: TaskPriority
    due_date: date | None = None
    time_estimate: float | None = None
    is_overdue: bool
    creator: UserSummary
    pair_programmer: UserSummary | None = None
    assignees: list[UserSummary] = Field(default_factory=list)
    assignee_names: list[str] = Field(default_factory=list)
    comments_count: int = 0
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


__all__ = ["TaskCreate", "TaskUpdate", "TaskResponse"]
