"""Pydantic schemas for task comments."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tasktracker.models.task_comment import COMMENT_MAX_LENGTH
from tasktracker.schemas.common import strip_required

if TYPE_CHECKING:
    from tasktracker.models.task_comment import TaskComment
    from tasktracker.models.user import User


class CommentPayload(BaseModel):
    """Body for creating or editing a comment."""

    comment: str = Field(..., min_length=1, max_length=COMMENT_MAX_LENGTH)

    @field_validator("comment")
    @classmethod
    def strip_comment(cls, value: str) -> str:
        return strip_required(value)


class CommentAuthor(BaseModel):
    id: int
    name: str
    initials: str

    model_config = ConfigDict(from_attributes=True)


class CommentResponse(BaseModel):
    id: int
    task_id: int
    comment: str
    user: CommentAuthor
    can_edit: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def for_viewer(cls, comment: "TaskComment", viewer: "User") -> "CommentResponse":
        return cls(
            id=comment.id,
            task_id=comment.task_id,
            comment=comment.comment,
            user=CommentAuthor.model_validate(comment.user),
            can_edit=comment.user_id == viewer.id or viewer.is_admin,
            created_at=comment.created_at,
            updated_at=comment.updated_at,
        )


__all__ = ["CommentPayload", "CommentAuthor", "CommentResponse"]
