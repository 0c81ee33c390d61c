"""Pydantic schemas for notifications."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from tasktracker.models.notification import TaskRef, UserRef
from tasktracker.models.user import UserRole
from tasktracker.schemas.common import Pagination
from tasktracker.schemas.user import UserSummary


class RelatedRef(BaseModel):
    """Entity a notification points at."""

    type: str
    id: int


class NotificationResponse(BaseModel):
    id: int
    type: str
    title: str
    message: str
    data: dict[str, Any] | None = None
    is_read: bool
    read_at: datetime | None = None
    related: RelatedRef | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_validator("related", mode="before")
    @classmethod
    def unpack_related(cls, value: Any) -> Any:
        if isinstance(value, (TaskRef, UserRef)):
            return {"type": value.kind, "id": value.id}
        return value


class AdminNotificationResponse(NotificationResponse):
    """Notification together with its recipient."""

    user: UserSummary


class NotificationListResponse(BaseModel):
    success: bool = True
    data: list[NotificationResponse] = Field(default_factory=list)
    pagination: Pagination
    unread_count: int


class NotificationIdsRequest(BaseModel):
    notification_ids: list[int] = Field(..., min_length=1)


class MarkResult(BaseModel):
    marked_count: int
    unread_count: int


class DeleteResult(BaseModel):
    deleted_count: int
    unread_count: int


class UnreadCount(BaseModel):
    unread_count: int


class NotificationStats(BaseModel):
    total: int
    unread: int
    read: int
    by_type: dict[str, int]


class SystemNotificationRequest(BaseModel):
    """Broadcast: explicit user ids win over role; neither means everyone."""

    title: str = Field(..., min_length=1, max_length=255)
    message: str = Field(..., min_length=1)
    user_ids: list[int] | None = None
    role: UserRole | None = None
    data: dict[str, Any] | None = None

    @model_validator(mode="after")
    def drop_empty_targets(self) -> "SystemNotificationRequest":
        if self.user_ids == []:
            self.user_ids = None
        return self


class SystemNotificationResult(BaseModel):
    sent_count: int


__all__ = [
    "RelatedRef",
    "NotificationResponse",
    "AdminNotificationResponse",
    "NotificationListResponse",
    "NotificationIdsRequest",
    "MarkResult",
    "DeleteResult",
    "UnreadCount",
    "NotificationStats",
    "SystemNotificationRequest",
    "SystemNotificationResult",
]
