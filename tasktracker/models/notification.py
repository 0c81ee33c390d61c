"""Notification model and the reference to the entity it is about."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from tasktracker.database import Base
from tasktracker.services.clock import get_current_time


class NotificationType(str, Enum):
    """Kinds of notification."""

    TASK_ASSIGNED = "task_assigned"
    TASK_UPDATED = "task_updated"
    TASK_COMPLETED = "task_completed"
    TASK_OVERDUE = "task_overdue"
    NEW_USER = "new_user"
    USER_REMOVED = "user_removed"
    SYSTEM = "system"


@dataclass(frozen=True, slots=True)
class TaskRef:
    id: int
    kind = "task"


@dataclass(frozen=True, slots=True)
class UserRef:
    id: int
    kind = "user"


Related = TaskRef | UserRef | None

_RELATED_KINDS: dict[str, type[TaskRef] | type[UserRef]] = {
    TaskRef.kind: TaskRef,
    UserRef.kind: UserRef,
}


class Notification(Base):
    """Message delivered to one recipient."""

    __tablename__ = "notifications"
    __table_args__ = (
        Index("ix_notifications_user_id", "user_id"),
        Index("ix_notifications_type", "type"),
        Index("ix_notifications_read_at", "read_at"),
        Index("ix_notifications_related", "related_type", "related_id"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    type = Column(String(50), nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    data = Column(JSON, nullable=True)
    read_at = Column(DateTime, nullable=True)
    related_type = Column(String(20), nullable=True)
    related_id = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=get_current_time, nullable=False)
    updated_at = Column(DateTime, default=get_current_time, onupdate=get_current_time, nullable=False)

    user = relationship("User", back_populates="notifications")

    @property
    def related(self) -> Related:
        if self.related_type is None or self.related_id is None:
            return None
        ref_cls = _RELATED_KINDS.get(self.related_type)
        if ref_cls is None:
            return None
        return ref_cls(self.related_id)

    @related.setter
    def related(self, ref: Related) -> None:
        if ref is None:
            self.related_type = None
            self.related_id = None
        else:
            self.related_type = ref.kind
            self.related_id = ref.id

    @property
    def is_read(self) -> bool:
        return self.read_at is not None

    def mark_as_read(self) -> bool:
        """Set read_at unless already read. Returns True when state changed."""
        if self.read_at is not None:
            return False
        self.read_at = get_current_time()
        return True

    def mark_as_unread(self) -> bool:
        if self.read_at is None:
            return False
        self.read_at = None
        return True

    def __repr__(self) -> str:
        """String representation of Notification."""
        return f"<Notification(id={self.id}, user_id={self.user_id}, type='{self.type}')>"


__all__ = ["Notification", "NotificationType", "TaskRef", "UserRef", "Related"]
