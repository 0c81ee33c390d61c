"""Database models."""

from tasktracker.models.notification import Notification, NotificationType, Related, TaskRef, UserRef
from tasktracker.models.task import Task, TaskPriority, TaskStatus
from tasktracker.models.task_assignment import task_assignees
from tasktracker.models.task_comment import TaskComment
from tasktracker.models.user import MemberStatus, User, UserRole, UserStatus

__all__ = [
    "MemberStatus",
    "Notification",
    "NotificationType",
    "Related",
    "Task",
    "TaskComment",
    "TaskPriority",
    "TaskRef",
    "TaskStatus",
    "User",
    "UserRef",
    "UserRole",
    "UserStatus",
    "task_assignees",
]
