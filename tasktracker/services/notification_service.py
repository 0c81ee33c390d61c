"""Notification dispatch and per-user inbox management.

Dispatch is synchronous: each event inserts one row per recipient in its
own commit. A failed insert is logged and swallowed so that it can never
undo or fail the business operation that triggered it. Callers therefore
commit their own changes before dispatching.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import TYPE_CHECKING, Any

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from tasktracker.models.notification import Notification, NotificationType, Related, TaskRef, UserRef
from tasktracker.models.task import TaskStatus
from tasktracker.models.user import User, UserRole
from tasktracker.services.clock import get_current_date, get_current_time
from tasktracker.utils.date_utils import format_due_date, get_day_bounds
from tasktracker.utils.pagination import paginate

if TYPE_CHECKING:
    from tasktracker.models.task import Task

logger = logging.getLogger("tasktracker.notifications")

SORTABLE_FIELDS = {
    "created_at": Notification.created_at,
    "type": Notification.type,
    "read_at": Notification.read_at,
}


def _iso(value: date | None) -> str | None:
    return value.isoformat() if value is not None else None


class NotificationService:
    """Business logic for notifications."""

    # ----- dispatch -------------------------------------------------------

    @staticmethod
    def create_notification(
        db: Session,
        *,
        user_id: int,
        type: NotificationType,
        title: str,
        message: str,
        data: dict[str, Any] | None = None,
        related: Related = None,
    ) -> Notification | None:
        """Insert a single notification; returns None when the insert failed."""
        try:
            notification = Notification(
                user_id=user_id,
                type=type.value,
                title=title,
                message=message,
                data=data,
            )
            notification.related = related
            db.add(notification)
            db.commit()
        except Exception as e:
            db.rollback()
            logger.error(
                f"Failed to create {type.value} notification for user {user_id}: {e}",
                exc_info=True,
            )
            return None
        return notification

    @staticmethod
    def _admins(db: Session) -> list[User]:
        return db.query(User).filter(User.role == UserRole.ADMIN).order_by(User.id).all()

    @staticmethod
    def notify_task_assigned(db: Session, task: "Task", assignee: User, actor: User) -> Notification | None:
        return NotificationService.create_notification(
            db,
            user_id=assignee.id,
            type=NotificationType.TASK_ASSIGNED,
            title=f'New Task Assigned: "{task.title}"',
            message=f'You have been assigned to task "{task.title}" by {actor.name}.',
            data={
                "task_id": task.id,
                "task_title": task.title,
                "assigned_by": actor.name,
                "due_date": _iso(task.due_date),
            },
            related=TaskRef(task.id),
        )

    @staticmethod
    def notify_task_status_changed(
        db: Session,
        task: "Task",
        old_status: TaskStatus,
        new_status: TaskStatus,
        actor: User,
    ) -> list[Notification]:
        """Notify assignees, the creator when not already covered, and admins on completion."""
        old_label = TaskStatus(old_status).value
        new_label = TaskStatus(new_status).value
        title = f'Task Status Updated: "{task.title}"'
        data = {
            "task_id": task.id,
            "task_title": task.title,
            "old_status": old_label,
            "new_status": new_label,
            "updated_by": actor.name,
        }
        assignees = list(task.assignees)
        assignee_ids = {user.id for user in assignees}
        created: list[Notification] = []

        for assignee in assignees:
            notification = NotificationService.create_notification(
                db,
                user_id=assignee.id,
                type=NotificationType.TASK_UPDATED,
                title=title,
                message=f'Task "{task.title}" status changed from "{old_label}" to "{new_label}".',
                data=data,
                related=TaskRef(task.id),
            )
            if notification is not None:
                created.append(notification)

        if task.created_by != actor.id and task.created_by not in assignee_ids:
            notification = NotificationService.create_notification(
                db,
                user_id=task.created_by,
                type=NotificationType.TASK_UPDATED,
                title=title,
                message=f'Your task "{task.title}" status changed from "{old_label}" to "{new_label}".',
                data=data,
                related=TaskRef(task.id),
            )
            if notification is not None:
                created.append(notification)

        if new_status == TaskStatus.COMPLETED:
            created.extend(NotificationService.notify_task_completed(db, task))
        return created

    @staticmethod
    def notify_task_completed(db: Session, task: "Task") -> list[Notification]:
        names = task.assignee_names
        completed_by = ", ".join(names) if names else "an unassigned user"
        created: list[Notification] = []
        for admin in NotificationService._admins(db):
            notification = NotificationService.create_notification(
                db,
                user_id=admin.id,
                type=NotificationType.TASK_COMPLETED,
                title=f'Task Completed: "{task.title}"',
                message=f'Task "{task.title}" has been completed by {completed_by}.',
                data={
                    "task_id": task.id,
                    "task_title": task.title,
                    "completed_by": names,
                    "completion_date": get_current_time().isoformat(timespec="seconds"),
                },
                related=TaskRef(task.id),
            )
            if notification is not None:
                created.append(notification)
        return created

    @staticmethod
    def notify_task_overdue(db: Session, task: "Task") -> list[Notification]:
        """Alert assignees and every admin that a task is past due."""
        days_overdue = task.days_overdue
        names = task.assignee_names
        data = {
            "task_id": task.id,
            "task_title": task.title,
            "due_date": _iso(task.due_date),
            "days_overdue": days_overdue,
            "assignees": names,
        }
        due_label = format_due_date(task.due_date) if task.due_date else "not set"
        created: list[Notification] = []

        for assignee in task.assignees:
            notification = NotificationService.create_notification(
                db,
                user_id=assignee.id,
                type=NotificationType.TASK_OVERDUE,
                title=f'Task Overdue: "{task.title}"',
                message=f'Task "{task.title}" is now overdue. Due date was {due_label}.',
                data=data,
                related=TaskRef(task.id),
            )
            if notification is not None:
                created.append(notification)

        assigned_to = ", ".join(names) if names else "nobody"
        unit = "day" if days_overdue == 1 else "days"
        for admin in NotificationService._admins(db):
            notification = NotificationService.create_notification(
                db,
                user_id=admin.id,
                type=NotificationType.TASK_OVERDUE,
                title=f'Overdue Task Alert: "{task.title}"',
                message=f'Task "{task.title}" assigned to {assigned_to} is overdue by {days_overdue} {unit}.',
                data=data,
                related=TaskRef(task.id),
            )
            if notification is not None:
                created.append(notification)
        return created

    @staticmethod
    def overdue_notified_on(db: Session, task_id: int, day: date | None = None) -> bool:
        """Whether an overdue notification for the task was already created on `day` (default today)."""
        start, end = get_day_bounds(day or get_current_date())
        exists = (
            db.query(Notification.id)
            .filter(
                Notification.type == NotificationType.TASK_OVERDUE.value,
                Notification.related_type == TaskRef.kind,
                Notification.related_id == task_id,
                Notification.created_at >= start,
                Notification.created_at < end,
            )
            .first()
        )
        return exists is not None

    @staticmethod
    def notify_new_user(db: Session, new_user: User) -> list[Notification]:
        role_label = UserRole(new_user.role).value.title()
        created: list[Notification] = []
        for admin in NotificationService._admins(db):
            if admin.id == new_user.id:
                continue
            notification = NotificationService.create_notification(
                db,
                user_id=admin.id,
                type=NotificationType.NEW_USER,
                title=f"New User Registered: {new_user.name}",
                message=f"{new_user.name} has joined the team as a {role_label}.",
                data={
                    "new_user_id": new_user.id,
                    "new_user_name": new_user.name,
                    "new_user_email": new_user.email,
                    "new_user_role": UserRole(new_user.role).value,
                },
                related=UserRef(new_user.id),
            )
            if notification is not None:
                created.append(notification)
        return created

    @staticmethod
    def notify_user_removed(
        db: Session,
        *,
        name: str,
        email: str,
        role: UserRole,
        actor: User,
    ) -> list[Notification]:
        role_label = UserRole(role).value.title()
        created: list[Notification] = []
        for admin in NotificationService._admins(db):
            if admin.id == actor.id:
                continue
            notification = NotificationService.create_notification(
                db,
                user_id=admin.id,
                type=NotificationType.USER_REMOVED,
                title=f"User Removed: {name}",
                message=f"{name} ({role_label}) has been removed from the team by {actor.name}.",
                data={
                    "removed_user_name": name,
                    "removed_user_email": email,
                    "removed_user_role": UserRole(role).value,
                    "removed_by": actor.name,
                    "removal_date": get_current_time().isoformat(timespec="seconds"),
                },
            )
            if notification is not None:
                created.append(notification)
        return created

    @staticmethod
    def send_system_notification(
        db: Session,
        *,
        title: str,
        message: str,
        user_ids: list[int] | None = None,
        role: UserRole | None = None,
        data: dict[str, Any] | None = None,
    ) -> list[Notification]:
        """Send to explicit users, else everyone with `role`, else all users."""
        query = db.query(User)
        if user_ids:
            query = query.filter(User.id.in_(user_ids))
        elif role is not None:
            query = query.filter(User.role == role)
        created: list[Notification] = []
        for user in query.order_by(User.id).all():
            notification = NotificationService.create_notification(
                db,
                user_id=user.id,
                type=NotificationType.SYSTEM,
                title=title,
                message=message,
                data=data,
            )
            if notification is not None:
                created.append(notification)
        return created

    # ----- inbox ----------------------------------------------------------

    @staticmethod
    def list_notifications(
        db: Session,
        user_id: int,
        *,
        type: str | None = None,
        read_status: str | None = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[list[Notification], int]:
        query = db.query(Notification).filter(Notification.user_id == user_id)
        if type:
            query = query.filter(Notification.type == type)
        if read_status == "read":
            query = query.filter(Notification.read_at.is_not(None))
        elif read_status == "unread":
            query = query.filter(Notification.read_at.is_(None))
        column = SORTABLE_FIELDS.get(sort_by, Notification.created_at)
        ordering = column.asc() if sort_order == "asc" else column.desc()
        query = query.order_by(ordering, Notification.id.desc())
        return paginate(query, page, per_page)

    @staticmethod
    def list_admin_notifications(
        db: Session,
        *,
        type: str | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[list[Notification], int]:
        """Notifications held by admin accounts, newest first."""
        query = (
            db.query(Notification)
            .join(User, Notification.user_id == User.id)
            .filter(User.role == UserRole.ADMIN)
            .options(joinedload(Notification.user))
        )
        if type:
            query = query.filter(Notification.type == type)
        query = query.order_by(Notification.created_at.desc(), Notification.id.desc())
        return paginate(query, page, per_page)

    @staticmethod
    def unread_count(db: Session, user_id: int) -> int:
        return (
            db.query(func.count(Notification.id))
            .filter(Notification.user_id == user_id, Notification.read_at.is_(None))
            .scalar()
            or 0
        )

    @staticmethod
    def _owned(db: Session, user_id: int, notification_ids: list[int]) -> list[Notification]:
        return (
            db.query(Notification)
            .filter(Notification.user_id == user_id, Notification.id.in_(notification_ids))
            .all()
        )

    @staticmethod
    def mark_as_read(db: Session, user_id: int, notification_ids: list[int]) -> int:
        """Mark the caller's notifications read; returns how many changed state."""
        changed = sum(1 for n in NotificationService._owned(db, user_id, notification_ids) if n.mark_as_read())
        db.commit()
        return changed

    @staticmethod
    def mark_as_unread(db: Session, user_id: int, notification_ids: list[int]) -> int:
        changed = sum(1 for n in NotificationService._owned(db, user_id, notification_ids) if n.mark_as_unread())
        db.commit()
        return changed

    @staticmethod
    def mark_all_as_read(db: Session, user_id: int) -> int:
        unread = (
            db.query(Notification)
            .filter(Notification.user_id == user_id, Notification.read_at.is_(None))
            .all()
        )
        for notification in unread:
            notification.mark_as_read()
        db.commit()
        return len(unread)

    @staticmethod
    def delete_notifications(db: Session, user_id: int, notification_ids: list[int]) -> int:
        owned = NotificationService._owned(db, user_id, notification_ids)
        for notification in owned:
            db.delete(notification)
        db.commit()
        return len(owned)

    @staticmethod
    def get_stats(db: Session, user_id: int) -> dict[str, Any]:
        total = (
            db.query(func.count(Notification.id)).filter(Notification.user_id == user_id).scalar() or 0
        )
        unread = NotificationService.unread_count(db, user_id)
        rows = (
            db.query(Notification.type, func.count(Notification.id))
            .filter(Notification.user_id == user_id)
            .group_by(Notification.type)
            .all()
        )
        return {
            "total": total,
            "unread": unread,
            "read": total - unread,
            "by_type": {notification_type: count for notification_type, count in rows},
        }
