"""Read-only aggregations for the admin dashboard and analytics pages."""

from __future__ import annotations

from datetime import datetime, time, timedelta

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from tasktracker.models.notification import Notification, TaskRef, UserRef
from tasktracker.models.task import Task, TaskPriority, TaskStatus
from tasktracker.models.user import User, UserRole, UserStatus, classify_member_status
from tasktracker.schemas.dashboard import (
    ActivityItem,
    AnalyticsResponse,
    CompletionRate,
    DashboardResponse,
    DashboardStats,
    MonthlyProgress,
    OverdueAnalysis,
    SystemStats,
    UserTaskBreakdown,
)
from tasktracker.schemas.notification import RelatedRef
from tasktracker.schemas.task import TaskResponse
from tasktracker.services.clock import get_current_date, get_current_time
from tasktracker.utils.date_utils import format_month_label, get_month_start, shift_months
from tasktracker.utils.format_utils import percentage

RECENT_TASKS_LIMIT = 5
ACTIVITY_LIMIT = 10
ACTIVITY_CREATED_LIMIT = 5
ACTIVITY_UPDATED_LIMIT = 5
ACTIVITY_USERS_LIMIT = 3
# Updates this close to creation are part of the create, not separate activity
UPDATE_THRESHOLD = timedelta(minutes=5)
UPDATE_WINDOW = timedelta(hours=24)
REGISTRATION_WINDOW = timedelta(days=7)
MONTHS_OF_PROGRESS = 6


def _overdue_filter():
    return (
        Task.due_date.is_not(None),
        Task.due_date < get_current_date(),
        Task.status != TaskStatus.COMPLETED,
    )


def _count(db: Session, *criteria) -> int:
    return db.query(func.count(Task.id)).filter(*criteria).scalar() or 0


class DashboardService:
    """Aggregations computed on demand from live queries."""

    @staticmethod
    def get_stats(db: Session) -> DashboardStats:
        total = _count(db)
        completed = _count(db, Task.status == TaskStatus.COMPLETED)
        members = (
            db.query(func.count(User.id)).filter(User.role != UserRole.ADMIN).scalar() or 0
        )
        return DashboardStats(
            total_tasks=total,
            total_members=members,
            completion_rate=percentage(completed, total),
            overdue_tasks=_count(db, *_overdue_filter()),
            active_tasks=total - completed,
            new_tasks=_count(db, Task.status == TaskStatus.NEW),
            completed_tasks=completed,
        )

    @staticmethod
    def get_recent_tasks(db: Session, limit: int = RECENT_TASKS_LIMIT) -> list[Task]:
        return db.query(Task).order_by(Task.created_at.desc(), Task.id.desc()).limit(limit).all()

    @staticmethod
    def get_recent_activity(db: Session, limit: int = ACTIVITY_LIMIT) -> list[ActivityItem]:
        """Merge recent creations, later updates and registrations, newest first."""
        now = get_current_time()
        activities: list[ActivityItem] = []

        for task in DashboardService.get_recent_tasks(db, ACTIVITY_CREATED_LIMIT):
            status = TaskStatus(task.status).value
            activities.append(
                ActivityItem(
                    type="task_created",
                    title=f'New Task Submitted: "{task.title}"',
                    description=f"Submitted by {task.creator.name}. Status: {status}.",
                    timestamp=task.created_at,
                    related=RelatedRef(type=TaskRef.kind, id=task.id),
                )
            )

        updated = (
            db.query(Task)
            .filter(Task.updated_at > now - UPDATE_WINDOW)
            .order_by(Task.updated_at.desc(), Task.id.desc())
            .limit(ACTIVITY_UPDATED_LIMIT)
            .all()
        )
        for task in updated:
            if task.updated_at - task.created_at <= UPDATE_THRESHOLD:
                continue
            status = TaskStatus(task.status).value
            activities.append(
                ActivityItem(
                    type="task_updated",
                    title=f'Task Status Updated: "#{task.id}"',
                    description=f'Task "{task.title}" status changed to "{status}".',
                    timestamp=task.updated_at,
                    related=RelatedRef(type=TaskRef.kind, id=task.id),
                )
            )

        registered = (
            db.query(User)
            .filter(User.created_at > now - REGISTRATION_WINDOW)
            .order_by(User.created_at.desc(), User.id.desc())
            .limit(ACTIVITY_USERS_LIMIT)
            .all()
        )
        for user in registered:
            role = UserRole(user.role).value.title()
            activities.append(
                ActivityItem(
                    type="user_registered",
                    title=f"User Registered: {user.name}",
                    description=f"{user.name} has joined the team as a {role}.",
                    timestamp=user.created_at,
                    related=RelatedRef(type=UserRef.kind, id=user.id),
                )
            )

        activities.sort(key=lambda item: item.timestamp, reverse=True)
        return activities[:limit]

    @staticmethod
    def get_dashboard(db: Session) -> DashboardResponse:
        return DashboardResponse(
            stats=DashboardService.get_stats(db),
            recent_tasks=[TaskResponse.model_validate(task) for task in DashboardService.get_recent_tasks(db)],
            recent_activity=DashboardService.get_recent_activity(db),
        )

    # ----- analytics ------------------------------------------------------

    @staticmethod
    def get_tasks_by_status(db: Session) -> dict[str, int]:
        rows = db.query(Task.status, func.count(Task.id)).group_by(Task.status).all()
        counts = {TaskStatus(status).value: count for status, count in rows}
        return {status.value: counts.get(status.value, 0) for status in TaskStatus}

    @staticmethod
    def _members(db: Session) -> list[User]:
        return db.query(User).filter(User.role != UserRole.ADMIN).order_by(User.name, User.id).all()

    @staticmethod
    def get_tasks_by_user(db: Session) -> list[UserTaskBreakdown]:
        breakdown = []
        for user in DashboardService._members(db):
            total = len(user.assigned_tasks)
            active = user.active_tasks_count
            breakdown.append(
                UserTaskBreakdown(
                    id=user.id,
                    name=user.name,
                    total_tasks=total,
                    active_tasks=active,
                    completed_tasks=total - active,
                    member_status=classify_member_status(active),
                )
            )
        return breakdown

    @staticmethod
    def get_completion_rates(db: Session) -> list[CompletionRate]:
        rates = []
        for user in DashboardService._members(db):
            total = len(user.assigned_tasks)
            completed = user.completed_tasks_count
            rates.append(
                CompletionRate(
                    id=user.id,
                    user=user.name,
                    total_tasks=total,
                    completed_tasks=completed,
                    completion_rate=percentage(completed, total),
                )
            )
        return rates

    @staticmethod
    def get_overdue_analysis(db: Session) -> OverdueAnalysis:
        overdue = db.query(Task).filter(*_overdue_filter()).all()
        by_user: dict[str, int] = {}
        for task in overdue:
            for assignee in task.assignees:
                by_user[assignee.name] = by_user.get(assignee.name, 0) + 1
        average = (
            round(sum(task.days_overdue for task in overdue) / len(overdue), 1) if overdue else 0.0
        )
        return OverdueAnalysis(
            total_overdue=len(overdue),
            overdue_by_user=by_user,
            average_overdue_days=average,
        )

    @staticmethod
    def get_monthly_progress(db: Session, months: int = MONTHS_OF_PROGRESS) -> list[MonthlyProgress]:
        """Created vs completed per calendar month, oldest month first."""
        current_month = get_month_start(get_current_date())
        progress = []
        for offset in range(months - 1, -1, -1):
            month_start = shift_months(current_month, -offset)
            start = datetime.combine(month_start, time.min)
            end = datetime.combine(shift_months(month_start, 1), time.min)
            created = _count(db, Task.created_at >= start, Task.created_at < end)
            completed = _count(
                db,
                Task.status == TaskStatus.COMPLETED,
                Task.updated_at >= start,
                Task.updated_at < end,
            )
            progress.append(
                MonthlyProgress(month=format_month_label(month_start), created=created, completed=completed)
            )
        return progress

    @staticmethod
    def get_analytics(db: Session) -> AnalyticsResponse:
        return AnalyticsResponse(
            tasks_by_status=DashboardService.get_tasks_by_status(db),
            tasks_by_user=DashboardService.get_tasks_by_user(db),
            completion_rates=DashboardService.get_completion_rates(db),
            overdue_analysis=DashboardService.get_overdue_analysis(db),
            monthly_progress=DashboardService.get_monthly_progress(db),
        )

    @staticmethod
    def get_system_stats(db: Session) -> SystemStats:
        users_by_role = dict.fromkeys((role.value for role in UserRole), 0)
        for role, count in db.query(User.role, func.count(User.id)).group_by(User.role).all():
            users_by_role[UserRole(role).value] = count
        users_by_status = dict.fromkeys((status.value for status in UserStatus), 0)
        for status, count in db.query(User.status, func.count(User.id)).group_by(User.status).all():
            users_by_status[UserStatus(status).value] = count
        tasks_by_priority = dict.fromkeys((priority.value for priority in TaskPriority), 0)
        for priority, count in db.query(Task.priority, func.count(Task.id)).group_by(Task.priority).all():
            tasks_by_priority[TaskPriority(priority).value] = count
        totals = db.query(
            func.count(Notification.id),
            func.count(case((Notification.read_at.is_(None), Notification.id))),
        ).one()
        return SystemStats(
            users_by_role=users_by_role,
            users_by_status=users_by_status,
            tasks_by_status=DashboardService.get_tasks_by_status(db),
            tasks_by_priority=tasks_by_priority,
            total_notifications=totals[0] or 0,
            unread_notifications=totals[1] or 0,
        )
