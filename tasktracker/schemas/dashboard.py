"""Pydantic schemas for the admin dashboard, analytics and system stats."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from tasktracker.models.user import MemberStatus
from tasktracker.schemas.notification import RelatedRef
from tasktracker.schemas.task import TaskResponse


class DashboardStats(BaseModel):
    total_tasks: int
    total_members: int
    completion_rate: float
    overdue_tasks: int
    active_tasks: int
    new_tasks: int
    completed_tasks: int


class ActivityItem(BaseModel):
    """One entry of the merged recent-activity feed."""

    type: str
    title: str
    description: str
    timestamp: datetime
    related: RelatedRef | None = None


class DashboardResponse(BaseModel):
    stats: DashboardStats
    recent_tasks: list[TaskResponse]
    recent_activity: list[ActivityItem]


class UserTaskBreakdown(BaseModel):
    id: int
    name: str
    total_tasks: int
    active_tasks: int
    completed_tasks: int
    member_status: MemberStatus


class CompletionRate(BaseModel):
    id: int
    user: str
    total_tasks: int
    completed_tasks: int
    completion_rate: float


class OverdueAnalysis(BaseModel):
    total_overdue: int
    overdue_by_user: dict[str, int]
    average_overdue_days: float


class MonthlyProgress(BaseModel):
    month: str
    created: int
    completed: int


class AnalyticsResponse(BaseModel):
    tasks_by_status: dict[str, int]
    tasks_by_user: list[UserTaskBreakdown]
    completion_rates: list[CompletionRate]
    overdue_analysis: OverdueAnalysis
    monthly_progress: list[MonthlyProgress]


class SystemStats(BaseModel):
    users_by_role: dict[str, int]
    users_by_status: dict[str, int]
    tasks_by_status: dict[str, int]
    tasks_by_priority: dict[str, int]
    total_notifications: int
    unread_notifications: int


class SweepReportResponse(BaseModel):
    processed: int
    sent: int
    skipped: int
    failed: int


__all__ = [
    "DashboardStats",
    "ActivityItem",
    "DashboardResponse",
    "UserTaskBreakdown",
    "CompletionRate",
    "OverdueAnalysis",
    "MonthlyProgress",
    "AnalyticsResponse",
    "SystemStats",
    "SweepReportResponse",
]
