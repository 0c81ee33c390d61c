"""API router for health and reference data."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from tasktracker import __version__
from tasktracker.database import get_db
from tasktracker.dependencies import get_current_user, require_admin
from tasktracker.models.task import TaskPriority, TaskStatus
from tasktracker.models.user import User, UserRole
from tasktracker.schemas.common import Envelope
from tasktracker.schemas.dashboard import SystemStats
from tasktracker.services.clock import get_current_time
from tasktracker.services.dashboard_service import DashboardService

router = APIRouter()


@router.get("/health")
def health() -> dict:
    """Liveness probe; no authentication."""
    return {
        "success": True,
        "message": "API is running",
        "timestamp": get_current_time().isoformat(timespec="seconds"),
        "version": __version__,
    }


@router.get("/utils/task-statuses", response_model=Envelope[dict[str, list[str]]])
def task_statuses(current_user: User = Depends(get_current_user)) -> Envelope[dict[str, list[str]]]:
    return Envelope(
        data={
            "statuses": [item.value for item in TaskStatus],
            "priorities": [item.value for item in TaskPriority],
        }
    )


@router.get("/utils/user-roles", response_model=Envelope[list[str]])
def user_roles(current_user: User = Depends(get_current_user)) -> Envelope[list[str]]:
    return Envelope(data=[role.value for role in UserRole])


@router.get("/utils/system-stats", response_model=Envelope[SystemStats])
def system_stats(
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> Envelope[SystemStats]:
    return Envelope(data=DashboardService.get_system_stats(db))
