"""API router for admin dashboards and the on-demand overdue sweep."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from tasktracker.database import get_db
from tasktracker.dependencies import require_admin
from tasktracker.models.user import User
from tasktracker.schemas.common import Envelope
from tasktracker.schemas.dashboard import AnalyticsResponse, DashboardResponse, SweepReportResponse
from tasktracker.services.dashboard_service import DashboardService
from tasktracker.services.overdue_sweep import OverdueSweep

router = APIRouter()


@router.get("/dashboard", response_model=Envelope[DashboardResponse])
def dashboard(
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> Envelope[DashboardResponse]:
    """Headline stats, the newest tasks and recent activity."""
    return Envelope(data=DashboardService.get_dashboard(db))


@router.get("/analytics", response_model=Envelope[AnalyticsResponse])
def analytics(
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> Envelope[AnalyticsResponse]:
    return Envelope(data=DashboardService.get_analytics(db))


@router.post("/overdue-sweep", response_model=Envelope[SweepReportResponse])
def run_overdue_sweep(
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> Envelope[SweepReportResponse]:
    """Run the overdue sweep now instead of waiting for the daily schedule."""
    report = OverdueSweep.run(db)
    return Envelope(
        data=SweepReportResponse(**report.as_dict()),
        message=f"Processed {report.processed} overdue task(s), sent notifications for {report.sent}",
    )
