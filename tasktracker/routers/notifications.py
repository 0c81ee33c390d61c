"""API router for the per-user notification inbox."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from tasktracker.database import get_db
from tasktracker.dependencies import get_current_user, require_admin
from tasktracker.models.user import User
from tasktracker.schemas.common import Envelope, PaginatedEnvelope, Pagination
from tasktracker.schemas.notification import (
    AdminNotificationResponse,
    DeleteResult,
    MarkResult,
    NotificationIdsRequest,
    NotificationListResponse,
    NotificationResponse,
    NotificationStats,
    SystemNotificationRequest,
    SystemNotificationResult,
    UnreadCount,
)
from tasktracker.services.notification_service import NotificationService

router = APIRouter()


@router.get("", response_model=NotificationListResponse)
def list_notifications(
    type: str | None = None,
    read_status: str | None = Query(None, pattern="^(read|unread|all)$"),
    sort_by: str = "created_at",
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> NotificationListResponse:
    items, total = NotificationService.list_notifications(
        db,
        current_user.id,
        type=type,
        read_status=read_status,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        per_page=per_page,
    )
    return NotificationListResponse(
        data=[NotificationResponse.model_validate(item) for item in items],
        pagination=Pagination.build(page, per_page, total),
        unread_count=NotificationService.unread_count(db, current_user.id),
    )


@router.get("/unread-count", response_model=Envelope[UnreadCount])
def unread_count(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Envelope[UnreadCount]:
    return Envelope(data=UnreadCount(unread_count=NotificationService.unread_count(db, current_user.id)))


@router.get("/stats", response_model=Envelope[NotificationStats])
def notification_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Envelope[NotificationStats]:
    return Envelope(data=NotificationStats(**NotificationService.get_stats(db, current_user.id)))


@router.get("/admin", response_model=PaginatedEnvelope[AdminNotificationResponse])
def admin_notifications(
    type: str | None = None,
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> PaginatedEnvelope[AdminNotificationResponse]:
    """Notifications addressed to admin accounts."""
    items, total = NotificationService.list_admin_notifications(db, type=type, page=page, per_page=per_page)
    return PaginatedEnvelope(
        data=[AdminNotificationResponse.model_validate(item) for item in items],
        pagination=Pagination.build(page, per_page, total),
    )


@router.post("/mark-as-read", response_model=Envelope[MarkResult])
def mark_as_read(
    payload: NotificationIdsRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Envelope[MarkResult]:
    marked = NotificationService.mark_as_read(db, current_user.id, payload.notification_ids)
    return Envelope(
        data=MarkResult(marked_count=marked, unread_count=NotificationService.unread_count(db, current_user.id)),
        message=f"{marked} notification(s) marked as read",
    )


@router.post("/mark-as-unread", response_model=Envelope[MarkResult])
def mark_as_unread(
    payload: NotificationIdsRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Envelope[MarkResult]:
    marked = NotificationService.mark_as_unread(db, current_user.id, payload.notification_ids)
    return Envelope(
        data=MarkResult(marked_count=marked, unread_count=NotificationService.unread_count(db, current_user.id)),
        message=f"{marked} notification(s) marked as unread",
    )


@router.post("/mark-all-read", response_model=Envelope[MarkResult])
def mark_all_read(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Envelope[MarkResult]:
    marked = NotificationService.mark_all_as_read(db, current_user.id)
    return Envelope(
        data=MarkResult(marked_count=marked, unread_count=0),
        message="All notifications marked as read",
    )


@router.delete("", response_model=Envelope[DeleteResult])
def delete_notifications(
    payload: NotificationIdsRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Envelope[DeleteResult]:
    deleted = NotificationService.delete_notifications(db, current_user.id, payload.notification_ids)
    return Envelope(
        data=DeleteResult(deleted_count=deleted, unread_count=NotificationService.unread_count(db, current_user.id)),
        message=f"{deleted} notification(s) deleted",
    )


@router.post("/system", response_model=Envelope[SystemNotificationResult], status_code=status.HTTP_201_CREATED)
def send_system_notification(
    payload: SystemNotificationRequest,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> Envelope[SystemNotificationResult]:
    """Broadcast a system message to selected users, a role, or everyone."""
    sent = NotificationService.send_system_notification(
        db,
        title=payload.title,
        message=payload.message,
        user_ids=payload.user_ids,
        role=payload.role,
        data=payload.data,
    )
    return Envelope(data=SystemNotificationResult(sent_count=len(sent)), message="System notification sent")
