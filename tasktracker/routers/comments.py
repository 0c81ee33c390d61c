"""API router for task comments."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from tasktracker.database import get_db
from tasktracker.dependencies import get_current_user
from tasktracker.errors import NotFoundError
from tasktracker.models.task import Task
from tasktracker.models.user import User
from tasktracker.schemas.common import Envelope
from tasktracker.schemas.task_comment import CommentPayload, CommentResponse
from tasktracker.services.comment_service import CommentService

router = APIRouter()


def _require_task(db: Session, task_id: int) -> Task:
    task = db.get(Task, task_id)
    if task is None:
        raise NotFoundError("Task not found")
    return task


@router.get("/{task_id}/comments", response_model=Envelope[list[CommentResponse]])
def list_comments(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Envelope[list[CommentResponse]]:
    """Comments on a task, newest first."""
    _require_task(db, task_id)
    comments = CommentService.list_comments(db, task_id)
    return Envelope(data=[CommentResponse.for_viewer(comment, current_user) for comment in comments])


@router.post(
    "/{task_id}/comments",
    response_model=Envelope[CommentResponse],
    status_code=status.HTTP_201_CREATED,
)
def add_comment(
    task_id: int,
    payload: CommentPayload,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Envelope[CommentResponse]:
    _require_task(db, task_id)
    comment = CommentService.add_comment(db, task_id, payload.comment, current_user)
    return Envelope(data=CommentResponse.for_viewer(comment, current_user), message="Comment added successfully")


@router.put("/{task_id}/comments/{comment_id}", response_model=Envelope[CommentResponse])
def update_comment(
    task_id: int,
    comment_id: int,
    payload: CommentPayload,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Envelope[CommentResponse]:
    _require_task(db, task_id)
    comment = CommentService.update_comment(db, task_id, comment_id, payload.comment, current_user)
    if comment is None:
        raise NotFoundError("Comment not found")
    return Envelope(data=CommentResponse.for_viewer(comment, current_user), message="Comment updated successfully")


@router.delete("/{task_id}/comments/{comment_id}", response_model=Envelope[None])
def delete_comment(
    task_id: int,
    comment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Envelope[None]:
    _require_task(db, task_id)
    if not CommentService.delete_comment(db, task_id, comment_id, current_user):
        raise NotFoundError("Comment not found")
    return Envelope(message="Comment deleted successfully")
