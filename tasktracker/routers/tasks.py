"""API router for tasks."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from tasktracker.database import get_db
from tasktracker.dependencies import get_current_user
from tasktracker.errors import NotFoundError
from tasktracker.models.task import TaskPriority
from tasktracker.models.user import User
from tasktracker.schemas.common import Envelope, PaginatedEnvelope, Pagination
from tasktracker.schemas.task import TaskCreate, TaskResponse, TaskUpdate
from tasktracker.services.task_service import TaskService

router = APIRouter()


@router.get("", response_model=PaginatedEnvelope[TaskResponse])
def list_tasks(
    status_filter: str | None = Query(None, alias="status"),
    priority: TaskPriority | None = None,
    assignee: int | None = None,
    search: str | None = None,
    page: int = Query(1, ge=1),
    per_page: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> PaginatedEnvelope[TaskResponse]:
    """List tasks, newest first."""
    tasks, total = TaskService.list_tasks(
        db,
        status=status_filter,
        priority=priority,
        assignee_id=assignee,
        search=search,
        page=page,
        per_page=per_page,
    )
    return PaginatedEnvelope(
        data=[TaskResponse.model_validate(task) for task in tasks],
        pagination=Pagination.build(page, per_page, total),
    )


@router.post("", response_model=Envelope[TaskResponse], status_code=status.HTTP_201_CREATED)
def create_task(
    task: TaskCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Envelope[TaskResponse]:
    created = TaskService.create_task(db, task, current_user)
    return Envelope(data=TaskResponse.model_validate(created), message="Task created successfully")


@router.get("/my-tasks", response_model=Envelope[list[TaskResponse]])
def my_tasks(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Envelope[list[TaskResponse]]:
    """Tasks the caller created or is assigned to."""
    tasks = TaskService.get_user_tasks(db, current_user.id)
    return Envelope(data=[TaskResponse.model_validate(task) for task in tasks])


@router.get("/{task_id}", response_model=Envelope[TaskResponse])
def get_task(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Envelope[TaskResponse]:
    task = TaskService.get_task(db, task_id)
    if not task:
        raise NotFoundError("Task not found")
    return Envelope(data=TaskResponse.model_validate(task))


@router.put("/{task_id}", response_model=Envelope[TaskResponse])
def update_task(
    task_id: int,
    task_update: TaskUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Envelope[TaskResponse]:
    task = TaskService.update_task(db, task_id, task_update, current_user)
    if not task:
        raise NotFoundError("Task not found")
    return Envelope(data=TaskResponse.model_validate(task), message="Task updated successfully")


@router.delete("/{task_id}", response_model=Envelope[None])
def delete_task(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Envelope[None]:
    if not TaskService.delete_task(db, task_id, current_user):
        raise NotFoundError("Task not found")
    return Envelope(message="Task deleted successfully")
