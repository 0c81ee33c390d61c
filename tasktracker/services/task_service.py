"""Service for task business logic."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload

from tasktracker.errors import AuthorizationError, ValidationError
from tasktracker.models.task import Task, TaskPriority, TaskStatus
from tasktracker.models.task_assignment import task_assignees
from tasktracker.models.user import User, UserRole
from tasktracker.services.clock import get_current_date
from tasktracker.services.notification_service import NotificationService
from tasktracker.utils.pagination import paginate

if TYPE_CHECKING:
    from tasktracker.schemas.task import TaskCreate, TaskUpdate

logger = logging.getLogger("tasktracker.tasks")


class TaskService:
    """Service for managing tasks, their assignees and pair programmer."""

    @staticmethod
    def _get_users_by_ids(db: Session, user_ids: list[int], *, field: str = "assignees") -> list[User]:
        """Load users by IDs ensuring all exist; duplicates are collapsed."""
        if not user_ids:
            return []
        unique_ids = list(dict.fromkeys(user_ids))
        users = db.query(User).filter(User.id.in_(unique_ids)).all()
        found_ids = {user.id for user in users}
        missing = [user_id for user_id in unique_ids if user_id not in found_ids]
        if missing:
            raise ValidationError.for_field(field, f"Users not found: {missing}")
        user_map = {user.id: user for user in users}
        return [user_map[user_id] for user_id in unique_ids]

    @staticmethod
    def _check_pair_programmer(db: Session, user_id: int | None) -> None:
        if user_id is not None and db.get(User, user_id) is None:
            raise ValidationError.for_field("pair_programmer_id", f"User not found: {user_id}")

    @staticmethod
    def _base_query(db: Session):
        return db.query(Task).options(selectinload(Task.assignees))

    @staticmethod
    def get_task(db: Session, task_id: int) -> Task | None:
        return TaskService._base_query(db).filter(Task.id == task_id).first()

    @staticmethod
    def list_tasks(
        db: Session,
        *,
        status: str | None = None,
        priority: TaskPriority | None = None,
        assignee_id: int | None = None,
        search: str | None = None,
        page: int = 1,
        per_page: int = 10,
    ) -> tuple[list[Task], int]:
        """Filtered, newest-first page of tasks. `status="all"` means no status filter."""
        query = TaskService._base_query(db)
        if status and status != "all":
            try:
                query = query.filter(Task.status == TaskStatus(status))
            except ValueError:
                raise ValidationError.for_field("status", f"Unknown status: {status}") from None
        if priority is not None:
            query = query.filter(Task.priority == priority)
        if assignee_id is not None:
            query = query.filter(Task.assignees.any(User.id == assignee_id))
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(or_(Task.title.ilike(pattern), Task.description.ilike(pattern)))
        query = query.order_by(Task.created_at.desc(), Task.id.desc())
        return paginate(query, page, per_page)

    @staticmethod
    def get_user_tasks(db: Session, user_id: int) -> list[Task]:
        """Tasks the user created or is assigned to, newest first."""
        assigned_ids = db.query(task_assignees.c.task_id).filter(task_assignees.c.user_id == user_id)
        return (
            TaskService._base_query(db)
            .filter(or_(Task.created_by == user_id, Task.id.in_(assigned_ids)))
            .order_by(Task.created_at.desc(), Task.id.desc())
            .all()
        )

    @staticmethod
    def create_task(db: Session, task_data: "TaskCreate", actor: User) -> Task:
        """Create a task owned by `actor` and notify its assignees."""
        TaskService._check_pair_programmer(db, task_data.pair_programmer_id)
        assignees = TaskService._get_users_by_ids(db, task_data.assignees)
        payload = task_data.model_dump(exclude={"assignees"})
        task = Task(**payload, created_by=actor.id)
        task.assignees = assignees
        db.add(task)
        db.commit()
        db.refresh(task)
        logger.info(f"Task created: id={task.id} by={actor.id} assignees={[u.id for u in assignees]}")

        for assignee in assignees:
            NotificationService.notify_task_assigned(db, task, assignee, actor)
        return task

    @staticmethod
    def can_update(task: Task, actor: User) -> bool:
        if actor.role in (UserRole.ADMIN, UserRole.MANAGER):
            return True
        if actor.id in (task.created_by, task.pair_programmer_id):
            return True
        return any(user.id == actor.id for user in task.assignees)

    @staticmethod
    def can_delete(task: Task, actor: User) -> bool:
        return actor.is_admin or task.created_by == actor.id

    @staticmethod
    def update_task(db: Session, task_id: int, task_data: "TaskUpdate", actor: User) -> Task | None:
        """Partially update a task; a provided assignee list replaces the current set."""
        task = TaskService.get_task(db, task_id)
        if not task:
            return None
        if not TaskService.can_update(task, actor):
            raise AuthorizationError("You are not allowed to update this task")

        update_data = task_data.model_dump(exclude_unset=True)
        for key in ("title", "status", "priority"):
            if key in update_data and update_data[key] is None:
                raise ValidationError.for_field(key, f"The {key} field cannot be null.")

        new_assignees: list[User] | None = None
        if "assignees" in update_data:
            new_assignees = TaskService._get_users_by_ids(db, update_data.pop("assignees") or [])
        if "pair_programmer_id" in update_data:
            TaskService._check_pair_programmer(db, update_data["pair_programmer_id"])

        old_status = task.status
        previous_ids = {user.id for user in task.assignees}
        for key, value in update_data.items():
            setattr(task, key, value)
        if new_assignees is not None:
            task.assignees = new_assignees
        db.commit()
        db.refresh(task)
        logger.info(f"Task updated: id={task.id} by={actor.id} fields={sorted(task_data.model_fields_set)}")

        if new_assignees is not None:
            for assignee in new_assignees:
                if assignee.id not in previous_ids:
                    NotificationService.notify_task_assigned(db, task, assignee, actor)
        if "status" in update_data and task.status != old_status:
            NotificationService.notify_task_status_changed(db, task, old_status, task.status, actor)
        return task

    @staticmethod
    def delete_task(db: Session, task_id: int, actor: User) -> bool:
        task = db.get(Task, task_id)
        if not task:
            return False
        if not TaskService.can_delete(task, actor):
            raise AuthorizationError("You are not allowed to delete this task")
        db.delete(task)
        db.commit()
        logger.info(f"Task deleted: id={task_id} by={actor.id}")
        return True

    @staticmethod
    def get_overdue_tasks(db: Session) -> list[Task]:
        """Incomplete tasks whose due date is before today."""
        return (
            TaskService._base_query(db)
            .filter(
                Task.due_date.is_not(None),
                Task.due_date < get_current_date(),
                Task.status != TaskStatus.COMPLETED,
            )
            .order_by(Task.due_date, Task.id)
            .all()
        )
