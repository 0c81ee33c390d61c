"""Unit tests for TaskService."""

from collections.abc import Generator
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

import pytest

from tasktracker.database import Base
from tasktracker.errors import AuthorizationError, ValidationError
from tasktracker.models.notification import Notification, NotificationType
from tasktracker.models.task import Task, TaskPriority, TaskStatus
from tasktracker.models.user import UserRole
from tasktracker.schemas.task import TaskCreate, TaskUpdate
from tasktracker.services.clock import get_current_date, reset_time_override, set_current_time
from tasktracker.services.task_service import TaskService
from tests.utils import clear_tables, create_sqlite_engine, make_task, make_user

if TYPE_CHECKING:
    from sqlalchemy.orm import Session


engine, TestingSessionLocal = create_sqlite_engine()


@pytest.fixture(scope="module")
def db_setup() -> Generator[None, None, None]:
    """Create test database schema once per module."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session(db_setup: None) -> Generator["Session", None, None]:
    """Fresh session over empty tables with the clock pinned to midday."""
    db = TestingSessionLocal()
    try:
        clear_tables(db)
        set_current_time(datetime(2026, 5, 20, 12, 0))
        yield db
    finally:
        reset_time_override()
        db.rollback()
        db.close()


def _notifications(db: "Session", user_id: int, type: NotificationType | None = None) -> list[Notification]:
    query = db.query(Notification).filter(Notification.user_id == user_id)
    if type is not None:
        query = query.filter(Notification.type == type.value)
    return query.order_by(Notification.id).all()


class TestCreateTask:
    """Task creation."""

    def test_defaults(self, db_session: "Session") -> None:
        creator = make_user(db_session, "Creator")
        task = TaskService.create_task(db_session, TaskCreate(title="  Write docs  "), creator)

        assert task.id is not None
        assert task.title == "Write docs"
        assert task.status == TaskStatus.NEW
        assert task.priority == TaskPriority.MEDIUM
        assert task.created_by == creator.id
        assert task.assignees == []
        assert task.pair_programmer_id is None

    def test_assignees_notified(self, db_session: "Session") -> None:
        creator = make_user(db_session, "Creator")
        alice = make_user(db_session, "Alice")
        bob = make_user(db_session, "Bob")

        task = TaskService.create_task(
            db_session,
            TaskCreate(title="Ship it", assignees=[alice.id, bob.id, alice.id], due_date=get_current_date()),
            creator,
        )

        assert [user.name for user in task.assignees] == ["Alice", "Bob"]
        for user in (alice, bob):
            rows = _notifications(db_session, user.id, NotificationType.TASK_ASSIGNED)
            assert len(rows) == 1
            assert rows[0].title == 'New Task Assigned: "Ship it"'
            assert rows[0].message == 'You have been assigned to task "Ship it" by Creator.'
            assert rows[0].related_type == "task"
            assert rows[0].related_id == task.id
            assert rows[0].data["assigned_by"] == "Creator"
        assert _notifications(db_session, creator.id) == []

    def test_unknown_assignee_rejected(self, db_session: "Session") -> None:
        creator = make_user(db_session, "Creator")

        with pytest.raises(ValidationError) as exc_info:
            TaskService.create_task(db_session, TaskCreate(title="T", assignees=[9999]), creator)

        assert "assignees" in exc_info.value.errors
        assert db_session.query(Task).count() == 0

    def test_unknown_pair_programmer_rejected(self, db_session: "Session") -> None:
        creator = make_user(db_session, "Creator")

        with pytest.raises(ValidationError) as exc_info:
            TaskService.create_task(db_session, TaskCreate(title="T", pair_programmer_id=9999), creator)

        assert "pair_programmer_id" in exc_info.value.errors


class TestUpdateTask:
    """Partial updates, assignee replacement and status notifications."""

    def test_empty_assignee_list_clears_set(self, db_session: "Session") -> None:
        creator = make_user(db_session, "Creator")
        alice = make_user(db_session, "Alice")
        task = make_task(db_session, creator, assignees=[alice])

        updated = TaskService.update_task(db_session, task.id, TaskUpdate(assignees=[]), creator)

        assert updated is not None
        assert updated.assignees == []

    def test_omitted_assignees_unchanged(self, db_session: "Session") -> None:
        creator = make_user(db_session, "Creator")
        alice = make_user(db_session, "Alice")
        task = make_task(db_session, creator, assignees=[alice])

        updated = TaskService.update_task(db_session, task.id, TaskUpdate(title="Renamed"), creator)

        assert updated.title == "Renamed"
        assert [user.id for user in updated.assignees] == [alice.id]

    def test_only_new_assignees_notified(self, db_session: "Session") -> None:
        creator = make_user(db_session, "Creator")
        alice = make_user(db_session, "Alice")
        bob = make_user(db_session, "Bob")
        task = make_task(db_session, creator, assignees=[alice])

        TaskService.update_task(db_session, task.id, TaskUpdate(assignees=[alice.id, bob.id]), creator)

        assert _notifications(db_session, alice.id, NotificationType.TASK_ASSIGNED) == []
        assert len(_notifications(db_session, bob.id, NotificationType.TASK_ASSIGNED)) == 1

    def test_status_change_notifies_assignees_and_creator(self, db_session: "Session") -> None:
        creator = make_user(db_session, "Creator")
        alice = make_user(db_session, "Alice")
        task = make_task(db_session, creator, "Fix bug", assignees=[alice], status=TaskStatus.OPEN)

        TaskService.update_task(db_session, task.id, TaskUpdate(status=TaskStatus.IN_PROGRESS), alice)

        alice_rows = _notifications(db_session, alice.id, NotificationType.TASK_UPDATED)
        assert len(alice_rows) == 1
        assert alice_rows[0].message == 'Task "Fix bug" status changed from "Open" to "In Progress".'
        creator_rows = _notifications(db_session, creator.id, NotificationType.TASK_UPDATED)
        assert len(creator_rows) == 1
        assert creator_rows[0].message.startswith('Your task "Fix bug"')

    def test_creator_as_actor_not_notified(self, db_session: "Session") -> None:
        creator = make_user(db_session, "Creator")
        alice = make_user(db_session, "Alice")
        task = make_task(db_session, creator, assignees=[alice])

        TaskService.update_task(db_session, task.id, TaskUpdate(status=TaskStatus.IN_PROGRESS), creator)

        assert _notifications(db_session, creator.id) == []
        assert len(_notifications(db_session, alice.id, NotificationType.TASK_UPDATED)) == 1

    def test_same_status_sends_nothing(self, db_session: "Session") -> None:
        creator = make_user(db_session, "Creator")
        alice = make_user(db_session, "Alice")
        task = make_task(db_session, creator, assignees=[alice], status=TaskStatus.OPEN)

        TaskService.update_task(db_session, task.id, TaskUpdate(status=TaskStatus.OPEN), creator)

        assert _notifications(db_session, alice.id) == []

    def test_completion_notifies_admins(self, db_session: "Session") -> None:
        admin = make_user(db_session, "Admin", role=UserRole.ADMIN)
        creator = make_user(db_session, "Creator")
        alice = make_user(db_session, "Alice")
        task = make_task(db_session, creator, "Release", assignees=[alice])

        TaskService.update_task(db_session, task.id, TaskUpdate(status=TaskStatus.COMPLETED), alice)

        rows = _notifications(db_session, admin.id, NotificationType.TASK_COMPLETED)
        assert len(rows) == 1
        assert rows[0].title == 'Task Completed: "Release"'
        assert rows[0].message == 'Task "Release" has been completed by Alice.'

    def test_null_status_rejected(self, db_session: "Session") -> None:
        creator = make_user(db_session, "Creator")
        task = make_task(db_session, creator)

        with pytest.raises(ValidationError):
            TaskService.update_task(db_session, task.id, TaskUpdate(status=None), creator)

    def test_missing_task_returns_none(self, db_session: "Session") -> None:
        creator = make_user(db_session, "Creator")
        assert TaskService.update_task(db_session, 4242, TaskUpdate(title="x"), creator) is None


class TestPermissions:
    """Who may update and delete a task."""

    def test_update_permissions(self, db_session: "Session") -> None:
        creator = make_user(db_session, "Creator")
        assignee = make_user(db_session, "Assignee")
        partner = make_user(db_session, "Partner")
        manager = make_user(db_session, "Manager", role=UserRole.MANAGER)
        admin = make_user(db_session, "Admin", role=UserRole.ADMIN)
        stranger = make_user(db_session, "Stranger")
        task = make_task(db_session, creator, assignees=[assignee], pair_programmer=partner)

        for user in (creator, assignee, partner, manager, admin):
            assert TaskService.can_update(task, user) is True
        assert TaskService.can_update(task, stranger) is False

        with pytest.raises(AuthorizationError):
            TaskService.update_task(db_session, task.id, TaskUpdate(title="Nope"), stranger)

    def test_delete_permissions(self, db_session: "Session") -> None:
        creator = make_user(db_session, "Creator")
        assignee = make_user(db_session, "Assignee")
        admin = make_user(db_session, "Admin", role=UserRole.ADMIN)
        task = make_task(db_session, creator, assignees=[assignee])
        task_id = task.id

        assert TaskService.can_delete(task, creator) is True
        assert TaskService.can_delete(task, admin) is True
        assert TaskService.can_delete(task, assignee) is False

        with pytest.raises(AuthorizationError):
            TaskService.delete_task(db_session, task_id, assignee)
        assert TaskService.delete_task(db_session, task_id, admin) is True
        assert db_session.get(Task, task_id) is None
        assert TaskService.delete_task(db_session, task_id, admin) is False


class TestQueries:
    """Listing and lookup helpers."""

    def test_list_filters(self, db_session: "Session") -> None:
        creator = make_user(db_session, "Creator")
        alice = make_user(db_session, "Alice")
        make_task(db_session, creator, "Write API docs", assignees=[alice], priority=TaskPriority.HIGH)
        make_task(db_session, creator, "Fix login", status=TaskStatus.COMPLETED, description="api token bug")
        make_task(db_session, creator, "Plan sprint")

        items, total = TaskService.list_tasks(db_session, search="api")
        assert total == 2

        items, total = TaskService.list_tasks(db_session, status="Completed")
        assert [task.title for task in items] == ["Fix login"]

        items, total = TaskService.list_tasks(db_session, status="all")
        assert total == 3
        assert items[0].title == "Plan sprint"

        items, total = TaskService.list_tasks(db_session, assignee_id=alice.id, priority=TaskPriority.HIGH)
        assert [task.title for task in items] == ["Write API docs"]

    def test_unknown_status_filter(self, db_session: "Session") -> None:
        with pytest.raises(ValidationError):
            TaskService.list_tasks(db_session, status="Archived")

    def test_pagination(self, db_session: "Session") -> None:
        creator = make_user(db_session, "Creator")
        for index in range(5):
            make_task(db_session, creator, f"Task {index}")

        items, total = TaskService.list_tasks(db_session, page=2, per_page=2)

        assert total == 5
        assert [task.title for task in items] == ["Task 2", "Task 1"]

    def test_user_tasks_include_created_and_assigned(self, db_session: "Session") -> None:
        alice = make_user(db_session, "Alice")
        bob = make_user(db_session, "Bob")
        make_task(db_session, alice, "Mine")
        make_task(db_session, bob, "Assigned to Alice", assignees=[alice])
        make_task(db_session, bob, "Bob only")

        titles = {task.title for task in TaskService.get_user_tasks(db_session, alice.id)}

        assert titles == {"Mine", "Assigned to Alice"}

    def test_overdue_tasks(self, db_session: "Session") -> None:
        creator = make_user(db_session, "Creator")
        today = get_current_date()
        make_task(db_session, creator, "Late", due_date=today - timedelta(days=2))
        make_task(db_session, creator, "Late but done", due_date=today - timedelta(days=2), status=TaskStatus.COMPLETED)
        make_task(db_session, creator, "Due today", due_date=today)
        make_task(db_session, creator, "No date")

        assert [task.title for task in TaskService.get_overdue_tasks(db_session)] == ["Late"]
