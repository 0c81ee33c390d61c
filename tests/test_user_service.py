"""Unit tests for UserService."""

from collections.abc import Generator
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

import pytest

from tasktracker.database import Base
from tasktracker.errors import ConflictError, ValidationError
from tasktracker.models.notification import Notification, NotificationType
from tasktracker.models.task import Task, TaskStatus
from tasktracker.models.task_comment import TaskComment
from tasktracker.models.user import MemberStatus, User, UserRole, UserStatus
from tasktracker.schemas.auth import RegisterRequest
from tasktracker.schemas.user import ProfileUpdate, UserCreate, UserUpdate
from tasktracker.security import verify_password
from tasktracker.services.clock import reset_time_override, set_current_time, shift_time
from tasktracker.services.user_service import UserService
from tests.utils import DEFAULT_PASSWORD, clear_tables, create_sqlite_engine, make_task, make_user

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
    db = TestingSessionLocal()
    try:
        clear_tables(db)
        set_current_time(datetime(2026, 5, 20, 12, 0))
        yield db
    finally:
        reset_time_override()
        db.rollback()
        db.close()


class TestCreateUser:
    """Account creation and registration."""

    def test_create_user_notifies_admins(self, db_session: "Session") -> None:
        admin = make_user(db_session, "Admin", role=UserRole.ADMIN)
        user = UserService.create_user(
            db_session,
            UserCreate(name="Esha Nadeem", email="esha@example.com", password="secret123", role=UserRole.MANAGER),
        )

        assert user.id is not None
        assert user.role == UserRole.MANAGER
        assert verify_password("secret123", user.password_hash)
        rows = db_session.query(Notification).filter(Notification.user_id == admin.id).all()
        assert len(rows) == 1
        assert rows[0].type == NotificationType.NEW_USER.value
        assert rows[0].title == "New User Registered: Esha Nadeem"
        assert rows[0].message == "Esha Nadeem has joined the team as a Manager."
        assert (rows[0].related_type, rows[0].related_id) == ("user", user.id)

    def test_new_admin_not_notified_about_self(self, db_session: "Session") -> None:
        user = UserService.create_user(
            db_session,
            UserCreate(name="Root", email="root@example.com", password="secret123", role=UserRole.ADMIN),
        )

        assert db_session.query(Notification).filter(Notification.user_id == user.id).count() == 0

    def test_duplicate_email_rejected(self, db_session: "Session") -> None:
        make_user(db_session, "Taken", email="taken@example.com")

        with pytest.raises(ValidationError) as exc_info:
            UserService.create_user(
                db_session,
                UserCreate(name="Other", email="TAKEN@example.com", password="secret123"),
            )

        assert "email" in exc_info.value.errors
        assert db_session.query(User).count() == 1

    def test_register_forces_regular_active_user(self, db_session: "Session") -> None:
        user = UserService.register(
            db_session,
            RegisterRequest(
                name=" New Person ",
                email="new@example.com",
                password="secret123",
                password_confirmation="secret123",
            ),
        )

        assert user.name == "New Person"
        assert user.role == UserRole.USER
        assert user.status == UserStatus.ACTIVE

    def test_authenticate(self, db_session: "Session") -> None:
        make_user(db_session, "Alice", email="alice@example.com")

        assert UserService.authenticate(db_session, "ALICE@example.com", DEFAULT_PASSWORD) is not None
        assert UserService.authenticate(db_session, "alice@example.com", "wrong-password") is None
        assert UserService.authenticate(db_session, "nobody@example.com", DEFAULT_PASSWORD) is None


class TestUpdateUser:
    """Admin updates and self-service profile updates."""

    def test_update_user_fields_and_password(self, db_session: "Session") -> None:
        user = make_user(db_session, "Alice")

        updated = UserService.update_user(
            db_session,
            user.id,
            UserUpdate(department="QA", status=UserStatus.INACTIVE, password="newpass123"),
        )

        assert updated.department == "QA"
        assert updated.status == UserStatus.INACTIVE
        assert verify_password("newpass123", updated.password_hash)

    def test_update_user_email_conflict(self, db_session: "Session") -> None:
        make_user(db_session, "Alice", email="alice@example.com")
        bob = make_user(db_session, "Bob", email="bob@example.com")

        with pytest.raises(ValidationError):
            UserService.update_user(db_session, bob.id, UserUpdate(email="alice@example.com"))
        # Keeping one's own email is fine
        assert UserService.update_user(db_session, bob.id, UserUpdate(email="bob@example.com")) is not None

    def test_update_missing_user(self, db_session: "Session") -> None:
        assert UserService.update_user(db_session, 999, UserUpdate(name="x")) is None

    def test_profile_password_change(self, db_session: "Session") -> None:
        user = make_user(db_session, "Alice")

        UserService.update_profile(
            db_session,
            user,
            ProfileUpdate(
                phone="555-0100",
                current_password=DEFAULT_PASSWORD,
                password="brandnew123",
                password_confirmation="brandnew123",
            ),
        )

        assert user.phone == "555-0100"
        assert verify_password("brandnew123", user.password_hash)

    def test_profile_wrong_current_password(self, db_session: "Session") -> None:
        user = make_user(db_session, "Alice")

        with pytest.raises(ConflictError, match="Current password is incorrect"):
            UserService.update_profile(
                db_session,
                user,
                ProfileUpdate(
                    name="Changed",
                    current_password="not-it-at-all",
                    password="brandnew123",
                    password_confirmation="brandnew123",
                ),
            )

        db_session.refresh(user)
        assert user.name == "Alice"
        assert verify_password(DEFAULT_PASSWORD, user.password_hash)


class TestDeleteUser:
    """Deletion rules and cascades."""

    def test_admin_cannot_be_deleted(self, db_session: "Session") -> None:
        admin = make_user(db_session, "Admin", role=UserRole.ADMIN)
        other_admin = make_user(db_session, "Other Admin", role=UserRole.ADMIN)

        with pytest.raises(ConflictError):
            UserService.delete_user(db_session, other_admin.id, admin)

    def test_cannot_delete_self(self, db_session: "Session") -> None:
        manager = make_user(db_session, "Manager", role=UserRole.MANAGER)

        with pytest.raises(ConflictError):
            UserService.delete_user(db_session, manager.id, manager)

    def test_active_tasks_block_deletion(self, db_session: "Session") -> None:
        admin = make_user(db_session, "Admin", role=UserRole.ADMIN)
        alice = make_user(db_session, "Alice")
        make_task(db_session, admin, "Open work", assignees=[alice], status=TaskStatus.IN_PROGRESS)

        with pytest.raises(ConflictError) as exc_info:
            UserService.delete_user(db_session, alice.id, admin)

        assert exc_info.value.data == {"active_tasks": 1}
        assert db_session.get(User, alice.id) is not None

    def test_completed_tasks_allow_deletion_and_cascade(self, db_session: "Session") -> None:
        admin = make_user(db_session, "Admin", role=UserRole.ADMIN)
        second_admin = make_user(db_session, "Second Admin", role=UserRole.ADMIN)
        alice = make_user(db_session, "Alice", email="alice@example.com")
        bob = make_user(db_session, "Bob")
        alice_id = alice.id
        own_task = make_task(db_session, alice, "Alice's task", assignees=[bob])
        own_task_id = own_task.id
        shared = make_task(
            db_session, admin, "Shared", assignees=[alice], status=TaskStatus.COMPLETED, pair_programmer=bob
        )
        paired = make_task(db_session, admin, "Paired", assignees=[bob], pair_programmer=alice)
        paired_id, shared_id = paired.id, shared.id
        db_session.add(TaskComment(task_id=shared_id, user_id=alice_id, comment="done"))
        db_session.commit()

        assert UserService.delete_user(db_session, alice_id, admin) is True

        db_session.expire_all()
        assert db_session.get(User, alice_id) is None
        assert db_session.get(Task, own_task_id) is None
        assert db_session.get(Task, paired_id).pair_programmer_id is None
        shared_task = db_session.get(Task, shared_id)
        assert shared_task.assignees == []
        assert shared_task.comments == []
        assert db_session.query(Notification).filter(Notification.user_id == admin.id).count() == 0
        removal = db_session.query(Notification).filter(Notification.user_id == second_admin.id).one()
        assert removal.type == NotificationType.USER_REMOVED.value
        assert removal.message == "Alice (User) has been removed from the team by Admin."

    def test_delete_missing_user(self, db_session: "Session") -> None:
        admin = make_user(db_session, "Admin", role=UserRole.ADMIN)
        assert UserService.delete_user(db_session, 404, admin) is False


class TestProfiles:
    """Computed profile and team views."""

    def test_profile_counts(self, db_session: "Session") -> None:
        admin = make_user(db_session, "Admin", role=UserRole.ADMIN)
        alice = make_user(db_session, "Alice Smith")
        bob = make_user(db_session, "Bob")
        make_task(db_session, admin, "One", assignees=[alice], pair_programmer=bob)
        make_task(db_session, admin, "Two", assignees=[alice])
        make_task(db_session, admin, "Three", assignees=[alice], status=TaskStatus.COMPLETED)
        make_task(db_session, alice, "Created by Alice")

        profile = UserService.build_profile(db_session, alice, viewer=alice, include_details=True)

        assert profile.initials == "AS"
        assert profile.active_tasks_count == 2
        assert profile.completed_tasks_count == 1
        assert profile.total_tasks_count == 3
        assert profile.member_status == MemberStatus.PAIRED
        assert profile.pair_tasks_count == 1
        assert profile.paired_with == ["Bob"]
        assert len(profile.assigned_tasks) == 3
        assert [item.title for item in profile.created_tasks] == ["Created by Alice"]

        bob_profile = UserService.build_profile(db_session, bob)
        assert bob_profile.member_status == MemberStatus.AVAILABLE
        assert bob_profile.pair_tasks_count == 1
        assert bob_profile.paired_with == ["Alice Smith"]
        assert bob_profile.assigned_tasks is None

    def test_created_tasks_hidden_from_other_viewers(self, db_session: "Session") -> None:
        alice = make_user(db_session, "Alice")
        bob = make_user(db_session, "Bob")
        make_task(db_session, alice, "Private list")

        profile = UserService.build_profile(db_session, alice, viewer=bob, include_details=True)

        assert profile.assigned_tasks == []
        assert profile.created_tasks is None

    def test_team_members_exclude_admins_and_inactive(self, db_session: "Session") -> None:
        make_user(db_session, "Admin", role=UserRole.ADMIN)
        make_user(db_session, "Zed")
        make_user(db_session, "Amy", role=UserRole.MANAGER)
        make_user(db_session, "Gone", status=UserStatus.INACTIVE)

        names = [user.name for user in UserService.get_team_members(db_session)]

        assert names == ["Amy", "Zed"]

    def test_list_users_filters_and_sorting(self, db_session: "Session") -> None:
        make_user(db_session, "Carol", department="Design")
        shift_time(timedelta(minutes=1))
        make_user(db_session, "Alice", department="Engineering")
        shift_time(timedelta(minutes=1))
        make_user(db_session, "Bob", role=UserRole.MANAGER, department="Engineering")

        users, total = UserService.list_users(db_session, search="engineer", sort_by="name", sort_order="asc")
        assert total == 2
        assert [user.name for user in users] == ["Alice", "Bob"]

        users, total = UserService.list_users(db_session, role=UserRole.MANAGER)
        assert [user.name for user in users] == ["Bob"]

        # Unknown sort keys fall back to created_at
        users, _ = UserService.list_users(db_session, sort_by="password_hash")
        assert [user.name for user in users] == ["Bob", "Alice", "Carol"]
