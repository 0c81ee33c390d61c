"""Unit tests for the users API router."""

from collections.abc import Generator
from typing import TYPE_CHECKING

import pytest
from fastapi.testclient import TestClient

from tasktracker.database import Base, get_db
from tasktracker.main import app
from tasktracker.models.task import TaskStatus
from tasktracker.models.user import User, UserRole
from tasktracker.security import verify_password
from tests.utils import (
    DEFAULT_PASSWORD,
    api_path,
    auth_headers,
    clear_tables,
    create_sqlite_engine,
    make_task,
    make_user,
    test_client_with_session,
)

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
        yield db
    finally:
        db.rollback()
        db.close()


@pytest.fixture(scope="function")
def client(db_session: "Session") -> Generator[TestClient, None, None]:
    with test_client_with_session(app, get_db, db_session) as test_client:
        yield test_client


@pytest.fixture(scope="function")
def admin(db_session: "Session") -> User:
    return make_user(db_session, "Admin", role=UserRole.ADMIN)


class TestAdminUserManagement:
    """Endpoints restricted to admins."""

    def test_non_admin_forbidden(self, client: TestClient, db_session: "Session") -> None:
        manager = make_user(db_session, "Manager", role=UserRole.MANAGER)

        response = client.get(api_path("/users"), headers=auth_headers(manager.id))

        assert response.status_code == 403
        assert response.json() == {"success": False, "message": "Admin access required"}

    def test_create_user(self, client: TestClient, admin: User) -> None:
        response = client.post(
            api_path("/users"),
            json={
                "name": "Esha Nadeem",
                "email": "esha@example.com",
                "password": "secret123",
                "role": "manager",
                "department": "Engineering",
            },
            headers=auth_headers(admin.id),
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["role"] == "manager"
        assert data["status"] == "active"
        assert data["initials"] == "EN"
        assert data["member_status"] == "Available"
        assert "password_hash" not in data

    def test_create_user_duplicate_email(self, client: TestClient, db_session: "Session", admin: User) -> None:
        make_user(db_session, "Taken", email="taken@example.com")

        response = client.post(
            api_path("/users"),
            json={"name": "Again", "email": "taken@example.com", "password": "secret123"},
            headers=auth_headers(admin.id),
        )

        assert response.status_code == 422
        assert response.json()["errors"]["email"] == ["The email has already been taken."]

    def test_create_user_short_password(self, client: TestClient, admin: User) -> None:
        response = client.post(
            api_path("/users"),
            json={"name": "Shorty", "email": "short@example.com", "password": "123"},
            headers=auth_headers(admin.id),
        )

        assert response.status_code == 422
        assert "password" in response.json()["errors"]

    def test_create_user_multibyte_password_too_long(self, client: TestClient, admin: User) -> None:
        response = client.post(
            api_path("/users"),
            json={"name": "Wide", "email": "wide@example.com", "password": "密" * 30},
            headers=auth_headers(admin.id),
        )

        assert response.status_code == 422
        assert "password" in response.json()["errors"]

    def test_update_user_rejects_blank_name_and_long_password(
        self, client: TestClient, db_session: "Session", admin: User
    ) -> None:
        alice = make_user(db_session, "Alice")

        response = client.put(
            api_path(f"/users/{alice.id}"),
            json={"name": "  ", "password": "é" * 40},
            headers=auth_headers(admin.id),
        )

        assert response.status_code == 422
        assert set(response.json()["errors"]) == {"name", "password"}
        db_session.refresh(alice)
        assert alice.name == "Alice"

    def test_list_users_paginated(self, client: TestClient, db_session: "Session", admin: User) -> None:
        for index in range(3):
            make_user(db_session, f"Member {index}", department="Ops")

        response = client.get(
            api_path("/users"),
            params={"search": "ops", "per_page": 2, "sort_by": "name", "sort_order": "asc"},
            headers=auth_headers(admin.id),
        )

        body = response.json()
        assert [user["name"] for user in body["data"]] == ["Member 0", "Member 1"]
        assert body["pagination"]["total"] == 3
        assert body["pagination"]["total_pages"] == 2

    def test_get_user_details(self, client: TestClient, db_session: "Session", admin: User) -> None:
        alice = make_user(db_session, "Alice")
        make_task(db_session, admin, "Assigned", assignees=[alice])
        make_task(db_session, alice, "Her own")

        response = client.get(api_path(f"/users/{alice.id}"), headers=auth_headers(admin.id))

        data = response.json()["data"]
        assert [task["title"] for task in data["assigned_tasks"]] == ["Assigned"]
        assert [task["title"] for task in data["created_tasks"]] == ["Her own"]
        assert data["member_status"] == "Locked"

    def test_get_missing_user(self, client: TestClient, admin: User) -> None:
        response = client.get(api_path("/users/4040"), headers=auth_headers(admin.id))

        assert response.status_code == 404

    def test_update_user(self, client: TestClient, db_session: "Session", admin: User) -> None:
        alice = make_user(db_session, "Alice")

        response = client.put(
            api_path(f"/users/{alice.id}"),
            json={"role": "manager", "phone": "555-0101"},
            headers=auth_headers(admin.id),
        )

        data = response.json()["data"]
        assert data["role"] == "manager"
        assert data["phone"] == "555-0101"

    def test_delete_user_rules(self, client: TestClient, db_session: "Session", admin: User) -> None:
        busy = make_user(db_session, "Busy")
        idle = make_user(db_session, "Idle")
        make_task(db_session, admin, assignees=[busy], status=TaskStatus.OPEN)
        make_task(db_session, admin, assignees=[idle], status=TaskStatus.COMPLETED)

        response = client.delete(api_path(f"/users/{busy.id}"), headers=auth_headers(admin.id))
        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["data"] == {"active_tasks": 1}

        response = client.delete(api_path(f"/users/{admin.id}"), headers=auth_headers(admin.id))
        assert response.status_code == 400

        response = client.delete(api_path(f"/users/{idle.id}"), headers=auth_headers(admin.id))
        assert response.status_code == 200
        assert response.json()["message"] == "User deleted successfully"


class TestSelfService:
    """Profile and team endpoints available to every user."""

    def test_profile(self, client: TestClient, db_session: "Session") -> None:
        alice = make_user(db_session, "Alice")
        make_task(db_session, alice, "Mine")

        response = client.get(api_path("/users/profile"), headers=auth_headers(alice.id))

        data = response.json()["data"]
        assert data["email"] == "alice@example.com"
        assert data["unread_notifications_count"] == 0
        assert [task["title"] for task in data["created_tasks"]] == ["Mine"]

    def test_update_profile_password(self, client: TestClient, db_session: "Session") -> None:
        alice = make_user(db_session, "Alice")

        response = client.put(
            api_path("/users/profile"),
            json={
                "current_password": DEFAULT_PASSWORD,
                "password": "changed-pass",
                "password_confirmation": "changed-pass",
            },
            headers=auth_headers(alice.id),
        )

        assert response.status_code == 200
        db_session.refresh(alice)
        assert verify_password("changed-pass", alice.password_hash)

    def test_update_profile_wrong_current_password(self, client: TestClient, db_session: "Session") -> None:
        alice = make_user(db_session, "Alice")

        response = client.put(
            api_path("/users/profile"),
            json={
                "current_password": "definitely-wrong",
                "password": "changed-pass",
                "password_confirmation": "changed-pass",
            },
            headers=auth_headers(alice.id),
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Current password is incorrect"

    def test_update_profile_confirmation_mismatch(self, client: TestClient, db_session: "Session") -> None:
        alice = make_user(db_session, "Alice")

        response = client.put(
            api_path("/users/profile"),
            json={"current_password": DEFAULT_PASSWORD, "password": "changed-pass", "password_confirmation": "nope"},
            headers=auth_headers(alice.id),
        )

        assert response.status_code == 422
        assert list(response.json()["errors"]) == ["password_confirmation"]

    def test_update_profile_missing_current_password(self, client: TestClient, db_session: "Session") -> None:
        alice = make_user(db_session, "Alice")

        response = client.put(
            api_path("/users/profile"),
            json={"password": "changed-pass", "password_confirmation": "changed-pass"},
            headers=auth_headers(alice.id),
        )

        assert response.status_code == 422
        assert list(response.json()["errors"]) == ["current_password"]

    def test_update_profile_long_multibyte_password(self, client: TestClient, db_session: "Session") -> None:
        alice = make_user(db_session, "Alice")
        password = "é" * 40

        response = client.put(
            api_path("/users/profile"),
            json={"current_password": DEFAULT_PASSWORD, "password": password, "password_confirmation": password},
            headers=auth_headers(alice.id),
        )

        assert response.status_code == 422
        assert "password" in response.json()["errors"]

    def test_update_profile_blank_name(self, client: TestClient, db_session: "Session") -> None:
        alice = make_user(db_session, "Alice")

        response = client.put(api_path("/users/profile"), json={"name": "\t "}, headers=auth_headers(alice.id))

        assert response.status_code == 422
        assert "name" in response.json()["errors"]
        db_session.refresh(alice)
        assert alice.name == "Alice"

    def test_team_members(self, client: TestClient, db_session: "Session", admin: User) -> None:
        alice = make_user(db_session, "Alice")
        make_user(db_session, "Bob")
        make_task(db_session, admin, assignees=[alice])
        make_task(db_session, admin, assignees=[alice])

        response = client.get(api_path("/users/team-members"), headers=auth_headers(alice.id))

        members = {member["name"]: member for member in response.json()["data"]}
        assert set(members) == {"Alice", "Bob"}
        assert members["Alice"]["member_status"] == "Paired"
        assert members["Alice"]["active_tasks_count"] == 2
        assert members["Bob"]["member_status"] == "Available"
