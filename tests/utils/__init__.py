"""Shared helpers for unit tests."""

from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager
from typing import Callable

from fastapi.testclient import TestClient
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .api import api_path, auth_headers
from .factories import DEFAULT_PASSWORD, make_task, make_user

__all__ = [
    "DEFAULT_PASSWORD",
    "api_path",
    "auth_headers",
    "clear_tables",
    "create_sqlite_engine",
    "make_task",
    "make_user",
    "test_client_with_session",
]

# Child tables first
TABLES = ("notifications", "task_comments", "task_assignees", "tasks", "users")


def create_sqlite_engine() -> tuple[Engine, sessionmaker]:
    """Create an in-memory SQLite engine and session factory for tests.

    StaticPool keeps a single connection so every session sees the same database.
    """

    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )
    session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    return engine, session_factory


def clear_tables(db: Session) -> None:
    """Delete all rows between tests."""

    with db.begin():
        for table in TABLES:
            db.execute(text(f"DELETE FROM {table}"))


@contextmanager
def test_client_with_session(
    app,
    dependency: Callable[..., Generator[Session, None, None]],
    session: Session,
    *,
    raise_server_exceptions: bool = True,
) -> Generator[TestClient, None, None]:
    """Provide a TestClient with the DB dependency overridden.

    The client is not entered as a context manager, so the application
    lifespan (table creation on the real engine, the sweep scheduler) is skipped.
    """

    def override_dependency() -> Generator[Session, None, None]:
        yield session

    app.dependency_overrides[dependency] = override_dependency
    try:
        yield TestClient(app, raise_server_exceptions=raise_server_exceptions)
    finally:
        app.dependency_overrides.clear()


test_client_with_session.__test__ = False  # type: ignore[attr-defined]
