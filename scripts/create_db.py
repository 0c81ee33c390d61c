#!/usr/bin/env python3
"""Create the database schema and optionally seed an admin and a sample team."""

from __future__ import annotations

import argparse
import sys
from datetime import timedelta
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from tasktracker.database import SessionLocal, init_db  # noqa: E402  - import after sys.path adjustment
from tasktracker.models import Task, TaskPriority, TaskStatus, User, UserRole, UserStatus  # noqa: E402
from tasktracker.security import hash_password  # noqa: E402
from tasktracker.services.clock import get_current_date  # noqa: E402

DEFAULT_PASSWORD = "password123"

TEAM = [
    ("Aniqa Waseem", "aniqa.waseem@taskflow.com", UserRole.USER, "Development", "+1-555-0124"),
    ("M.Yasir", "m.yasir@taskflow.com", UserRole.USER, "Design", "+1-555-0125"),
    ("M.Bilal", "m.bilal@taskflow.com", UserRole.USER, "Backend Development", "+1-555-0126"),
    ("M.Maaz", "m.maaz@taskflow.com", UserRole.MANAGER, "Project Management", "+1-555-0127"),
    ("Esha Nadeem", "esha.nadeem@taskflow.com", UserRole.USER, "Frontend Development", "+1-555-0128"),
]

# title, status, priority, due in N days, assignee indexes into TEAM
TASKS = [
    ("Update authentication system", TaskStatus.IN_PROGRESS, TaskPriority.HIGH, 7, [0, 1]),
    ("Design new dashboard layout", TaskStatus.OPEN, TaskPriority.MEDIUM, 12, [3]),
    ("Database optimization", TaskStatus.COMPLETED, TaskPriority.HIGH, -2, [2]),
    ("Mobile app testing", TaskStatus.IN_PROGRESS, TaskPriority.MEDIUM, 5, [4]),
    ("Security audit", TaskStatus.OPEN, TaskPriority.CRITICAL, 3, [2, 0]),
]


def seed(admin_email: str) -> None:
    db = SessionLocal()
    try:
        if db.query(User).filter(User.email == admin_email).first():
            print(f"Admin {admin_email} already exists, skipping seed")
            return
        password_hash = hash_password(DEFAULT_PASSWORD)
        admin = User(
            name="Admin User",
            email=admin_email,
            password_hash=password_hash,
            role=UserRole.ADMIN,
            status=UserStatus.ACTIVE,
            department="Administration",
        )
        team = [
            User(
                name=name,
                email=email,
                password_hash=password_hash,
                role=role,
                status=UserStatus.ACTIVE,
                department=department,
                phone=phone,
            )
            for name, email, role, department, phone in TEAM
        ]
        db.add(admin)
        db.add_all(team)
        db.flush()

        today = get_current_date()
        for title, status, priority, due_in, assignee_indexes in TASKS:
            task = Task(
                title=title,
                status=status,
                priority=priority,
                due_date=today + timedelta(days=due_in),
                created_by=admin.id,
            )
            task.assignees = [team[index] for index in assignee_indexes]
            db.add(task)
        db.commit()
        print(f"Seeded admin {admin_email} / {DEFAULT_PASSWORD} and {len(team)} team members")
    finally:
        db.close()


def main() -> None:
    """CLI entrypoint."""
    parser = argparse.ArgumentParser(description="Initialize the task tracker database.")
    parser.add_argument("--seed", action="store_true", help="insert an admin account and sample data")
    parser.add_argument(
        "--admin-email",
        default="admin@taskflow.com",
        help="email of the seeded admin (default: admin@taskflow.com)",
    )
    args = parser.parse_args()

    init_db()
    print("Database initialized")
    if args.seed:
        seed(args.admin_email)


if __name__ == "__main__":
    main()
