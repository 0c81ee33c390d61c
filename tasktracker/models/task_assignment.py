"""Association table for task assignees."""

from sqlalchemy import Column, ForeignKey, Integer, Table

from tasktracker.database import Base

task_assignees = Table(
    "task_assignees",
    Base.metadata,
    Column("task_id", Integer, ForeignKey("tasks.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


__all__ = ["task_assignees"]
