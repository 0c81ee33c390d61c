"""Task model."""

from enum import Enum

from sqlalchemy import Column, Date, DateTime, Enum as SQLEnum, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from tasktracker.database import Base
from tasktracker.models.task_assignment import task_assignees
from tasktracker.services.clock import get_current_date, get_current_time


class TaskStatus(str, Enum):
    """Workflow statuses; any status may be set to any other."""

    NEW = "New"
    OPEN = "Open"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"


class TaskPriority(str, Enum):
    """Task priority levels."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


def _enum_values(enum_cls: type[Enum]) -> list[str]:
    return [member.value for member in enum_cls]


class Task(Base):
    """Unit of work created by one user and assigned to any number of users."""

    __tablename__ = "tasks"
    __table_args__ = (
        Index("ix_tasks_status", "status"),
        Index("ix_tasks_due_date", "due_date"),
        Index("ix_tasks_created_by", "created_by"),
    )

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(
        SQLEnum(TaskStatus, name="task_status", values_callable=_enum_values),
        nullable=False,
        default=TaskStatus.NEW,
    )
    priority = Column(
        SQLEnum(TaskPriority, name="task_priority", values_callable=_enum_values),
        nullable=False,
        default=TaskPriority.MEDIUM,
    )
    due_date = Column(Date, nullable=True)
    time_estimate = Column(Numeric(8, 2, asdecimal=False), nullable=True)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    pair_programmer_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=get_current_time, nullable=False)
    updated_at = Column(DateTime, default=get_current_time, onupdate=get_current_time, nullable=False)

    creator = relationship("User", back_populates="created_tasks", foreign_keys=[created_by], lazy="joined")
    pair_programmer = relationship(
        "User",
        back_populates="paired_tasks",
        foreign_keys=[pair_programmer_id],
        lazy="joined",
    )
    assignees = relationship(
        "User",
        secondary=task_assignees,
        back_populates="assigned_tasks",
        lazy="selectin",
        order_by="User.name",
    )
    comments = relationship(
        "TaskComment",
        back_populates="task",
        cascade="all, delete-orphan",
    )

    @property
    def is_completed(self) -> bool:
        return self.status == TaskStatus.COMPLETED

    @property
    def is_overdue(self) -> bool:
        """Past its due date and not completed; evaluated against the current clock."""
        if self.due_date is None or self.is_completed:
            return False
        return self.due_date < get_current_date()

    @property
    def days_overdue(self) -> int:
        if not self.is_overdue:
            return 0
        return (get_current_date() - self.due_date).days

    @property
    def assignee_names(self) -> list[str]:
        return [user.name for user in self.assignees]

    @property
    def comments_count(self) -> int:
        return len(self.comments)

    def __repr__(self) -> str:
        """String representation of Task."""
        return f"<Task(id={self.id}, title='{self.title}', status={self.status})>"


__all__ = ["Task", "TaskStatus", "TaskPriority"]
