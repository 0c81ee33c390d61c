"""User model."""

from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import Column, DateTime, Enum as SQLEnum, Integer, String
from sqlalchemy.orm import relationship

from tasktracker.database import Base
from tasktracker.models.task_assignment import task_assignees
from tasktracker.services.clock import get_current_time
from tasktracker.utils.format_utils import initials as make_initials

if TYPE_CHECKING:
    from tasktracker.models.task import Task


class UserRole(str, Enum):
    """User roles."""

    ADMIN = "admin"
    MANAGER = "manager"
    USER = "user"


class UserStatus(str, Enum):
    """Account status."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class MemberStatus(str, Enum):
    """Workload label derived from active assignments."""

    AVAILABLE = "Available"
    LOCKED = "Locked"
    PAIRED = "Paired"


def classify_member_status(active_assignments: int) -> MemberStatus:
    """0 active assignments -> Available, 1 -> Locked, 2 or more -> Paired."""
    if active_assignments <= 0:
        return MemberStatus.AVAILABLE
    if active_assignments == 1:
        return MemberStatus.LOCKED
    return MemberStatus.PAIRED


def _enum_values(enum_cls: type[Enum]) -> list[str]:
    return [member.value for member in enum_cls]


class User(Base):
    """Team member account."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(
        SQLEnum(UserRole, name="user_role", values_callable=_enum_values),
        nullable=False,
        default=UserRole.USER,
    )
    status = Column(
        SQLEnum(UserStatus, name="user_status", values_callable=_enum_values),
        nullable=False,
        default=UserStatus.ACTIVE,
    )
    department = Column(String(255), nullable=True)
    phone = Column(String(20), nullable=True)
    created_at = Column(DateTime, default=get_current_time, nullable=False)
    updated_at = Column(DateTime, default=get_current_time, onupdate=get_current_time, nullable=False)

    assigned_tasks = relationship(
        "Task",
        secondary=task_assignees,
        back_populates="assignees",
        lazy="selectin",
    )
    created_tasks = relationship(
        "Task",
        back_populates="creator",
        foreign_keys="Task.created_by",
        cascade="all, delete-orphan",
    )
    paired_tasks = relationship(
        "Task",
        back_populates="pair_programmer",
        foreign_keys="Task.pair_programmer_id",
    )
    comments = relationship("TaskComment", back_populates="user", cascade="all, delete-orphan")
    notifications = relationship("Notification", back_populates="user", cascade="all, delete-orphan")

    @property
    def initials(self) -> str:
        return make_initials(self.name)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE

    @property
    def active_tasks(self) -> list["Task"]:
        """Assigned tasks that are not completed."""
        return [task for task in self.assigned_tasks if not task.is_completed]

    @property
    def active_tasks_count(self) -> int:
        return len(self.active_tasks)

    @property
    def completed_tasks_count(self) -> int:
        return len(self.assigned_tasks) - self.active_tasks_count

    @property
    def member_status(self) -> MemberStatus:
        return classify_member_status(self.active_tasks_count)

    @property
    def active_paired_tasks(self) -> list["Task"]:
        """Active tasks where this user is the pair programmer."""
        return [task for task in self.paired_tasks if not task.is_completed]

    @property
    def active_tasks_with_partner(self) -> list["Task"]:
        """Active assigned tasks that have someone else as pair programmer."""
        return [
            task
            for task in self.active_tasks
            if task.pair_programmer_id is not None and task.pair_programmer_id != self.id
        ]

    @property
    def pair_tasks_count(self) -> int:
        return len(self.active_paired_tasks) + len(self.active_tasks_with_partner)

    @property
    def paired_with(self) -> list[str]:
        """Names of the people this user currently pairs with."""
        names: list[str] = []
        for task in self.active_paired_tasks:
            for assignee in task.assignees:
                if assignee.id != self.id and assignee.name not in names:
                    names.append(assignee.name)
        if names:
            return names
        for task in self.active_tasks_with_partner:
            partner = task.pair_programmer
            if partner is not None and partner.name not in names:
                names.append(partner.name)
        return names

    def __repr__(self) -> str:
        """String representation of User."""
        return f"<User(id={self.id}, email='{self.email}', role={self.role})>"


__all__ = ["User", "UserRole", "UserStatus", "MemberStatus", "classify_member_status"]
