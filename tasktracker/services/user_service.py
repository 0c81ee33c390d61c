"""Service for managing users and their profiles."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from tasktracker.errors import ConflictError, ValidationError
from tasktracker.models.task import Task
from tasktracker.models.user import User, UserRole, UserStatus
from tasktracker.schemas.user import AssignedTaskItem, CreatedTaskItem, TeamMember, UserProfile
from tasktracker.security import hash_password, verify_password
from tasktracker.services.notification_service import NotificationService
from tasktracker.utils.pagination import paginate

if TYPE_CHECKING:
    from tasktracker.schemas.auth import RegisterRequest
    from tasktracker.schemas.user import ProfileUpdate, UserCreate, UserUpdate

logger = logging.getLogger("tasktracker.users")

SORTABLE_FIELDS = {
    "name": User.name,
    "email": User.email,
    "role": User.role,
    "status": User.status,
    "department": User.department,
    "created_at": User.created_at,
}

EMAIL_TAKEN = "The email has already been taken."


class UserService:
    """Business logic for users."""

    @staticmethod
    def get_user(db: Session, user_id: int) -> User | None:
        return db.get(User, user_id)

    @staticmethod
    def get_user_by_email(db: Session, email: str) -> User | None:
        return db.query(User).filter(func.lower(User.email) == email.lower()).first()

    @staticmethod
    def _ensure_email_free(db: Session, email: str, *, exclude_id: int | None = None) -> None:
        existing = UserService.get_user_by_email(db, email)
        if existing is not None and existing.id != exclude_id:
            raise ValidationError.for_field("email", EMAIL_TAKEN)

    @staticmethod
    def list_users(
        db: Session,
        *,
        role: UserRole | None = None,
        status: UserStatus | None = None,
        search: str | None = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
        page: int = 1,
        per_page: int = 15,
    ) -> tuple[list[User], int]:
        query = db.query(User)
        if role is not None:
            query = query.filter(User.role == role)
        if status is not None:
            query = query.filter(User.status == status)
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(
                or_(User.name.ilike(pattern), User.email.ilike(pattern), User.department.ilike(pattern))
            )
        column = SORTABLE_FIELDS.get(sort_by, User.created_at)
        ordering = column.asc() if sort_order == "asc" else column.desc()
        query = query.order_by(ordering, User.id)
        return paginate(query, page, per_page)

    @staticmethod
    def get_team_members(db: Session) -> list[User]:
        """Active, non-admin users ordered by name."""
        return (
            db.query(User)
            .filter(User.role != UserRole.ADMIN, User.status == UserStatus.ACTIVE)
            .order_by(User.name)
            .all()
        )

    @staticmethod
    def create_user(db: Session, user_data: "UserCreate") -> User:
        """Create an account and tell the admins about it."""
        UserService._ensure_email_free(db, user_data.email)
        payload = user_data.model_dump(exclude={"password"})
        user = User(**payload, password_hash=hash_password(user_data.password))
        db.add(user)
        db.commit()
        db.refresh(user)
        logger.info(f"User created: id={user.id} email={user.email} role={UserRole(user.role).value}")
        NotificationService.notify_new_user(db, user)
        return user

    @staticmethod
    def register(db: Session, data: "RegisterRequest") -> User:
        """Self-registration always yields an active regular user."""
        UserService._ensure_email_free(db, data.email)
        user = User(
            name=data.name,
            email=data.email,
            password_hash=hash_password(data.password),
            role=UserRole.USER,
            status=UserStatus.ACTIVE,
            department=data.department,
            phone=data.phone,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        logger.info(f"User registered: id={user.id} email={user.email}")
        NotificationService.notify_new_user(db, user)
        return user

    @staticmethod
    def authenticate(db: Session, email: str, password: str) -> User | None:
        user = UserService.get_user_by_email(db, email)
        if user is None or not verify_password(password, user.password_hash):
            return None
        return user

    @staticmethod
    def update_user(db: Session, user_id: int, user_data: "UserUpdate") -> User | None:
        user = db.get(User, user_id)
        if not user:
            return None
        update_data = user_data.model_dump(exclude_unset=True)
        for key in ("name", "email", "role", "status"):
            if key in update_data and update_data[key] is None:
                raise ValidationError.for_field(key, f"The {key} field cannot be null.")
        if "email" in update_data:
            UserService._ensure_email_free(db, update_data["email"], exclude_id=user.id)
        password = update_data.pop("password", None)
        if password is not None:
            user.password_hash = hash_password(password)
        for key, value in update_data.items():
            setattr(user, key, value)
        db.commit()
        db.refresh(user)
        logger.info(f"User updated: id={user.id} fields={sorted(update_data)}")
        return user

    @staticmethod
    def update_profile(db: Session, user: User, data: "ProfileUpdate") -> User:
        """Self-service update; password changes require the current password."""
        update_data = data.model_dump(exclude_unset=True, exclude={"current_password", "password", "password_confirmation"})
        for key in ("name", "email"):
            if key in update_data and update_data[key] is None:
                raise ValidationError.for_field(key, f"The {key} field cannot be null.")
        if "email" in update_data:
            UserService._ensure_email_free(db, update_data["email"], exclude_id=user.id)
        if data.password is not None:
            if not verify_password(data.current_password or "", user.password_hash):
                raise ConflictError("Current password is incorrect")
        try:
            for key, value in update_data.items():
                setattr(user, key, value)
            if data.password is not None:
                user.password_hash = hash_password(data.password)
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(user)
        logger.info(f"Profile updated: id={user.id} password_changed={data.password is not None}")
        return user

    @staticmethod
    def delete_user(db: Session, user_id: int, actor: User) -> bool:
        """Delete an account unless it is an admin, the actor, or still has active work."""
        user = db.get(User, user_id)
        if not user:
            return False
        if user.is_admin:
            raise ConflictError("Admin users cannot be deleted")
        if user.id == actor.id:
            raise ConflictError("You cannot delete your own account")
        active_tasks = user.active_tasks_count
        if active_tasks > 0:
            raise ConflictError(
                f"Cannot delete user with {active_tasks} active task(s). "
                "Please reassign or complete these tasks first.",
                data={"active_tasks": active_tasks},
            )
        name, email, role = user.name, user.email, user.role
        db.delete(user)
        db.commit()
        logger.info(f"User deleted: id={user_id} email={email} by={actor.id}")
        NotificationService.notify_user_removed(db, name=name, email=email, role=role, actor=actor)
        return True

    @staticmethod
    def build_profile(
        db: Session,
        user: User,
        *,
        viewer: User | None = None,
        include_details: bool = False,
    ) -> UserProfile:
        """Format a user with counts computed from current data."""
        assigned = list(user.assigned_tasks)
        profile = UserProfile(
            id=user.id,
            name=user.name,
            email=user.email,
            role=user.role,
            status=user.status,
            department=user.department,
            phone=user.phone,
            initials=user.initials,
            member_status=user.member_status,
            active_tasks_count=user.active_tasks_count,
            completed_tasks_count=user.completed_tasks_count,
            total_tasks_count=len(assigned),
            pair_tasks_count=user.pair_tasks_count,
            paired_with=user.paired_with,
            unread_notifications_count=NotificationService.unread_count(db, user.id),
            created_at=user.created_at,
            updated_at=user.updated_at,
        )
        if include_details:
            profile.assigned_tasks = [
                AssignedTaskItem.model_validate(task)
                for task in sorted(assigned, key=lambda t: t.created_at, reverse=True)
            ]
            if viewer is not None and (viewer.is_admin or viewer.id == user.id):
                created = (
                    db.query(Task)
                    .filter(Task.created_by == user.id)
                    .order_by(Task.created_at.desc(), Task.id.desc())
                    .all()
                )
                profile.created_tasks = [
                    CreatedTaskItem(
                        id=task.id,
                        title=task.title,
                        status=task.status,
                        assignees_count=len(task.assignees),
                    )
                    for task in created
                ]
        return profile

    @staticmethod
    def build_team_member(user: User) -> TeamMember:
        return TeamMember.model_validate(user)

