"""API router for team members, profiles and admin user management."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from tasktracker.database import get_db
from tasktracker.dependencies import get_current_user, require_admin
from tasktracker.errors import NotFoundError
from tasktracker.models.user import User, UserRole, UserStatus
from tasktracker.schemas.common import Envelope, PaginatedEnvelope, Pagination
from tasktracker.schemas.user import ProfileUpdate, TeamMember, UserCreate, UserProfile, UserUpdate
from tasktracker.services.user_service import UserService

router = APIRouter()


@router.get("/profile", response_model=Envelope[UserProfile])
def get_profile(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Envelope[UserProfile]:
    """The caller's own profile, with assigned and created tasks."""
    profile = UserService.build_profile(db, current_user, viewer=current_user, include_details=True)
    return Envelope(data=profile)


@router.put("/profile", response_model=Envelope[UserProfile])
def update_profile(
    payload: ProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Envelope[UserProfile]:
    user = UserService.update_profile(db, current_user, payload)
    return Envelope(data=UserService.build_profile(db, user), message="Profile updated successfully")


@router.get("/team-members", response_model=Envelope[list[TeamMember]])
def team_members(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Envelope[list[TeamMember]]:
    """Active non-admin users, for assignment pickers."""
    members = UserService.get_team_members(db)
    return Envelope(data=[UserService.build_team_member(user) for user in members])


@router.get("", response_model=PaginatedEnvelope[UserProfile])
def list_users(
    role: UserRole | None = None,
    status_filter: UserStatus | None = Query(None, alias="status"),
    search: str | None = None,
    sort_by: str = "created_at",
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
    page: int = Query(1, ge=1),
    per_page: int = Query(15, ge=1, le=100),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> PaginatedEnvelope[UserProfile]:
    users, total = UserService.list_users(
        db,
        role=role,
        status=status_filter,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        per_page=per_page,
    )
    return PaginatedEnvelope(
        data=[UserService.build_profile(db, user) for user in users],
        pagination=Pagination.build(page, per_page, total),
    )


@router.post("", response_model=Envelope[UserProfile], status_code=status.HTTP_201_CREATED)
def create_user(
    user: UserCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> Envelope[UserProfile]:
    created = UserService.create_user(db, user)
    return Envelope(data=UserService.build_profile(db, created), message="User created successfully")


@router.get("/{user_id}", response_model=Envelope[UserProfile])
def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> Envelope[UserProfile]:
    user = UserService.get_user(db, user_id)
    if not user:
        raise NotFoundError("User not found")
    return Envelope(data=UserService.build_profile(db, user, viewer=admin, include_details=True))


@router.put("/{user_id}", response_model=Envelope[UserProfile])
def update_user(
    user_id: int,
    user_update: UserUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> Envelope[UserProfile]:
    user = UserService.update_user(db, user_id, user_update)
    if not user:
        raise NotFoundError("User not found")
    return Envelope(data=UserService.build_profile(db, user), message="User updated successfully")


@router.delete("/{user_id}", response_model=Envelope[None])
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> Envelope[None]:
    if not UserService.delete_user(db, user_id, admin):
        raise NotFoundError("User not found")
    return Envelope(message="User deleted successfully")
