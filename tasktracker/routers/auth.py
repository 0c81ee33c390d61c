"""API router for registration, login and the current session."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from tasktracker.database import get_db
from tasktracker.dependencies import get_current_user
from tasktracker.errors import AuthenticationError, AuthorizationError
from tasktracker.models.user import User
from tasktracker.schemas.auth import LoginRequest, RegisterRequest, TokenResponse
from tasktracker.schemas.common import Envelope
from tasktracker.schemas.user import UserProfile
from tasktracker.security import create_access_token
from tasktracker.services.user_service import UserService

router = APIRouter()


def _token_response(db: Session, user: User) -> TokenResponse:
    return TokenResponse(
        token=create_access_token(user.id),
        user=UserService.build_profile(db, user),
    )


@router.post("/register", response_model=Envelope[TokenResponse], status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest, db: Session = Depends(get_db)) -> Envelope[TokenResponse]:
    """Create a regular account and return a token for it."""
    user = UserService.register(db, payload)
    return Envelope(data=_token_response(db, user), message="Registration successful")


@router.post("/login", response_model=Envelope[TokenResponse])
def login(payload: LoginRequest, db: Session = Depends(get_db)) -> Envelope[TokenResponse]:
    user = UserService.authenticate(db, payload.email, payload.password)
    if user is None:
        raise AuthenticationError("Invalid email or password")
    if not user.is_active:
        raise AuthorizationError("Account is not active. Please contact an administrator.")
    return Envelope(data=_token_response(db, user), message="Login successful")


@router.post("/logout", response_model=Envelope[None])
def logout(current_user: User = Depends(get_current_user)) -> Envelope[None]:
    """Tokens are stateless; clients drop theirs and it expires on its own."""
    return Envelope(message="Logged out successfully")


@router.get("/user", response_model=Envelope[UserProfile])
def current_user_profile(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Envelope[UserProfile]:
    return Envelope(data=UserService.build_profile(db, current_user))
