"""Request-scoped dependencies: the authenticated principal and role gates."""

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from tasktracker.config import get_settings
from tasktracker.database import get_db
from tasktracker.errors import AuthenticationError, AuthorizationError
from tasktracker.models.user import User
from tasktracker.security import decode_access_token

oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=f"{get_settings().api_prefix}/auth/login",
    auto_error=False,
)


def get_current_user(
    token: str | None = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the bearer token into the acting user."""
    if not token:
        raise AuthenticationError("Not authenticated")
    user_id = decode_access_token(token)
    if user_id is None:
        raise AuthenticationError("Could not validate credentials")
    user = db.get(User, user_id)
    if user is None:
        raise AuthenticationError("Could not validate credentials")
    if not user.is_active:
        raise AuthorizationError("Account is not active. Please contact an administrator.")
    return user


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_admin:
        raise AuthorizationError("Admin access required")
    return current_user
