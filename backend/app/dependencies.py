from fastapi import Request, Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.database import get_db
from app.exceptions import Forbidden
from app.models import User, UserRole
from app.services.identity import resolve_session

COOKIE_NAME = "access_token"

bearer_scheme = HTTPBearer(auto_error=False, description="JWT Bearer session token")


def get_session_token(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str | None:
    """Read the session token from the Authorization header, falling back to the login cookie."""
    if credentials and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(COOKIE_NAME)


def get_current_user(
    token: str | None = Depends(get_session_token),
    db: Session = Depends(get_db),
) -> User:
    """Get the current authenticated user. Raises 401 if not authenticated.

    Use this as a dependency for protected routes.
    """
    return resolve_session(db, token)


def require_role(*roles: UserRole):
    """Build a dependency that only lets users with one of ``roles`` through."""

    def dependency(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            raise Forbidden()
        return user

    return dependency


require_admin = require_role(UserRole.ADMIN)
