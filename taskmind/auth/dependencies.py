"""FastAPI dependencies for authentication."""

from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from taskmind.auth.jwt import get_user_id_from_token
from taskmind.database.database import get_db
from taskmind.database.user_repository import UserRepository
from taskmind.models.user import User

# Missing credentials arrive as None; get_current_user answers with 401.
bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the bearer token to a stored user.

    Raises:
        HTTPException: 401 when the header is missing, the token does not
            validate, or its subject has no TaskMind profile
    """
    if credentials is None:
        raise _unauthorized("Not authenticated")

    user_id = get_user_id_from_token(credentials.credentials)
    if not user_id:
        raise _unauthorized("Invalid or expired token")

    user = UserRepository(db).get(user_id)
    if user is None:
        raise _unauthorized("User not found")
    return user
