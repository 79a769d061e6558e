"""Bearer-token authentication.

Tokens are issued by the authentication service; this module only verifies
them and resolves the ``sub`` claim to an active user.
"""

from datetime import datetime, timedelta, timezone
from typing import Annotated
from uuid import UUID

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from taskboard.api.deps import get_store
from taskboard.config import Settings, get_settings
from taskboard.db.store import Store
from taskboard.models.user import User
from taskboard.schemas import UserSummary

router = APIRouter()
logger = structlog.get_logger()
security = HTTPBearer(auto_error=False)


def create_access_token(
    user_id: UUID,
    expires_delta: timedelta | None = None,
    settings: Settings | None = None,
) -> str:
    """Create a JWT access token."""
    settings = settings or get_settings()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(
            minutes=settings.jwt_access_token_expire_minutes
        )

    to_encode = {
        "sub": str(user_id),
        "exp": expire,
        "type": "access",
    }
    return jwt.encode(
        to_encode,
        settings.jwt_secret_key.get_secret_value(),
        algorithm=settings.jwt_algorithm,
    )


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    store: Store = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> User:
    """Get the current authenticated user from JWT token."""
    if not credentials:
        raise _unauthorized("Not authenticated")

    try:
        payload = jwt.decode(
            credentials.credentials,
            settings.jwt_secret_key.get_secret_value(),
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError:
        raise _unauthorized("Invalid token")

    subject = payload.get("sub")
    if subject is None or payload.get("type") != "access":
        raise _unauthorized("Invalid token")

    try:
        user_id = UUID(subject)
    except ValueError:
        raise _unauthorized("Invalid token")

    user = await store.get_user(user_id)
    if user is None:
        raise _unauthorized("User not found")

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is disabled",
        )

    structlog.contextvars.bind_contextvars(user_id=str(user.id))
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]


@router.get("/me")
async def get_current_user_info(current_user: CurrentUser) -> dict:
    """Get current user information."""
    return {"success": True, "user": UserSummary.model_validate(current_user)}
