from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from ledger.core.config import Settings
from ledger.db.mongo import get_db
from ledger.models.user import UserResponse
from ledger.repositories.user_repo import UserRepository

security = HTTPBearer(auto_error=False)


class NotAuthenticatedError(Exception):
    """No valid session. Drives a login prompt, not an error message."""
    pass


def create_access_token(
    user_id: str,
    settings: Settings,
    expires_delta: timedelta | None = None
) -> str:
    """Create JWT access token."""
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    now = datetime.now(timezone.utc)
    expire = now + expires_delta

    payload = {
        "sub": user_id,
        "exp": int(expire.timestamp()),
        "iat": int(now.timestamp())
    }

    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str, settings: Settings) -> Optional[str]:
    """Return the user id in a token, or None if the token is invalid or expired."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None
    return payload.get("sub")


async def resolve_user(
    credentials: Optional[HTTPAuthorizationCredentials],
    db,
    settings: Settings
) -> Optional[UserResponse]:
    """
    Look up the user behind a bearer token.

    A missing, invalid or expired token means "no session" and yields None.
    Database failures are not swallowed.
    """
    if credentials is None:
        return None

    user_id = decode_access_token(credentials.credentials, settings)
    if user_id is None:
        return None

    user = await UserRepository(db).get_user_by_id(user_id)
    if user is None:
        return None
    return user.to_response()


async def get_optional_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db = Depends(get_db)
) -> Optional[UserResponse]:
    """Current user, or None when logged out."""
    return await resolve_user(credentials, db, request.app.state.settings)


async def get_current_user(
    user: Optional[UserResponse] = Depends(get_optional_user)
) -> UserResponse:
    """Current user; raises NotAuthenticatedError (401) when logged out."""
    if user is None:
        raise NotAuthenticatedError()
    return user
