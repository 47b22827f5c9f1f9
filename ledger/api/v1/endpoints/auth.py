from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pymongo.errors import DuplicateKeyError

from ledger.api.deps import get_settings
from ledger.core.auth import create_access_token, get_current_user, get_optional_user
from ledger.core.config import Settings
from ledger.core.security import verify_password
from ledger.db.mongo import get_db
from ledger.models.user import UserCreate, UserResponse
from ledger.repositories.user_repo import UserRepository
from ledger.schemas.auth import TokenResponse, UserLogin
from ledger.schemas.ledger import SessionResponse

router = APIRouter()


@router.post("/signup", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    user_data: UserCreate,
    db = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """Create a new user account."""
    user_repo = UserRepository(db)

    # Check if email already exists
    existing_user = await user_repo.get_user_by_email(user_data.email)
    if existing_user:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered"
        )

    try:
        user = await user_repo.create_user(user_data)
    except DuplicateKeyError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered"
        )

    return TokenResponse(
        access_token=create_access_token(str(user.id), settings),
        user=user.to_response()
    )


@router.post("/login", response_model=TokenResponse)
async def login(
    credentials: UserLogin,
    db = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """Login with email and password."""
    user_repo = UserRepository(db)

    user = await user_repo.get_user_by_email(credentials.email)
    if not user or not verify_password(credentials.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password"
        )

    return TokenResponse(
        access_token=create_access_token(str(user.id), settings),
        user=user.to_response()
    )


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: UserResponse = Depends(get_current_user)):
    """Get current user details."""
    return current_user


@router.get("/session", response_model=SessionResponse)
async def get_session(user: Optional[UserResponse] = Depends(get_optional_user)):
    """Session check. No token means logged out, not an error."""
    if user is None:
        return SessionResponse(authenticated=False)
    return SessionResponse(authenticated=True, user_id=user.id, email=user.email)


@router.post("/logout")
async def logout(current_user: UserResponse = Depends(get_current_user)):
    """Logout (client should delete token)"""
    return {"message": "Logged out successfully"}
