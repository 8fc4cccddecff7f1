"""Authentication router for user registration, login, and token management."""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.database import get_db
from app.models.user import User, UserRole
from app.schemas.auth import UserRegister, UserLogin, Token, UserResponse, RefreshTokenRequest
from app.auth.security import hash_password, verify_password, create_access_token, create_refresh_token, decode_token
from app.auth.dependencies import get_current_active_user

router = APIRouter()


def _issue_tokens(user: User) -> dict:
    claims = {"sub": user.uuid, "email": user.email, "role": user.user_role}
    return {
        "access_token": create_access_token(data=claims),
        "refresh_token": create_refresh_token(data=claims),
        "token_type": "bearer"
    }


@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
async def register(user_data: UserRegister, db: AsyncSession = Depends(get_db)):
    """
    Register a new user.

    - Validates input (password strength, email format)
    - Checks email uniqueness
    - Hashes password with bcrypt
    - Returns JWT tokens

    The Stripe customer is not created here; it is provisioned the first time
    the user completes a paid subscription.
    """
    result = await db.execute(select(User).where(User.email == user_data.email))
    if result.scalar_one_or_none():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered"
        )

    new_user = User(
        name=user_data.name,
        email=user_data.email,
        password_hash=hash_password(user_data.password),
        status="active",
        user_role=UserRole.USER.value
    )

    db.add(new_user)
    await db.commit()
    await db.refresh(new_user)

    return _issue_tokens(new_user)


@router.post("/login", response_model=Token)
async def login(credentials: UserLogin, db: AsyncSession = Depends(get_db)):
    """Login with email and password."""
    result = await db.execute(select(User).where(User.email == credentials.email))
    user = result.scalar_one_or_none()

    if not user or not verify_password(credentials.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password"
        )

    return _issue_tokens(user)


@router.post("/refresh", response_model=Token)
async def refresh(request: RefreshTokenRequest, db: AsyncSession = Depends(get_db)):
    """Exchange a refresh token for a fresh token pair."""
    payload = decode_token(request.refresh_token, expected_type="refresh")
    if payload is None or not payload.get("sub"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired refresh token"
        )

    # Fetch user to verify they still exist
    result = await db.execute(select(User).where(User.uuid == payload["sub"]))
    user = result.scalar_one_or_none()

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found"
        )

    return _issue_tokens(user)


@router.get("/me", response_model=UserResponse)
async def get_current_user_profile(current_user: User = Depends(get_current_active_user)):
    """Get current user profile."""
    return current_user
