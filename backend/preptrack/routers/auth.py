"""
Account routes: sign-up, sign-in, token refresh and the caller's own profile.
Failures surface as AuthenticationError (401) or ValidationError (400).
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..schemas.user import (
    UserRegister,
    UserLogin,
    Token,
    UserResponse,
    PasswordChange,
    ProfileUpdate,
    RefreshTokenRequest
)
from ..services.auth_service import AuthService
from ..utils.security import get_current_user
from ..models.user import User


router = APIRouter(prefix="/api/auth", tags=["Authentication"])


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(user_data: UserRegister, db: AsyncSession = Depends(get_db)):
    """Create an account; usernames listed in ADMIN_USERNAMES become moderators."""
    return await AuthService(db).register(user_data)


@router.post("/login", response_model=Token)
async def login(login_data: UserLogin, db: AsyncSession = Depends(get_db)):
    auth_service = AuthService(db)
    user = await auth_service.authenticate(login_data)
    return auth_service.create_tokens(user)


@router.post("/refresh", response_model=Token)
async def refresh_token(body: RefreshTokenRequest, db: AsyncSession = Depends(get_db)):
    """Trade a refresh token for a new token pair."""
    return await AuthService(db).refresh_tokens(body.refresh_token)


@router.get("/me", response_model=UserResponse)
async def me(current_user: User = Depends(get_current_user)):
    return current_user


@router.put("/profile", response_model=UserResponse)
async def update_profile(
    profile: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Change the display name; blank fields are left as they are."""
    return await AuthService(db).update_profile(current_user, profile.first_name, profile.last_name)


@router.put("/password")
async def change_password(
    body: PasswordChange,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    await AuthService(db).change_password(current_user, body.current_password, body.new_password)
    return {"message": "Password changed"}
