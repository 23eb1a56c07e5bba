"""
Authentication service with user management.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import Optional
import logging

from ..models.user import User
from ..schemas.user import UserRegister, UserLogin, Token
from ..utils.security import (
    get_password_hash,
    verify_password,
    create_access_token,
    create_refresh_token,
    decode_token
)
from ..exceptions import AuthenticationError, NotFoundError, ValidationError
from ..config import settings


logger = logging.getLogger(__name__)


class AuthService:
    """Service for authentication and user management."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def register(self, user_data: UserRegister) -> User:
        """Register a new user."""
        result = await self.db.execute(
            select(User).filter(User.username == user_data.username)
        )
        if result.scalar_one_or_none():
            raise ValidationError("Username already registered")

        if user_data.email:
            result = await self.db.execute(
                select(User).filter(User.email == user_data.email)
            )
            if result.scalar_one_or_none():
                raise ValidationError("Email already registered")

        user = User(
            username=user_data.username,
            email=user_data.email,
            hashed_password=get_password_hash(user_data.password),
            first_name=user_data.first_name or user_data.username,
            last_name=user_data.last_name,
            is_admin=user_data.username in settings.ADMIN_USERNAMES
        )
        self.db.add(user)
        await self.db.commit()
        await self.db.refresh(user)

        logger.info(f"Registered user {user.id} ({user.username})")
        return user

    async def authenticate(self, login_data: UserLogin) -> User:
        """Authenticate a user by username and password."""
        result = await self.db.execute(
            select(User).filter(User.username == login_data.username)
        )
        user = result.scalar_one_or_none()

        if not user or not verify_password(login_data.password, user.hashed_password):
            logger.warning(f"Failed login for username {login_data.username!r}")
            raise AuthenticationError("Incorrect username or password")

        if not user.is_active:
            raise AuthenticationError("Account is disabled")

        return user

    def create_tokens(self, user: User) -> Token:
        """Create access and refresh tokens for a user."""
        token_data = {"sub": str(user.id), "username": user.username}

        return Token(
            access_token=create_access_token(token_data),
            refresh_token=create_refresh_token(token_data)
        )

    async def refresh_tokens(self, refresh_token: str) -> Token:
        """Refresh access token using refresh token."""
        token_data = decode_token(refresh_token, expected_type="refresh")

        user = await self.get_user_by_id(token_data.user_id)
        if not user or not user.is_active:
            raise AuthenticationError("Invalid refresh token")

        return self.create_tokens(user)

    async def change_password(self, user: User, current_password: str, new_password: str) -> None:
        """Change user password; the current one must match."""
        if not verify_password(current_password, user.hashed_password):
            raise ValidationError("Current password is incorrect")

        user.hashed_password = get_password_hash(new_password)
        await self.db.commit()
        logger.info(f"User {user.id} changed their password")

    async def reset_password(self, user_id: int, new_password: str, moderator: User) -> User:
        """Privileged reset; the new password is never stored in clear."""
        user = await self.get_user_by_id(user_id)
        if not user:
            raise NotFoundError("User", user_id)

        user.hashed_password = get_password_hash(new_password)
        await self.db.commit()
        await self.db.refresh(user)

        logger.info(f"Moderator {moderator.id} reset the password of user {user.id}")
        return user

    async def update_profile(
        self,
        user: User,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None
    ) -> User:
        """Update display name fields; blank values are ignored."""
        if first_name and first_name.strip():
            user.first_name = first_name.strip()
        if last_name and last_name.strip():
            user.last_name = last_name.strip()

        await self.db.commit()
        await self.db.refresh(user)
        return user

    async def get_user_by_id(self, user_id: int) -> Optional[User]:
        """Get user by ID."""
        result = await self.db.execute(
            select(User).filter(User.id == user_id)
        )
        return result.scalar_one_or_none()
