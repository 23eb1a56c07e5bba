"""
User directory, profiles and activity feed routes.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from ..database import get_db
from ..schemas.user import DirectoryEntry
from ..schemas.sheet import ActivityEntry, UserProfileResponse
from ..models.user import User
from ..services.directory_service import DirectoryService
from ..utils.security import get_current_user


router = APIRouter(prefix="/api", tags=["Directory"])


@router.get("/users", response_model=List[DirectoryEntry])
async def list_users(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """All users with sheet count and online status."""
    return await DirectoryService(db).list_users()


@router.get("/users/{user_id}", response_model=UserProfileResponse)
async def get_user_profile(
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """A user's profile and practice sheets."""
    return await DirectoryService(db).user_profile(user_id)


@router.get("/activity", response_model=List[ActivityEntry])
async def activity_feed(
    limit: Optional[int] = Query(None, ge=1),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Everyone's practice sheets, newest first."""
    return await DirectoryService(db).activity_feed(limit)
