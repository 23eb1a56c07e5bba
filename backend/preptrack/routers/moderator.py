"""
Moderator console routes. Every route requires the moderator flag.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from ..database import get_db
from ..schemas.user import ModeratorUserEntry, PasswordReset
from ..schemas.sheet import ChaptersConfigBody, ChaptersConfigResponse
from ..schemas.message import MessageResponse
from ..models.user import User
from ..services.auth_service import AuthService
from ..services.directory_service import DirectoryService
from ..services.message_service import MessageService
from ..services.sheet_service import SheetService
from ..utils.security import get_current_moderator


router = APIRouter(prefix="/api/moderator", tags=["Moderator"])


@router.get("/users", response_model=List[ModeratorUserEntry])
async def list_users(
    moderator: User = Depends(get_current_moderator),
    db: AsyncSession = Depends(get_db)
):
    """All accounts with activity and presence details."""
    return await DirectoryService(db).moderator_overview()


@router.post("/users/{user_id}/reset-password")
async def reset_password(
    user_id: int,
    body: PasswordReset,
    moderator: User = Depends(get_current_moderator),
    db: AsyncSession = Depends(get_db)
):
    """Set a new password for a user who lost theirs."""
    await AuthService(db).reset_password(user_id, body.new_password, moderator)
    return {"message": "Password reset"}


@router.get("/messages", response_model=List[MessageResponse])
async def audit_messages(
    moderator: User = Depends(get_current_moderator),
    db: AsyncSession = Depends(get_db)
):
    """Latest public messages including deleted ones, newest first."""
    ledger = MessageService.for_global(db)
    return await ledger.serialize(await ledger.audit())


@router.put("/chapters", response_model=ChaptersConfigResponse)
async def update_chapters(
    body: ChaptersConfigBody,
    moderator: User = Depends(get_current_moderator),
    db: AsyncSession = Depends(get_db)
):
    """Replace this week's chapter lists."""
    return await SheetService(db).update_chapters(body.model_dump())
