"""
Presence heartbeat, online users and typing indicator routes.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Literal, Optional

from ..database import get_db
from ..schemas.presence import HeartbeatRequest, PresenceResponse, TypingRequest, TypingUser
from ..models.user import User
from ..services.presence_service import PresenceService, TypingService, presence_view, CONVERSATION_CHAT
from ..services.conversation_service import ConversationService
from ..exceptions import ValidationError
from ..utils.security import get_current_user
from ..utils.timeutils import utcnow


router = APIRouter(prefix="/api", tags=["Presence"])


@router.post("/presence/heartbeat", response_model=PresenceResponse)
async def heartbeat(
    body: HeartbeatRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Assert (or withdraw) the caller's online status."""
    record = await PresenceService(db).set_online(current_user.id, body.is_online)
    return presence_view(record)


@router.get("/online-users", response_model=List[PresenceResponse])
async def list_online_users(
    live_only: bool = False,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Users flagged online; is_live tells whether their lease is still current."""
    now = utcnow()
    views = [presence_view(r, now) for r in await PresenceService(db).list_online()]
    if live_only:
        views = [v for v in views if v["is_live"]]
    return views


@router.post("/typing")
async def set_typing(
    body: TypingRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Record (or clear) the caller's typing signal."""
    if body.conversation_id is not None:
        await ConversationService(db).get_for_participant(body.conversation_id, current_user.id)

    await TypingService(db).set_typing(
        current_user.id,
        body.chat_type,
        body.conversation_id,
        body.is_typing
    )
    return {"message": "ok"}


@router.get("/typing", response_model=List[TypingUser])
async def list_typing(
    chat_type: Literal["public", "conversation"] = "public",
    conversation_id: Optional[int] = Query(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Other users typing in the given chat right now; conversations require membership."""
    if chat_type == CONVERSATION_CHAT and conversation_id is None:
        raise ValidationError("conversation_id is required for conversation typing")
    if chat_type == CONVERSATION_CHAT:
        await ConversationService(db).get_for_participant(conversation_id, current_user.id)

    return await TypingService(db).list_typing(
        chat_type,
        conversation_id,
        exclude_user_id=current_user.id
    )
