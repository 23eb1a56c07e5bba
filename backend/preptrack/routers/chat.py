"""
Public chat routes.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from ..database import get_db
from ..schemas.message import MessageCreate, MessageUpdate, MessageResponse, ReactionRequest
from ..models.user import User
from ..services.message_service import MessageService
from ..utils.security import get_current_user


router = APIRouter(prefix="/api/chat", tags=["Chat"])


@router.get("/messages", response_model=List[MessageResponse])
async def list_messages(
    limit: Optional[int] = None,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Latest public messages, oldest first; deleted messages are left out."""
    ledger = MessageService.for_global(db)
    messages = await ledger.list(limit)
    return await ledger.serialize(messages)


@router.post("/messages", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def post_message(
    body: MessageCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Post to the public channel."""
    ledger = MessageService.for_global(db)
    message = await ledger.append(current_user.id, body.message)
    return (await ledger.serialize([message]))[0]


@router.patch("/messages/{message_id}", response_model=MessageResponse)
async def edit_message(
    message_id: int,
    body: MessageUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Edit one of the caller's own public messages."""
    ledger = MessageService.for_global(db)
    message = await ledger.edit(message_id, body.message, current_user.id)
    return (await ledger.serialize([message]))[0]


@router.delete("/messages/{message_id}")
async def delete_message(
    message_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Soft-delete one of the caller's own public messages."""
    await MessageService.for_global(db).soft_delete(message_id, current_user.id)
    return {"message": "Message deleted"}


@router.post("/messages/{message_id}/reactions")
async def add_reaction(
    message_id: int,
    body: ReactionRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """React to a public message; repeating the same reaction is a no-op."""
    await MessageService.for_global(db).add_reaction(message_id, current_user.id, body.reaction)
    return {"message": "Reaction added"}


@router.delete("/messages/{message_id}/reactions")
async def remove_reaction(
    message_id: int,
    reaction: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Remove the caller's reaction from a public message."""
    await MessageService.for_global(db).remove_reaction(message_id, current_user.id, reaction)
    return {"message": "Reaction removed"}
