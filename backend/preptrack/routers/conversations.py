"""
Conversation management and conversation message routes.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from ..database import get_db
from ..schemas.conversation import (
    ConversationCreate,
    GroupConversationCreate,
    ConversationResponse,
    ConversationListResponse
)
from ..schemas.message import MessageCreate, MessageUpdate, MessageResponse, ReactionRequest
from ..models.user import User
from ..services.conversation_service import ConversationService
from ..services.message_service import MessageService
from ..exceptions import ValidationError
from ..utils.security import get_current_user


router = APIRouter(prefix="/api/conversations", tags=["Conversations"])


@router.get("", response_model=List[ConversationListResponse])
async def list_conversations(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """List the caller's conversations, most recently active first."""
    return await ConversationService(db).list_for_user(current_user.id)


@router.post("", response_model=ConversationResponse)
async def get_or_create_conversation(
    body: ConversationCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Open the one-on-one conversation with the given users, creating it once."""
    service = ConversationService(db)

    others = set(body.participant_ids) - {current_user.id}
    if not others:
        raise ValidationError("Select someone to talk to")
    await service.ensure_users_exist(others)

    return await service.get_or_create(others | {current_user.id})


@router.post("/group", response_model=ConversationResponse, status_code=status.HTTP_201_CREATED)
async def create_group_conversation(
    body: GroupConversationCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Create a new named group; identical memberships still get a new group."""
    service = ConversationService(db)
    await service.ensure_users_exist(set(body.participant_ids))

    return await service.create_group(body.participant_ids, body.group_name, current_user.id)


@router.get("/{conversation_id}", response_model=ConversationResponse)
async def get_conversation(
    conversation_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Get a conversation the caller belongs to."""
    return await ConversationService(db).get_for_participant(conversation_id, current_user.id)


# ============= Messages =============

@router.get("/{conversation_id}/messages", response_model=List[MessageResponse])
async def list_messages(
    conversation_id: int,
    limit: Optional[int] = None,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Messages oldest to newest; deleted ones come back flagged is_deleted."""
    await ConversationService(db).get_for_participant(conversation_id, current_user.id)

    ledger = MessageService.for_conversation(db)
    messages = await ledger.list(limit, conversation_id=conversation_id)
    return await ledger.serialize(messages)


@router.post("/{conversation_id}/messages", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def post_message(
    conversation_id: int,
    body: MessageCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Send a message to the conversation."""
    await ConversationService(db).get_for_participant(conversation_id, current_user.id)

    ledger = MessageService.for_conversation(db)
    message = await ledger.append(current_user.id, body.message, conversation_id=conversation_id)
    return (await ledger.serialize([message]))[0]


@router.patch("/{conversation_id}/messages/{message_id}", response_model=MessageResponse)
async def edit_message(
    conversation_id: int,
    message_id: int,
    body: MessageUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Edit one of the caller's own messages."""
    await ConversationService(db).get_for_participant(conversation_id, current_user.id)

    ledger = MessageService.for_conversation(db)
    message = await ledger.edit(message_id, body.message, current_user.id, conversation_id=conversation_id)
    return (await ledger.serialize([message]))[0]


@router.delete("/{conversation_id}/messages/{message_id}")
async def delete_message(
    conversation_id: int,
    message_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Soft-delete one of the caller's own messages."""
    await ConversationService(db).get_for_participant(conversation_id, current_user.id)

    await MessageService.for_conversation(db).soft_delete(
        message_id, current_user.id, conversation_id=conversation_id
    )
    return {"message": "Message deleted"}


@router.post("/{conversation_id}/messages/{message_id}/reactions")
async def add_reaction(
    conversation_id: int,
    message_id: int,
    body: ReactionRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """React to a message; repeating the same reaction is a no-op."""
    await ConversationService(db).get_for_participant(conversation_id, current_user.id)

    await MessageService.for_conversation(db).add_reaction(
        message_id, current_user.id, body.reaction, conversation_id=conversation_id
    )
    return {"message": "Reaction added"}


@router.delete("/{conversation_id}/messages/{message_id}/reactions")
async def remove_reaction(
    conversation_id: int,
    message_id: int,
    reaction: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Remove the caller's reaction."""
    await ConversationService(db).get_for_participant(conversation_id, current_user.id)

    await MessageService.for_conversation(db).remove_reaction(
        message_id, current_user.id, reaction, conversation_id=conversation_id
    )
    return {"message": "Reaction removed"}
