"""
Message ledger for the public channel and for conversations.

Both scopes share append / edit / soft delete / list / reactions and differ
in two places: conversation messages carry a conversation_id (and bump the
parent's last_message_at in the same commit), and listing the public channel
hides soft-deleted rows while conversation listings keep them as tombstones.
"""

from collections import defaultdict
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload
from typing import Dict, List, Optional
import logging

from ..models.conversation import Conversation
from ..models.message import ChatMessage, ConversationMessage, MessageReaction
from ..exceptions import NotFoundError, UnauthorizedError, ValidationError
from ..config import settings
from ..utils.timeutils import utcnow


logger = logging.getLogger(__name__)

GLOBAL_SCOPE = "global"
CONVERSATION_SCOPE = "conversation"


def clean_text(text: Optional[str]) -> str:
    """Trimmed text clamped to MESSAGE_MAX_LENGTH; empty text is an error."""
    cleaned = (text or "").strip()
    if not cleaned:
        raise ValidationError("Message cannot be empty")
    return cleaned[:settings.MESSAGE_MAX_LENGTH]


def clamp_limit(limit: Optional[int]) -> int:
    if limit is None:
        return settings.CHAT_HISTORY_LIMIT
    return max(1, min(limit, settings.CHAT_HISTORY_MAX_LIMIT))


class MessageService:
    """Ledger bound to one scope; use ``for_global`` or ``for_conversation``."""

    def __init__(self, db: AsyncSession, scope: str):
        if scope not in (GLOBAL_SCOPE, CONVERSATION_SCOPE):
            raise ValueError(f"Unknown message scope: {scope}")
        self.db = db
        self.scope = scope
        self.model = ChatMessage if scope == GLOBAL_SCOPE else ConversationMessage

    @classmethod
    def for_global(cls, db: AsyncSession) -> "MessageService":
        return cls(db, GLOBAL_SCOPE)

    @classmethod
    def for_conversation(cls, db: AsyncSession) -> "MessageService":
        return cls(db, CONVERSATION_SCOPE)

    @property
    def hides_deleted(self) -> bool:
        return self.scope == GLOBAL_SCOPE

    def _check_scope_args(self, conversation_id: Optional[int]) -> None:
        if self.scope == CONVERSATION_SCOPE and conversation_id is None:
            raise ValueError("conversation_id is required for conversation messages")
        if self.scope == GLOBAL_SCOPE and conversation_id is not None:
            raise ValueError("Public messages do not belong to a conversation")

    async def get(self, message_id: int, conversation_id: Optional[int] = None):
        query = (
            select(self.model)
            .options(selectinload(self.model.sender))
            .filter(self.model.id == message_id)
            .execution_options(populate_existing=True)
        )
        if conversation_id is not None:
            query = query.filter(self.model.conversation_id == conversation_id)

        result = await self.db.execute(query)
        message = result.scalar_one_or_none()
        if not message:
            raise NotFoundError("Message", message_id)
        return message

    async def append(self, sender_id: int, text: str, conversation_id: Optional[int] = None):
        """Persist a message; conversation timestamp is bumped in the same transaction."""
        self._check_scope_args(conversation_id)
        body = clean_text(text)
        now = utcnow()

        fields = {"sender_id": sender_id, "message": body, "created_at": now}
        if conversation_id is not None:
            result = await self.db.execute(
                select(Conversation).filter(Conversation.id == conversation_id)
            )
            conversation = result.scalar_one_or_none()
            if not conversation:
                raise NotFoundError("Conversation", conversation_id)
            conversation.last_message_at = now
            fields["conversation_id"] = conversation_id

        message = self.model(**fields)
        self.db.add(message)
        await self.db.commit()

        return await self.get(message.id)

    async def _owned(self, message_id: int, requester_id: int, conversation_id: Optional[int]):
        message = await self.get(message_id, conversation_id)
        if message.sender_id != requester_id:
            raise UnauthorizedError("Only the sender can change this message")
        return message

    async def edit(
        self,
        message_id: int,
        new_text: str,
        requester_id: int,
        conversation_id: Optional[int] = None
    ):
        """Overwrite the text and stamp edited_at; created_at never changes."""
        body = clean_text(new_text)
        message = await self._owned(message_id, requester_id, conversation_id)
        if message.is_deleted:
            raise ValidationError("Deleted messages cannot be edited")

        message.message = body
        message.edited_at = utcnow()
        await self.db.commit()
        return message

    async def soft_delete(
        self,
        message_id: int,
        requester_id: int,
        conversation_id: Optional[int] = None
    ) -> None:
        """Mark deleted; the content stays in the table."""
        message = await self._owned(message_id, requester_id, conversation_id)
        if message.is_deleted:
            return
        message.is_deleted = True
        await self.db.commit()
        logger.info(f"User {requester_id} deleted {self.scope} message {message_id}")

    async def list(self, limit: Optional[int] = None, conversation_id: Optional[int] = None) -> List:
        """Most recent ``limit`` messages, returned oldest to newest."""
        self._check_scope_args(conversation_id)

        query = select(self.model).options(selectinload(self.model.sender))
        if conversation_id is not None:
            query = query.filter(self.model.conversation_id == conversation_id)
        if self.hides_deleted:
            query = query.filter(self.model.is_deleted == False)  # noqa: E712

        result = await self.db.execute(
            query
            .order_by(desc(self.model.created_at), desc(self.model.id))
            .limit(clamp_limit(limit))
        )
        messages = list(result.scalars().all())
        messages.reverse()
        return messages

    async def audit(self, limit: int = 500) -> List:
        """Newest first, deleted rows included (moderator view)."""
        result = await self.db.execute(
            select(self.model)
            .options(selectinload(self.model.sender))
            .order_by(desc(self.model.created_at), desc(self.model.id))
            .limit(limit)
        )
        return list(result.scalars().all())

    # ============= Reactions =============

    async def add_reaction(
        self,
        message_id: int,
        user_id: int,
        reaction: str,
        conversation_id: Optional[int] = None
    ) -> None:
        """Idempotent: the same (message, user, reaction) is stored once."""
        await self.get(message_id, conversation_id)

        exists = await self.db.execute(
            select(MessageReaction.id).filter(
                MessageReaction.scope == self.scope,
                MessageReaction.message_id == message_id,
                MessageReaction.user_id == user_id,
                MessageReaction.reaction == reaction
            )
        )
        if exists.scalar_one_or_none() is not None:
            return

        self.db.add(MessageReaction(
            scope=self.scope,
            message_id=message_id,
            user_id=user_id,
            reaction=reaction
        ))
        try:
            await self.db.commit()
        except IntegrityError:
            # Concurrent insert of the same triple
            await self.db.rollback()

    async def remove_reaction(
        self,
        message_id: int,
        user_id: int,
        reaction: str,
        conversation_id: Optional[int] = None
    ) -> None:
        """Removes only the exact (message, user, reaction) triple."""
        await self.get(message_id, conversation_id)

        await self.db.execute(
            delete(MessageReaction).where(
                MessageReaction.scope == self.scope,
                MessageReaction.message_id == message_id,
                MessageReaction.user_id == user_id,
                MessageReaction.reaction == reaction
            )
        )
        await self.db.commit()

    async def reactions_for(self, message_ids: List[int]) -> Dict[int, Dict[str, List[int]]]:
        """{message_id: {reaction: [user_id, ...]}} for the given messages."""
        grouped: Dict[int, Dict[str, List[int]]] = defaultdict(lambda: defaultdict(list))
        if not message_ids:
            return {}

        result = await self.db.execute(
            select(MessageReaction)
            .filter(
                MessageReaction.scope == self.scope,
                MessageReaction.message_id.in_(message_ids)
            )
            .order_by(MessageReaction.id)
        )
        for r in result.scalars().all():
            grouped[r.message_id][r.reaction].append(r.user_id)
        return {mid: dict(by_reaction) for mid, by_reaction in grouped.items()}

    async def serialize(self, messages: List) -> List[dict]:
        """Messages as response dicts with sender summary and reactions attached."""
        reactions = await self.reactions_for([m.id for m in messages])
        return [
            {
                "id": m.id,
                "conversation_id": getattr(m, "conversation_id", None),
                "sender_id": m.sender_id,
                "message": m.message,
                "is_deleted": m.is_deleted,
                "edited_at": m.edited_at,
                "created_at": m.created_at,
                "sender": m.sender,
                "reactions": reactions.get(m.id, {}),
            }
            for m in messages
        ]
