"""
Conversation resolution.

One-on-one conversations are identified by their participants: the id set
is canonicalized (deduplicated, sorted) and matched by exact equality, so
the same two people always land in the same conversation. Groups are
identified by their creation event: every create_group call inserts a new
row, even for a membership that already has a group.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc
from sqlalchemy.exc import IntegrityError
from typing import Iterable, List, Optional
import logging

from ..models.user import User
from ..models.conversation import Conversation, ConversationParticipant
from ..models.message import ConversationMessage
from ..exceptions import NotFoundError, ValidationError
from ..config import settings
from ..utils.timeutils import utcnow


logger = logging.getLogger(__name__)

# Others besides the creator
MIN_GROUP_MEMBERS = 2


def canonical_participants(participant_ids: Iterable[int]) -> List[int]:
    """Deduplicated ids in ascending order."""
    return sorted(set(participant_ids))


def participant_key(participant_ids: Iterable[int]) -> str:
    return ",".join(str(i) for i in canonical_participants(participant_ids))


class ConversationService:
    """Service for one-on-one and group conversations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def ensure_users_exist(self, user_ids: Iterable[int]) -> None:
        ids = set(user_ids)
        result = await self.db.execute(select(User.id).filter(User.id.in_(ids)))
        missing = ids - set(result.scalars().all())
        if missing:
            raise NotFoundError("User", ", ".join(str(i) for i in sorted(missing)))

    def _new_conversation(self, participants: List[int], **fields) -> Conversation:
        now = utcnow()
        conversation = Conversation(
            participant_ids=participants,
            participant_key=participant_key(participants),
            last_message_at=now,
            created_at=now,
            **fields
        )
        conversation.participants = [
            ConversationParticipant(user_id=user_id) for user_id in participants
        ]
        self.db.add(conversation)
        return conversation

    async def _find_direct(self, key: str) -> Optional[Conversation]:
        result = await self.db.execute(
            select(Conversation).filter(
                Conversation.participant_key == key,
                Conversation.is_group_chat == False  # noqa: E712
            )
        )
        return result.scalar_one_or_none()

    async def get_or_create(self, participant_ids: Iterable[int]) -> Conversation:
        """Return the one-on-one conversation for exactly this set, creating it if absent."""
        participants = canonical_participants(participant_ids)
        if not participants:
            raise ValidationError("At least one participant is required")

        key = participant_key(participants)
        existing = await self._find_direct(key)
        if existing:
            return existing

        conversation = self._new_conversation(participants, is_group_chat=False)
        try:
            await self.db.commit()
        except IntegrityError:
            # Lost the race to a concurrent caller; the unique key index kept one row
            await self.db.rollback()
            existing = await self._find_direct(key)
            if existing is None:
                raise
            return existing
        await self.db.refresh(conversation)

        logger.info(f"Created conversation {conversation.id} for participants {key}")
        return conversation

    async def create_group(
        self,
        participant_ids: Iterable[int],
        group_name: str,
        creator_id: int
    ) -> Conversation:
        """Always inserts a new group conversation."""
        name = (group_name or "").strip()
        if not name:
            raise ValidationError("Group name is required")

        others = set(participant_ids) - {creator_id}
        if len(others) < MIN_GROUP_MEMBERS:
            raise ValidationError(f"Select at least {MIN_GROUP_MEMBERS} users for a group")

        participants = canonical_participants(others | {creator_id})
        conversation = self._new_conversation(
            participants,
            is_group_chat=True,
            group_name=name,
            creator_id=creator_id
        )
        await self.db.commit()
        await self.db.refresh(conversation)

        logger.info(f"User {creator_id} created group {conversation.id} ({name!r}) with {len(participants)} members")
        return conversation

    async def get_for_participant(self, conversation_id: int, user_id: int) -> Conversation:
        """Conversation if user_id is a member; non-members get NotFound."""
        result = await self.db.execute(
            select(Conversation)
            .join(ConversationParticipant)
            .filter(
                Conversation.id == conversation_id,
                ConversationParticipant.user_id == user_id
            )
        )
        conversation = result.scalar_one_or_none()
        if not conversation:
            raise NotFoundError("Conversation", conversation_id)
        return conversation

    async def _last_visible_message(self, conversation_id: int) -> Optional[ConversationMessage]:
        result = await self.db.execute(
            select(ConversationMessage)
            .filter(
                ConversationMessage.conversation_id == conversation_id,
                ConversationMessage.is_deleted == False  # noqa: E712
            )
            .order_by(desc(ConversationMessage.created_at), desc(ConversationMessage.id))
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def list_for_user(self, user_id: int, limit: Optional[int] = None) -> List[dict]:
        """Conversations of user_id, most recently active first, with a last-message preview."""
        result = await self.db.execute(
            select(Conversation)
            .join(ConversationParticipant)
            .filter(ConversationParticipant.user_id == user_id)
            .order_by(desc(Conversation.last_message_at), desc(Conversation.id))
            .limit(limit or settings.CONVERSATION_LIST_LIMIT)
        )
        conversations = result.scalars().all()

        items = []
        for conversation in conversations:
            # Looked up per row, the preview is not cached on the conversation
            last = await self._last_visible_message(conversation.id)
            items.append({
                "id": conversation.id,
                "participant_ids": conversation.participant_ids,
                "is_group_chat": conversation.is_group_chat,
                "group_name": conversation.group_name,
                "creator_id": conversation.creator_id,
                "last_message_at": conversation.last_message_at,
                "created_at": conversation.created_at,
                "last_message": last.message if last else None,
                "last_sender_id": last.sender_id if last else None,
            })
        return items
