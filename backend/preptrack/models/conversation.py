"""
Conversation database models.
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Boolean, JSON, Index, UniqueConstraint, text
from sqlalchemy.orm import relationship

from ..database import Base
from ..utils.timeutils import utcnow


class Conversation(Base):
    """One-on-one or group conversation."""

    __tablename__ = "conversations"

    # At most one one-on-one conversation per participant set; groups may repeat
    __table_args__ = (
        Index(
            'uq_conversations_direct_key',
            'participant_key',
            unique=True,
            sqlite_where=text('is_group_chat = 0'),
            postgresql_where=text('NOT is_group_chat')
        ),
        Index('ix_conversations_last_message', 'last_message_at'),
    )

    id = Column(Integer, primary_key=True, index=True)

    # Sorted, deduplicated user ids and their comma-joined form
    participant_ids = Column(JSON, nullable=False)
    participant_key = Column(String(1000), nullable=False)

    # Groups
    is_group_chat = Column(Boolean, default=False, nullable=False)
    group_name = Column(String(200), nullable=True)
    creator_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    # Timestamps
    last_message_at = Column(DateTime(timezone=True), default=utcnow)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    # Relationships
    participants = relationship("ConversationParticipant", back_populates="conversation", cascade="all, delete-orphan")
    messages = relationship(
        "ConversationMessage",
        back_populates="conversation",
        cascade="all, delete-orphan",
        order_by="ConversationMessage.created_at"
    )


class ConversationParticipant(Base):
    """Membership row, used to find the conversations of a user."""

    __tablename__ = "conversation_participants"

    __table_args__ = (
        UniqueConstraint('conversation_id', 'user_id', name='uq_conversation_participant'),
    )

    id = Column(Integer, primary_key=True)
    conversation_id = Column(Integer, ForeignKey("conversations.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    conversation = relationship("Conversation", back_populates="participants")
