"""
Message database models.
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, Boolean, Index, UniqueConstraint
from sqlalchemy.orm import relationship

from ..database import Base
from ..utils.timeutils import utcnow


class ChatMessage(Base):
    """Message in the public channel."""

    __tablename__ = "chat_messages"

    __table_args__ = (
        Index('ix_chat_messages_created', 'created_at'),
    )

    id = Column(Integer, primary_key=True, index=True)
    sender_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    message = Column(Text, nullable=False)

    # Soft delete and edit marker
    is_deleted = Column(Boolean, default=False, nullable=False)
    edited_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    sender = relationship("User")


class ConversationMessage(Base):
    """Message inside a one-on-one or group conversation."""

    __tablename__ = "conversation_messages"

    __table_args__ = (
        Index('ix_conversation_messages_conversation_created', 'conversation_id', 'created_at'),
    )

    id = Column(Integer, primary_key=True, index=True)
    conversation_id = Column(Integer, ForeignKey("conversations.id", ondelete="CASCADE"), nullable=False)
    sender_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    message = Column(Text, nullable=False)

    is_deleted = Column(Boolean, default=False, nullable=False)
    edited_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    conversation = relationship("Conversation", back_populates="messages")
    sender = relationship("User")


class MessageReaction(Base):
    """Emoji reaction; scope tells which message table message_id points at."""

    __tablename__ = "message_reactions"

    __table_args__ = (
        UniqueConstraint('scope', 'message_id', 'user_id', 'reaction', name='uq_message_reaction'),
        Index('ix_message_reactions_scope_message', 'scope', 'message_id'),
    )

    id = Column(Integer, primary_key=True)
    scope = Column(String(20), nullable=False)  # "global", "conversation"
    message_id = Column(Integer, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    reaction = Column(String(32), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)
