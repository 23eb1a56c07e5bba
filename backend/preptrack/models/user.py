"""
User and presence database models.
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Boolean
from sqlalchemy.orm import relationship

from ..database import Base
from ..utils.timeutils import utcnow


class User(Base):
    """User account model."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, index=True, nullable=False)
    email = Column(String(100), unique=True, index=True, nullable=True)
    # Only the bcrypt hash is kept; moderators reset passwords instead of reading them
    hashed_password = Column(String(255), nullable=False)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    is_active = Column(Boolean, default=True)
    is_admin = Column(Boolean, default=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), onupdate=utcnow)

    # Relationships
    presence = relationship("UserPresence", back_populates="user", uselist=False, cascade="all, delete-orphan")
    sheets = relationship("PracticeSheet", back_populates="user", cascade="all, delete-orphan")

    @property
    def display_name(self) -> str:
        parts = [p for p in (self.first_name, self.last_name) if p]
        return " ".join(parts) if parts else self.username


class UserPresence(Base):
    """Online flag and last heartbeat, one row per user."""

    __tablename__ = "user_presence"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    is_online = Column(Boolean, default=False, nullable=False)
    last_seen = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    user = relationship("User", back_populates="presence")


class TypingStatus(Base):
    """Last keystroke signal of a user in the public chat or a conversation."""

    __tablename__ = "typing_status"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    chat_type = Column(String(20), nullable=False)  # "public", "conversation"
    conversation_id = Column(Integer, ForeignKey("conversations.id", ondelete="CASCADE"), nullable=True)
    last_typing = Column(DateTime(timezone=True), default=utcnow, nullable=False)
