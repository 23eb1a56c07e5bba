"""
Conversation-related Pydantic schemas.
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime


class ConversationCreate(BaseModel):
    """Open (or reopen) a one-on-one conversation; the caller is added implicitly."""
    participant_ids: List[int] = Field(..., min_length=1)


class GroupConversationCreate(BaseModel):
    """Create a named group; the caller becomes creator and member."""
    participant_ids: List[int] = Field(..., min_length=1)
    group_name: str = Field(..., max_length=200)


class ConversationResponse(BaseModel):
    """Conversation response schema."""
    id: int
    participant_ids: List[int]
    is_group_chat: bool
    group_name: Optional[str] = None
    creator_id: Optional[int] = None
    last_message_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class ConversationListResponse(ConversationResponse):
    """Inbox row with a preview of the latest visible message."""
    last_message: Optional[str] = None
    last_sender_id: Optional[int] = None
