"""
Message-related Pydantic schemas.
"""

from pydantic import BaseModel, Field
from typing import Optional, List, Dict
from datetime import datetime

from .user import UserSummary


class MessageCreate(BaseModel):
    """Schema for posting a message; oversized text is truncated, not rejected."""
    message: str


class MessageUpdate(BaseModel):
    """Schema for editing a message."""
    message: str


class ReactionRequest(BaseModel):
    reaction: str = Field(..., min_length=1, max_length=32)


class MessageResponse(BaseModel):
    """Message response schema."""
    id: int
    conversation_id: Optional[int] = None
    sender_id: int
    message: str
    is_deleted: bool
    edited_at: Optional[datetime] = None
    created_at: datetime
    sender: Optional[UserSummary] = None
    # reaction -> ids of users who added it
    reactions: Dict[str, List[int]] = {}

    class Config:
        from_attributes = True
