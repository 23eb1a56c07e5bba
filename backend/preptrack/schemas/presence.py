"""
Presence and typing schemas.
"""

from pydantic import BaseModel, Field, model_validator
from typing import Literal, Optional
from datetime import datetime


class HeartbeatRequest(BaseModel):
    """Client heartbeat; send is_online=false on page unload."""
    is_online: bool = True


class PresenceResponse(BaseModel):
    """Stored flag plus the liveness evaluated at read time."""
    user_id: int
    is_online: bool
    last_seen: datetime
    is_live: bool
    lease_expires_at: datetime


class TypingRequest(BaseModel):
    chat_type: Literal["public", "conversation"] = "public"
    conversation_id: Optional[int] = None
    is_typing: bool = True

    @model_validator(mode="after")
    def check_target(self):
        if self.chat_type == "conversation" and self.conversation_id is None:
            raise ValueError("conversation_id is required for conversation typing")
        if self.chat_type == "public":
            self.conversation_id = None
        return self


class TypingUser(BaseModel):
    user_id: int
    display_name: str
    last_typing: datetime = Field(..., description="Last keystroke signal")
