"""
Database models package.
"""

from .user import User, UserPresence, TypingStatus
from .conversation import Conversation, ConversationParticipant
from .message import ChatMessage, ConversationMessage, MessageReaction
from .sheet import PracticeSheet, ChaptersConfig, ChapterRecommendation, SUBJECTS

__all__ = [
    "User",
    "UserPresence",
    "TypingStatus",
    "Conversation",
    "ConversationParticipant",
    "ChatMessage",
    "ConversationMessage",
    "MessageReaction",
    "PracticeSheet",
    "ChaptersConfig",
    "ChapterRecommendation",
    "SUBJECTS",
]
