"""
Services package.
"""

from .auth_service import AuthService
from .presence_service import PresenceService, TypingService
from .conversation_service import ConversationService
from .message_service import MessageService
from .sheet_service import SheetService
from .recommendation_service import RecommendationService
from .directory_service import DirectoryService

__all__ = [
    "AuthService",
    "PresenceService",
    "TypingService",
    "ConversationService",
    "MessageService",
    "SheetService",
    "RecommendationService",
    "DirectoryService",
]
