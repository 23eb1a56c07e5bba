"""
API Routers package.
"""

from .auth import router as auth_router
from .chat import router as chat_router
from .conversations import router as conversations_router
from .presence import router as presence_router
from .users import router as users_router
from .sheets import router as sheets_router
from .moderator import router as moderator_router

__all__ = [
    "auth_router",
    "chat_router",
    "conversations_router",
    "presence_router",
    "users_router",
    "sheets_router",
    "moderator_router"
]
