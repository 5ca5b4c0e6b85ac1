"""
API Routers package.
"""

from .chat import router as chat_router
from .conversations import router as conversations_router
from .credentials import router as credentials_router
from .settings import router as settings_router

__all__ = [
    "chat_router",
    "conversations_router",
    "credentials_router",
    "settings_router"
]
