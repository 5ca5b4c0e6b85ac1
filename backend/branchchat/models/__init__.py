"""
Database models package.
"""

from .credential import Credential
from .conversation import Conversation, Branch, DEFAULT_CONVERSATION_TITLE
from .message import Message
from .settings import UserSettings

__all__ = [
    "Credential",
    "Conversation",
    "Branch",
    "Message",
    "UserSettings",
    "DEFAULT_CONVERSATION_TITLE",
]
