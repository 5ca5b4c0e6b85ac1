"""
Services package.
"""

from .credential_service import CredentialService
from .message_service import MessageService
from .conversation_service import ConversationService
from .branch_service import BranchService
from .settings_service import SettingsService
from .chat_service import ChatService
from .llm_service import ProviderAdapter, OpenAICompatibleAdapter, GoogleAdapter, get_adapter

__all__ = [
    "CredentialService",
    "MessageService",
    "ConversationService",
    "BranchService",
    "SettingsService",
    "ChatService",
    "ProviderAdapter",
    "OpenAICompatibleAdapter",
    "GoogleAdapter",
    "get_adapter",
]
