"""
Dispatch orchestrator: the "send message" use case.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from typing import Any, Dict, Optional, Tuple
import asyncio
import logging
import weakref

from ..exceptions import NoCredential
from ..utils.security import ensure_authenticated
from .credential_service import CredentialService
from .message_service import MessageService
from .settings_service import SettingsService
from .llm_service import get_adapter


logger = logging.getLogger(__name__)

TEST_MESSAGE = "Hello, this is a test message."

# One lock per conversation with an in-flight dispatch in this process
_conversation_locks: "weakref.WeakValueDictionary[int, asyncio.Lock]" = weakref.WeakValueDictionary()


def conversation_lock(conversation_id: int) -> asyncio.Lock:
    """Lock serializing dispatches to the same conversation."""
    lock = _conversation_locks.get(conversation_id)
    if lock is None:
        lock = asyncio.Lock()
        _conversation_locks[conversation_id] = lock
    return lock


class ChatService:
    """Routes a user message through a provider and records both sides."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def resolve_target(
        self,
        user_id: str,
        provider: Optional[str] = None,
        model: Optional[str] = None
    ) -> Tuple[str, str]:
        """Fill a missing provider or model from the user's default settings."""
        if provider is None or model is None:
            user_settings = await SettingsService(self.db).get_settings(user_id)
            provider = provider or user_settings.default_provider
            model = model or user_settings.default_model
        return provider, model

    async def send_message(
        self,
        user_id: str,
        conversation_id: int,
        message: str,
        provider: Optional[str] = None,
        model: Optional[str] = None
    ) -> str:
        """
        Append a user message, ask the provider for a reply and append it.

        A failed upstream call leaves the user message in the log and
        propagates UpstreamError; nothing is rolled back.
        """
        ensure_authenticated(user_id)
        provider, model = await self.resolve_target(user_id, provider, model)

        adapter = get_adapter(provider)

        credential = await CredentialService(self.db).get_active(user_id, provider)
        if not credential:
            raise NoCredential(provider)
        api_key = credential.api_key

        # No transaction may stay open while waiting for the conversation lock
        await self.db.commit()

        message_log = MessageService(self.db)

        async with conversation_lock(conversation_id):
            await message_log.append(conversation_id, user_id, message, "user")

            # The stored log already ends with the new user message
            history = [
                {"role": msg.role, "content": msg.content}
                for msg in await message_log.list(conversation_id)
            ]
            # Release the read transaction before the upstream call
            await self.db.commit()

            logger.info(
                "Dispatching conversation %s (%d messages) to %s/%s",
                conversation_id, len(history), provider, model
            )
            reply = await adapter.complete(api_key, model, history)

            await message_log.append(
                conversation_id,
                user_id,
                reply,
                "assistant",
                provider=provider,
                model=model
            )

        return reply

    async def test_credential(self, provider: str, api_key: str, model: str) -> Dict[str, Any]:
        """
        Probe a not-yet-saved key with a single exchange.

        Never raises: every failure is reported as ``success: False``.
        """
        try:
            adapter = get_adapter(provider)
            await adapter.complete(api_key, model, [{"role": "user", "content": TEST_MESSAGE}])
        except Exception as e:
            logger.warning("API key test for %s failed: %s", provider, e)
            return {"success": False, "message": f"API key test failed: {e}"}

        return {"success": True, "message": "API key is valid"}
