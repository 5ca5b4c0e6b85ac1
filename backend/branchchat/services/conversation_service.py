"""
Conversation lifecycle: create, read, list and rename.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc
from typing import List, Optional, Tuple

from ..models.conversation import Conversation, DEFAULT_CONVERSATION_TITLE
from ..models.message import Message
from ..exceptions import NotFound
from ..utils.security import ensure_authenticated
from .message_service import MessageService


class ConversationService:
    """Service for user-owned conversations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, user_id: str, title: Optional[str] = None) -> Conversation:
        """Create an empty conversation."""
        ensure_authenticated(user_id)
        conversation = Conversation(
            user_id=user_id,
            title=title or DEFAULT_CONVERSATION_TITLE,
            next_message_index=0
        )
        self.db.add(conversation)
        await self.db.commit()
        await self.db.refresh(conversation)
        return conversation

    async def list_for_user(self, user_id: str, skip: int = 0, limit: int = 50) -> List[Conversation]:
        """List a user's conversations, most recently updated first."""
        ensure_authenticated(user_id)
        result = await self.db.execute(
            select(Conversation)
            .filter(Conversation.user_id == user_id)
            .order_by(desc(Conversation.updated_at), desc(Conversation.id))
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def get(self, user_id: str, conversation_id: int) -> Conversation:
        """Get a conversation owned by the user."""
        ensure_authenticated(user_id)
        result = await self.db.execute(
            select(Conversation).filter(
                Conversation.id == conversation_id,
                Conversation.user_id == user_id
            )
        )
        conversation = result.scalar_one_or_none()

        if not conversation:
            raise NotFound("Conversation not found")

        return conversation

    async def get_with_messages(
        self, user_id: str, conversation_id: int
    ) -> Tuple[Conversation, List[Message]]:
        """Get a conversation together with its ordered message log."""
        conversation = await self.get(user_id, conversation_id)
        messages = await MessageService(self.db).list(conversation_id)
        return conversation, messages

    async def rename(self, user_id: str, conversation_id: int, title: str) -> Conversation:
        """Set an explicit title."""
        conversation = await self.get(user_id, conversation_id)
        conversation.title = title
        await self.db.commit()
        await self.db.refresh(conversation)
        return conversation
