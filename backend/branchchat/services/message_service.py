"""
Append-only message log, one dense message_index sequence per conversation.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from sqlalchemy import select, update
from typing import List, Optional
import logging

from ..models.conversation import Conversation, DEFAULT_CONVERSATION_TITLE
from ..models.message import Message
from ..exceptions import NotFound, ConsistencyViolation, InvalidMessage
from ..utils.security import ensure_authenticated


logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 50

VALID_ROLES = ("user", "assistant")


def derive_title(content: str) -> str:
    """Title for a conversation taken from its first user message."""
    if len(content) > TITLE_MAX_LENGTH:
        return content[:TITLE_MAX_LENGTH] + "..."
    return content


class MessageService:
    """Service for appending to and reading conversation logs."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _reserve_index(self, conversation_id: int) -> int:
        """
        Atomically take the next message_index of a conversation.

        The counter row is locked by the UPDATE until commit, so concurrent
        appends to the same conversation get distinct, gapless indices.
        """
        await self.db.execute(
            update(Conversation)
            .where(Conversation.id == conversation_id)
            .values(next_message_index=Conversation.next_message_index + 1)
        )
        result = await self.db.execute(
            select(Conversation.next_message_index).where(Conversation.id == conversation_id)
        )
        return result.scalar_one() - 1

    async def append(
        self,
        conversation_id: int,
        user_id: str,
        content: str,
        role: str,
        provider: Optional[str] = None,
        model: Optional[str] = None
    ) -> Message:
        """Append a message and, for a conversation's first user message, derive its title."""
        ensure_authenticated(user_id)
        if role not in VALID_ROLES:
            raise InvalidMessage(f"Invalid message role: {role}")

        try:
            result = await self.db.execute(
                select(Conversation.id).filter(
                    Conversation.id == conversation_id,
                    Conversation.user_id == user_id
                )
            )
            if result.scalar_one_or_none() is None:
                raise NotFound("Conversation not found")

            message_index = await self._reserve_index(conversation_id)

            if message_index == 0 and role == "user":
                # Compare-and-set: only replaces the untouched placeholder
                await self.db.execute(
                    update(Conversation)
                    .where(
                        Conversation.id == conversation_id,
                        Conversation.title == DEFAULT_CONVERSATION_TITLE
                    )
                    .values(title=derive_title(content))
                )

            message = Message(
                conversation_id=conversation_id,
                role=role,
                content=content,
                provider=provider,
                model=model,
                message_index=message_index
            )
            self.db.add(message)
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.error("Index collision appending to conversation %s: %s", conversation_id, e)
            raise ConsistencyViolation(
                f"Message index collision in conversation {conversation_id}"
            ) from e
        except Exception:
            await self.db.rollback()
            raise

        await self.db.refresh(message)
        logger.debug(
            "Appended %s message %s at index %s to conversation %s",
            role, message.id, message_index, conversation_id
        )
        return message

    async def list(self, conversation_id: int) -> List[Message]:
        """All messages of a conversation ordered by message_index."""
        result = await self.db.execute(
            select(Message)
            .filter(Message.conversation_id == conversation_id)
            .order_by(Message.message_index)
        )
        return list(result.scalars().all())
