"""
Branch manager: copy-on-fork branches, duplication and cascading deletes.

A branch is a brand new conversation holding copies of the parent's messages
up to and including the branch point, with identical message_index values.
Later appends to either timeline never affect the other.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, or_
from typing import Dict, List, Optional
import logging

from ..models.conversation import Branch, Conversation
from ..models.message import Message
from ..exceptions import NotFound
from ..utils.security import ensure_authenticated
from .conversation_service import ConversationService


logger = logging.getLogger(__name__)


class BranchService:
    """Service for forking, duplicating and tearing down conversations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _copy_messages(
        self,
        source_id: int,
        target: Conversation,
        up_to_index: Optional[int] = None
    ) -> int:
        """
        Copy messages from one conversation into another.

        Content, role, provenance and message_index are preserved; ids are new.
        Returns the number of copied messages. Does not commit.
        """
        query = select(Message).filter(Message.conversation_id == source_id)
        if up_to_index is not None:
            query = query.filter(Message.message_index <= up_to_index)
        result = await self.db.execute(query.order_by(Message.message_index))
        messages = result.scalars().all()

        for msg in messages:
            self.db.add(Message(
                conversation_id=target.id,
                role=msg.role,
                content=msg.content,
                provider=msg.provider,
                model=msg.model,
                message_index=msg.message_index
            ))

        target.next_message_index = messages[-1].message_index + 1 if messages else 0
        return len(messages)

    async def create_branch(
        self,
        user_id: str,
        parent_conversation_id: int,
        branch_from_message_id: int,
        name: str
    ) -> Dict[str, int]:
        """
        Fork a conversation at one of its messages.

        The new conversation, its copied messages and the branch record are
        written in a single transaction.
        """
        ensure_authenticated(user_id)
        try:
            result = await self.db.execute(
                select(Conversation).filter(
                    Conversation.id == parent_conversation_id,
                    Conversation.user_id == user_id
                )
            )
            parent = result.scalar_one_or_none()
            if not parent:
                raise NotFound("Parent conversation not found")

            result = await self.db.execute(
                select(Message).filter(
                    Message.id == branch_from_message_id,
                    Message.conversation_id == parent_conversation_id
                )
            )
            branch_message = result.scalar_one_or_none()
            if not branch_message:
                raise NotFound("Branch message not found")

            branch_conversation = Conversation(
                user_id=user_id,
                title=f"{parent.title} - {name}",
                branch_from_message_id=branch_message.id,
                next_message_index=0
            )
            self.db.add(branch_conversation)
            await self.db.flush()

            copied = await self._copy_messages(
                parent.id, branch_conversation, up_to_index=branch_message.message_index
            )

            branch = Branch(
                user_id=user_id,
                parent_conversation_id=parent.id,
                branch_conversation_id=branch_conversation.id,
                branch_from_message_id=branch_message.id,
                name=name,
                is_active=True
            )
            self.db.add(branch)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(
            "Branched conversation %s at message %s into %s (%d messages)",
            parent_conversation_id, branch_from_message_id, branch_conversation.id, copied
        )
        return {
            "branch_id": branch.id,
            "branch_conversation_id": branch_conversation.id
        }

    async def list_branches(self, conversation_id: int) -> List[Branch]:
        """Branches forked from a conversation. Ownership is checked by the caller."""
        result = await self.db.execute(
            select(Branch)
            .filter(Branch.parent_conversation_id == conversation_id)
            .order_by(Branch.id)
        )
        return list(result.scalars().all())

    async def _collect_subtree(self, conversation_id: int) -> List[int]:
        """Ids of a conversation and every conversation branched from it, at any depth."""
        collected: List[int] = []
        seen = set()
        pending = [conversation_id]

        while pending:
            current = pending.pop()
            if current in seen:
                continue
            seen.add(current)
            collected.append(current)

            result = await self.db.execute(
                select(Branch.branch_conversation_id)
                .filter(Branch.parent_conversation_id == current)
            )
            pending.extend(result.scalars().all())

        return collected

    async def delete_conversation(self, user_id: str, conversation_id: int) -> List[int]:
        """
        Delete a conversation with its messages and its whole branch tree.

        Branch records pointing at any deleted conversation are removed as
        well. Returns the ids of all deleted conversations.
        """
        ensure_authenticated(user_id)
        try:
            result = await self.db.execute(
                select(Conversation.id).filter(
                    Conversation.id == conversation_id,
                    Conversation.user_id == user_id
                )
            )
            if result.scalar_one_or_none() is None:
                raise NotFound("Conversation not found")

            doomed = await self._collect_subtree(conversation_id)

            await self.db.execute(
                delete(Branch).where(or_(
                    Branch.parent_conversation_id.in_(doomed),
                    Branch.branch_conversation_id.in_(doomed)
                ))
            )
            await self.db.execute(
                delete(Message).where(Message.conversation_id.in_(doomed))
            )
            await self.db.execute(
                delete(Conversation).where(Conversation.id.in_(doomed))
            )
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(
            "Deleted conversation %s and %d branch conversation(s)",
            conversation_id, len(doomed) - 1
        )
        return doomed

    async def duplicate_conversation(self, user_id: str, conversation_id: int) -> Conversation:
        """Copy a conversation and its full log. No branch record is created."""
        source = await ConversationService(self.db).get(user_id, conversation_id)

        try:
            duplicate = Conversation(
                user_id=user_id,
                title=f"{source.title} (Copy)",
                next_message_index=0
            )
            self.db.add(duplicate)
            await self.db.flush()

            await self._copy_messages(source.id, duplicate)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        await self.db.refresh(duplicate)
        return duplicate
