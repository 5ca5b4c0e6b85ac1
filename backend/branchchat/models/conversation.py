"""
Conversation and Branch database models.
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Boolean, Index
from sqlalchemy.sql import func

from ..database import Base


DEFAULT_CONVERSATION_TITLE = "New Conversation"


class Conversation(Base):
    """One linear, ordered message timeline owned by a user."""

    __tablename__ = "conversations"

    __table_args__ = (
        Index('ix_conversations_user_updated', 'user_id', 'updated_at'),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(128), nullable=False, index=True)

    title = Column(String(200), nullable=False, default=DEFAULT_CONVERSATION_TITLE)

    # Set on conversations created by branching; not a foreign key because the
    # source message may be deleted together with its conversation
    branch_from_message_id = Column(Integer, nullable=True)

    # Next message_index to hand out; equals the number of messages
    next_message_index = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), server_default=func.now())


class Branch(Base):
    """Records that branch_conversation_id was forked from parent_conversation_id."""

    __tablename__ = "branches"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(128), nullable=False, index=True)

    parent_conversation_id = Column(
        Integer, ForeignKey("conversations.id"), nullable=False, index=True
    )
    branch_conversation_id = Column(
        Integer, ForeignKey("conversations.id"), nullable=False, index=True
    )
    branch_from_message_id = Column(Integer, nullable=False)

    name = Column(String(200), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
