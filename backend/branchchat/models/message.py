"""
Message database model.
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, UniqueConstraint
from sqlalchemy.sql import func

from ..database import Base


class Message(Base):
    """Chat message with provider/model provenance."""

    __tablename__ = "messages"

    # Dense per-conversation ordering; also serves the ordered history lookup
    __table_args__ = (
        UniqueConstraint('conversation_id', 'message_index', name='uq_messages_conversation_index'),
    )

    id = Column(Integer, primary_key=True, index=True)
    conversation_id = Column(Integer, ForeignKey("conversations.id"), nullable=False)

    role = Column(String(20), nullable=False)  # "user", "assistant"
    content = Column(Text, nullable=False)

    # Which provider and model produced an assistant reply
    provider = Column(String(50), nullable=True)
    model = Column(String(200), nullable=True)

    message_index = Column(Integer, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
