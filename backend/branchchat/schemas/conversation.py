"""
Conversation and branch Pydantic schemas.
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime

from .message import MessageResponse


class ConversationCreate(BaseModel):
    """Schema for creating a conversation."""
    title: Optional[str] = Field(None, max_length=200)


class ConversationUpdate(BaseModel):
    """Schema for renaming a conversation."""
    title: str = Field(..., min_length=1, max_length=200)


class ConversationResponse(BaseModel):
    """Conversation response schema."""
    id: int
    user_id: str
    title: str
    branch_from_message_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ConversationWithMessages(ConversationResponse):
    """Conversation with its ordered message log."""
    messages: List[MessageResponse] = []


class BranchCreate(BaseModel):
    """Schema for forking a conversation at a message."""
    message_id: int
    name: str = Field(..., min_length=1, max_length=100)


class BranchCreated(BaseModel):
    """Identities produced by a fork."""
    branch_id: int
    branch_conversation_id: int


class BranchResponse(BaseModel):
    """Branch record response schema."""
    id: int
    parent_conversation_id: int
    branch_conversation_id: int
    branch_from_message_id: int
    name: str
    is_active: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
