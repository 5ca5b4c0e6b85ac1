"""
Message and chat Pydantic schemas.
"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class MessageCreate(BaseModel):
    """Schema for appending a message to a conversation log."""
    role: str = Field(..., pattern=r"^(user|assistant)$")
    content: str
    provider: Optional[str] = None
    model: Optional[str] = None


class MessageResponse(BaseModel):
    """Message response schema."""
    id: int
    conversation_id: int
    role: str
    content: str
    provider: Optional[str] = None
    model: Optional[str] = None
    message_index: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ChatRequest(BaseModel):
    """Schema for sending a chat message.

    provider and model fall back to the user's default settings.
    """
    conversation_id: int
    message: str = Field(..., min_length=1)
    provider: Optional[str] = None
    model: Optional[str] = None


class ChatResponse(BaseModel):
    """Assistant reply for a sent message."""
    conversation_id: int
    content: str
    provider: str
    model: str


class CredentialTestRequest(BaseModel):
    """Schema for probing a not-yet-saved API key."""
    provider: str
    api_key: str = Field(..., min_length=1)
    model: str


class CredentialTestResult(BaseModel):
    success: bool
    message: str
