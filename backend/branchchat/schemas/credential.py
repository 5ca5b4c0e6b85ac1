"""
Credential Pydantic schemas.
"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class CredentialCreate(BaseModel):
    """Schema for saving an API key."""
    provider: str = Field(..., min_length=1, max_length=50)
    api_key: str = Field(..., min_length=1, max_length=500)


class CredentialCreated(BaseModel):
    id: int


class CredentialResponse(BaseModel):
    """Credential listing entry. Never exposes the secret."""
    id: int
    provider: str
    is_active: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
