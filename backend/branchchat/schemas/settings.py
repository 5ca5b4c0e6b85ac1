"""
User settings Pydantic schemas.
"""

from pydantic import BaseModel, Field
from typing import Optional


class UserSettingsBase(BaseModel):
    """Base settings schema."""
    default_provider: str
    default_model: str
    temperature: float = Field(0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(2000, gt=0)
    system_prompt: Optional[str] = None
    theme: str = Field("light", pattern=r"^(light|dark)$")


class UserSettingsUpdate(BaseModel):
    """Schema for patching settings; omitted fields keep their value."""
    default_provider: Optional[str] = None
    default_model: Optional[str] = None
    temperature: Optional[float] = Field(None, ge=0.0, le=2.0)
    max_tokens: Optional[int] = Field(None, gt=0)
    system_prompt: Optional[str] = None
    theme: Optional[str] = Field(None, pattern=r"^(light|dark)$")


class UserSettingsResponse(UserSettingsBase):
    """Settings response schema."""
    user_id: str

    class Config:
        from_attributes = True
