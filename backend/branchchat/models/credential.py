"""
Provider credential database model.
"""

from sqlalchemy import Column, Integer, String, DateTime, Boolean, Index
from sqlalchemy.sql import func

from ..database import Base


class Credential(Base):
    """Per-user API key for one provider. Rotated by flag, never edited in place."""

    __tablename__ = "credentials"

    __table_args__ = (
        Index('ix_credentials_user_provider', 'user_id', 'provider'),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(128), nullable=False)
    provider = Column(String(50), nullable=False)
    api_key = Column(String(500), nullable=False)  # Encrypted at rest by the store, not here
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
