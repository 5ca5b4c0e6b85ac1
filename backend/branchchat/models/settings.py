"""
UserSettings database model.
"""

from sqlalchemy import Column, Integer, String, Text, Float

from ..database import Base


class UserSettings(Base):
    """User-specific defaults for provider dispatch and UI preferences."""

    __tablename__ = "user_settings"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(128), unique=True, nullable=False)

    # LLM Configuration
    default_provider = Column(String(50), nullable=False)
    default_model = Column(String(200), nullable=False)
    temperature = Column(Float, nullable=False, default=0.7)
    max_tokens = Column(Integer, nullable=False, default=2000)
    system_prompt = Column(Text, nullable=True)

    # UI Preferences
    theme = Column(String(20), nullable=False, default="light")
