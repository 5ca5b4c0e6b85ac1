"""
User settings with read-time defaults.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import Any, Dict

from ..config import settings
from ..exceptions import UnsupportedProvider
from ..models.settings import UserSettings
from ..utils.security import ensure_authenticated
from .llm_service import PROVIDERS


def default_user_settings(user_id: str) -> UserSettings:
    """Unsaved settings row carrying the configured fallbacks."""
    return UserSettings(
        user_id=user_id,
        default_provider=settings.DEFAULT_PROVIDER,
        default_model=settings.DEFAULT_MODEL,
        temperature=settings.DEFAULT_TEMPERATURE,
        max_tokens=settings.DEFAULT_MAX_TOKENS,
        system_prompt="",
        theme=settings.DEFAULT_THEME
    )


class SettingsService:
    """Service for per-user dispatch defaults and preferences."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_stored(self, user_id: str):
        result = await self.db.execute(
            select(UserSettings).filter(UserSettings.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def get_settings(self, user_id: str) -> UserSettings:
        """Get stored settings, or defaults when the user never saved any."""
        ensure_authenticated(user_id)
        stored = await self._get_stored(user_id)
        return stored if stored is not None else default_user_settings(user_id)

    async def update_settings(self, user_id: str, updates: Dict[str, Any]) -> UserSettings:
        """Patch the user's settings, inserting a row seeded with defaults if needed."""
        ensure_authenticated(user_id)
        provider = updates.get("default_provider")
        if provider is not None and provider not in PROVIDERS:
            raise UnsupportedProvider(provider)

        try:
            user_settings = await self._get_stored(user_id)

            if not user_settings:
                user_settings = default_user_settings(user_id)
                self.db.add(user_settings)

            for key, value in updates.items():
                if key != "user_id" and hasattr(user_settings, key) and value is not None:
                    setattr(user_settings, key, value)

            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        await self.db.refresh(user_settings)

        return user_settings
