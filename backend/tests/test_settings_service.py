"""
Tests for per-user settings.
"""

import pytest
from sqlalchemy import func, select

from branchchat.config import settings
from branchchat.exceptions import Unauthenticated, UnsupportedProvider
from branchchat.models import UserSettings
from branchchat.services.settings_service import SettingsService

from conftest import OTHER_USER_ID, USER_ID


class TestSettingsService:
    """Tests for SettingsService."""

    async def test_defaults_when_nothing_saved(self, db_session):
        user_settings = await SettingsService(db_session).get_settings(USER_ID)

        assert user_settings.user_id == USER_ID
        assert user_settings.default_provider == settings.DEFAULT_PROVIDER == "google"
        assert user_settings.default_model == settings.DEFAULT_MODEL
        assert user_settings.temperature == 0.7
        assert user_settings.max_tokens == 2000
        assert user_settings.system_prompt == ""
        assert user_settings.theme == "light"

        result = await db_session.execute(select(func.count()).select_from(UserSettings))
        assert result.scalar_one() == 0

    async def test_update_inserts_then_patches(self, db_session):
        service = SettingsService(db_session)

        created = await service.update_settings(USER_ID, {"theme": "dark"})
        assert created.theme == "dark"
        assert created.default_provider == "google"

        patched = await service.update_settings(
            USER_ID, {"default_provider": "groq", "default_model": "llama-3.1-8b-instant"}
        )

        assert patched.id == created.id
        assert patched.theme == "dark"
        assert patched.default_provider == "groq"
        stored = await service.get_settings(USER_ID)
        assert stored.default_model == "llama-3.1-8b-instant"

    async def test_update_ignores_none_and_user_id(self, db_session):
        service = SettingsService(db_session)
        await service.update_settings(USER_ID, {"temperature": 1.2})

        patched = await service.update_settings(
            USER_ID, {"temperature": None, "user_id": OTHER_USER_ID}
        )

        assert patched.temperature == 1.2
        assert patched.user_id == USER_ID

    async def test_update_rejects_unknown_default_provider(self, db_session):
        service = SettingsService(db_session)
        await service.update_settings(USER_ID, {"theme": "dark"})

        with pytest.raises(UnsupportedProvider):
            await service.update_settings(USER_ID, {"default_provider": "acme-llm", "theme": "light"})

        stored = await service.get_settings(USER_ID)
        assert stored.default_provider == "google"
        assert stored.theme == "dark"

    async def test_settings_are_per_user(self, db_session):
        service = SettingsService(db_session)
        await service.update_settings(USER_ID, {"theme": "dark"})

        assert (await service.get_settings(OTHER_USER_ID)).theme == "light"

    async def test_requires_identity(self, db_session):
        with pytest.raises(Unauthenticated):
            await SettingsService(db_session).get_settings("")
