"""
Credential store: per-user, per-provider API keys with a single active key.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update
from typing import List, Optional
import logging

from ..models.credential import Credential
from ..exceptions import NotFound, UnsupportedProvider
from ..utils.security import ensure_authenticated
from .llm_service import PROVIDERS


logger = logging.getLogger(__name__)


class CredentialService:
    """Service for saving, rotating and resolving provider API keys."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def save(self, user_id: str, provider: str, api_key: str) -> Credential:
        """
        Store a new active key for (user, provider).

        Previously active keys for the same pair are deactivated, not removed,
        so the rotation history stays on record.
        """
        ensure_authenticated(user_id)
        if provider not in PROVIDERS:
            raise UnsupportedProvider(provider)

        try:
            await self.db.execute(
                update(Credential)
                .where(
                    Credential.user_id == user_id,
                    Credential.provider == provider,
                    Credential.is_active == True
                )
                .values(is_active=False)
            )

            credential = Credential(
                user_id=user_id,
                provider=provider,
                api_key=api_key,
                is_active=True
            )
            self.db.add(credential)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        await self.db.refresh(credential)
        logger.info("Saved %s credential %s for user %s", provider, credential.id, user_id)
        return credential

    async def get_active(self, user_id: str, provider: str) -> Optional[Credential]:
        """Get the active key for (user, provider), or None."""
        ensure_authenticated(user_id)
        result = await self.db.execute(
            select(Credential)
            .filter(
                Credential.user_id == user_id,
                Credential.provider == provider,
                Credential.is_active == True
            )
            .order_by(Credential.id.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def list(self, user_id: str) -> List[Credential]:
        """List a user's keys, newest first. Callers must not expose api_key."""
        ensure_authenticated(user_id)
        result = await self.db.execute(
            select(Credential)
            .filter(Credential.user_id == user_id)
            .order_by(Credential.id.desc())
        )
        return list(result.scalars().all())

    async def delete(self, user_id: str, credential_id: int) -> None:
        """Hard-delete one of the user's keys."""
        ensure_authenticated(user_id)
        result = await self.db.execute(
            select(Credential).filter(
                Credential.id == credential_id,
                Credential.user_id == user_id
            )
        )
        credential = result.scalar_one_or_none()

        if not credential:
            raise NotFound("API key not found")

        await self.db.delete(credential)
        await self.db.commit()
        logger.info("Deleted credential %s for user %s", credential_id, user_id)
