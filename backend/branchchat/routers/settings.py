"""
User settings routes.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..schemas.settings import UserSettingsResponse, UserSettingsUpdate
from ..services.settings_service import SettingsService
from ..utils.security import get_current_user_id


router = APIRouter(prefix="/api/settings", tags=["Settings"])


@router.get("", response_model=UserSettingsResponse)
async def get_settings(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Get current user settings, falling back to defaults."""
    return await SettingsService(db).get_settings(user_id)


@router.put("", response_model=UserSettingsResponse)
async def update_settings(
    updates: UserSettingsUpdate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Update user settings."""
    return await SettingsService(db).update_settings(
        user_id,
        updates.model_dump(exclude_unset=True)
    )
