"""
Provider API key routes.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from ..database import get_db
from ..schemas.credential import CredentialCreate, CredentialCreated, CredentialResponse
from ..services.credential_service import CredentialService
from ..utils.security import get_current_user_id


router = APIRouter(prefix="/api/credentials", tags=["Credentials"])


@router.get("", response_model=List[CredentialResponse])
async def list_credentials(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """List saved keys by provider, without their secrets."""
    return await CredentialService(db).list(user_id)


@router.post("", response_model=CredentialCreated, status_code=status.HTTP_201_CREATED)
async def save_credential(
    credential_data: CredentialCreate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Save a key as the active one for its provider."""
    credential = await CredentialService(db).save(
        user_id,
        credential_data.provider,
        credential_data.api_key
    )
    return {"id": credential.id}


@router.delete("/{credential_id}")
async def delete_credential(
    credential_id: int,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Permanently delete a key."""
    await CredentialService(db).delete(user_id, credential_id)
    return {"message": "API key deleted"}
