"""
Chat dispatch routes.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..schemas.message import (
    ChatRequest,
    ChatResponse,
    CredentialTestRequest,
    CredentialTestResult
)
from ..services.chat_service import ChatService
from ..services.llm_service import list_providers
from ..utils.security import get_current_user_id


router = APIRouter(prefix="/api/chat", tags=["Chat"])


@router.get("/providers")
async def get_providers(user_id: str = Depends(get_current_user_id)):
    """List supported providers and their models."""
    return {"providers": list_providers()}


@router.post("", response_model=ChatResponse)
async def send_message(
    chat_request: ChatRequest,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Send a chat message and receive the assistant reply."""
    chat_service = ChatService(db)
    provider, model = await chat_service.resolve_target(
        user_id, chat_request.provider, chat_request.model
    )

    reply = await chat_service.send_message(
        user_id,
        chat_request.conversation_id,
        chat_request.message,
        provider=provider,
        model=model
    )

    return ChatResponse(
        conversation_id=chat_request.conversation_id,
        content=reply,
        provider=provider,
        model=model
    )


@router.post("/test", response_model=CredentialTestResult)
async def test_credential(
    test_request: CredentialTestRequest,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Check an API key against its provider before saving it."""
    return await ChatService(db).test_credential(
        test_request.provider,
        test_request.api_key,
        test_request.model
    )
