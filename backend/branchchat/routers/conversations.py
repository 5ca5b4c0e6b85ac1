"""
Conversation management routes.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from ..database import get_db
from ..schemas.conversation import (
    ConversationCreate,
    ConversationUpdate,
    ConversationResponse,
    ConversationWithMessages,
    BranchCreate,
    BranchCreated,
    BranchResponse
)
from ..schemas.message import MessageCreate, MessageResponse
from ..services.conversation_service import ConversationService
from ..services.message_service import MessageService
from ..services.branch_service import BranchService
from ..utils.security import get_current_user_id


router = APIRouter(prefix="/api/conversations", tags=["Conversations"])


@router.get("", response_model=List[ConversationResponse])
async def list_conversations(
    skip: int = 0,
    limit: int = 50,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """List all conversations for the current user."""
    return await ConversationService(db).list_for_user(user_id, skip=skip, limit=limit)


@router.post("", response_model=ConversationResponse, status_code=status.HTTP_201_CREATED)
async def create_conversation(
    conversation_data: ConversationCreate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Create a new conversation."""
    return await ConversationService(db).create(user_id, conversation_data.title)


@router.get("/{conversation_id}", response_model=ConversationWithMessages)
async def get_conversation(
    conversation_id: int,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Get a conversation with all messages."""
    conversation, messages = await ConversationService(db).get_with_messages(user_id, conversation_id)

    return {
        **ConversationResponse.model_validate(conversation).model_dump(),
        "messages": [MessageResponse.model_validate(msg) for msg in messages]
    }


@router.put("/{conversation_id}", response_model=ConversationResponse)
async def update_conversation(
    conversation_id: int,
    updates: ConversationUpdate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Rename a conversation."""
    return await ConversationService(db).rename(user_id, conversation_id, updates.title)


@router.delete("/{conversation_id}")
async def delete_conversation(
    conversation_id: int,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Delete a conversation together with every branch forked from it."""
    deleted = await BranchService(db).delete_conversation(user_id, conversation_id)
    return {"message": "Conversation deleted", "deleted_conversation_ids": deleted}


@router.post(
    "/{conversation_id}/messages",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED
)
async def append_message(
    conversation_id: int,
    message_data: MessageCreate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Append a message to the conversation log without dispatching it."""
    return await MessageService(db).append(
        conversation_id,
        user_id,
        message_data.content,
        message_data.role,
        provider=message_data.provider,
        model=message_data.model
    )


@router.post(
    "/{conversation_id}/duplicate",
    response_model=ConversationResponse,
    status_code=status.HTTP_201_CREATED
)
async def duplicate_conversation(
    conversation_id: int,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Copy a conversation and its messages."""
    return await BranchService(db).duplicate_conversation(user_id, conversation_id)


@router.post(
    "/{conversation_id}/branches",
    response_model=BranchCreated,
    status_code=status.HTTP_201_CREATED
)
async def create_branch(
    conversation_id: int,
    branch_data: BranchCreate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Create a branch from a specific message in a conversation."""
    return await BranchService(db).create_branch(
        user_id,
        conversation_id,
        branch_data.message_id,
        branch_data.name
    )


@router.get("/{conversation_id}/branches", response_model=List[BranchResponse])
async def list_branches(
    conversation_id: int,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """List branches forked from a conversation."""
    # Ownership is enforced on the conversation read
    await ConversationService(db).get(user_id, conversation_id)
    return await BranchService(db).list_branches(conversation_id)
