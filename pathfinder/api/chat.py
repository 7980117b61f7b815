"""Chat API endpoints."""
import logging
import traceback
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session as DBSession

from database import get_db
from pathfinder.api.dependencies import get_chat_service
from pathfinder.services.chat_service import ChatService
from shared.api.auth import AuthenticatedUser, get_current_user, get_optional_user
from shared.models.schemas import (
    ChatHistoryEntry,
    ChatMessageRequest,
    ChatMessageResponse,
    ConversationStateResponse,
    DeleteConversationResponse,
)
from shared.repositories.chat_history_repository import ChatHistoryRepository
from shared.utils.exceptions import LinkMeException

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["chat"])


@router.post("/message", response_model=ChatMessageResponse)
def send_message(
    request: ChatMessageRequest,
    service: ChatService = Depends(get_chat_service),
    user: Optional[AuthenticatedUser] = Depends(get_optional_user),
):
    """Send one utterance and get the next question, or tutorials once everything is known."""
    user_id = user.id if user and not user.is_guest else None
    try:
        return service.handle_message(request.conversation_id, request.message, user_id=user_id)
    except LinkMeException as e:
        raise e.to_http_exception()
    except Exception as e:
        logger.error(f"Error processing chat message: {str(e)}\n{traceback.format_exc()}")
        raise HTTPException(status_code=500, detail={"message": "Error processing chat message", "type": type(e).__name__})


@router.get("/conversations/{conversation_id}", response_model=ConversationStateResponse)
def get_conversation(conversation_id: str, service: ChatService = Depends(get_chat_service)):
    """Current stage, resolved slots and message log of a conversation."""
    try:
        return service.get_conversation(conversation_id)
    except LinkMeException as e:
        raise e.to_http_exception()


@router.delete("/conversations/{conversation_id}", response_model=DeleteConversationResponse)
def delete_conversation(conversation_id: str, service: ChatService = Depends(get_chat_service)):
    """Forget a conversation's state."""
    try:
        deleted = service.reset_conversation(conversation_id)
        return DeleteConversationResponse(conversation_id=conversation_id, deleted=deleted)
    except LinkMeException as e:
        raise e.to_http_exception()


@router.get("/history", response_model=List[ChatHistoryEntry])
def get_chat_history(
    user: AuthenticatedUser = Depends(get_current_user),
    db: DBSession = Depends(get_db),
):
    """Recent searches of the signed-in user."""
    return ChatHistoryRepository(db).list_by_user(user.id)
