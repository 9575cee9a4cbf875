from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from social_network.config import settings
from social_network.db.session import get_db
from social_network.exceptions import SocialNetworkError
from social_network.schemas.auth_schema import AuthenticatedUser
from social_network.schemas.chat_schema import (
    ChatMemberRequest,
    ChatMemberResponse,
    ChatMemberTypeRequest,
    ChatRequest,
    ChatResponse,
    MessageRequest,
    MessageResponse,
)
from social_network.schemas.pagination_schema import Page, make_page
from social_network.services.auth_service import get_current_user
from social_network.services.authorization import Action
from social_network.services.chat_service import ChatService

logger = logging.getLogger(__name__)

router = APIRouter()

def _internal_error(action: str, e: Exception) -> HTTPException:
    logger.error(f"Error trying to {action}: {e}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}"
    )

@router.post("", response_model=ChatResponse)
async def create_chat(
    chat_request: ChatRequest,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Create new chat owned by the caller"""
    try:
        chat = await ChatService(db).create_chat(current_user.id, chat_request.name)
        return ChatResponse.model_validate(chat)
    except SocialNetworkError:
        raise
    except Exception as e:
        raise _internal_error("create chat", e)

@router.get("/{chat_id}", response_model=ChatResponse)
async def get_chat(
    chat_id: int,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Get chat information (for chat members)"""
    try:
        chat = await ChatService(db).authorize_chat(current_user, chat_id, Action.VIEW_CHAT)
        return ChatResponse.model_validate(chat)
    except SocialNetworkError:
        raise
    except Exception as e:
        raise _internal_error("get chat", e)

@router.put("/{chat_id}", response_model=ChatResponse)
async def change_chat_info(
    chat_id: int,
    chat_request: ChatRequest,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Change chat information (for chat admins)"""
    try:
        chat_service = ChatService(db)
        chat = await chat_service.authorize_chat(current_user, chat_id, Action.EDIT_CHAT)
        chat = await chat_service.rename_chat(chat, chat_request.name)
        return ChatResponse.model_validate(chat)
    except SocialNetworkError:
        raise
    except Exception as e:
        raise _internal_error("change chat", e)

@router.delete("/{chat_id}", response_model=ChatResponse)
async def delete_chat(
    chat_id: int,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Delete chat (for chat owner or admins)"""
    try:
        chat_service = ChatService(db)
        chat = await chat_service.authorize_chat(current_user, chat_id, Action.DELETE_CHAT)
        deleted = ChatResponse.model_validate(chat)
        await chat_service.delete_chat(chat)
        return deleted
    except SocialNetworkError:
        raise
    except Exception as e:
        raise _internal_error("delete chat", e)

# Members

@router.get("/{chat_id}/members", response_model=Page[ChatMemberResponse])
async def get_chat_members(
    chat_id: int,
    limit: int = Query(settings.DEFAULT_PAGE_SIZE),
    cursor: int = Query(0),
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Get all chat members using pagination (for chat members)"""
    try:
        chat_service = ChatService(db)
        await chat_service.authorize_chat(current_user, chat_id, Action.VIEW_CHAT)
        members, next_cursor = await chat_service.get_chat_members(chat_id, limit, cursor)
        return make_page(ChatMemberResponse, members, limit, cursor, next_cursor)
    except SocialNetworkError:
        raise
    except Exception as e:
        raise _internal_error("get chat members", e)

@router.post("/{chat_id}/members", response_model=ChatMemberResponse)
async def add_chat_member(
    chat_id: int,
    member_request: ChatMemberRequest,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Add new member to chat (for chat members)"""
    try:
        chat_service = ChatService(db)
        await chat_service.authorize_chat(current_user, chat_id, Action.ADD_MEMBER)
        member = await chat_service.add_chat_member(chat_id, member_request.user_id)
        return ChatMemberResponse.model_validate(member)
    except SocialNetworkError:
        raise
    except Exception as e:
        raise _internal_error("add chat member", e)

@router.patch("/{chat_id}/members/{member_id}", response_model=ChatMemberResponse)
async def change_member_status(
    chat_id: int,
    member_id: int,
    type_request: ChatMemberTypeRequest,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Promote or demote a chat member (for chat admins)"""
    try:
        chat_service = ChatService(db)
        await chat_service.authorize_chat(current_user, chat_id, Action.CHANGE_MEMBER_ROLE)
        member = await chat_service.change_member_type(chat_id, member_id, type_request.type)
        return ChatMemberResponse.model_validate(member)
    except SocialNetworkError:
        raise
    except Exception as e:
        raise _internal_error("change chat member", e)

@router.delete("/{chat_id}/members/{member_id}", response_model=ChatMemberResponse)
async def delete_chat_member(
    chat_id: int,
    member_id: int,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Delete a member from chat (for chat admins)"""
    try:
        chat_service = ChatService(db)
        await chat_service.authorize_chat(current_user, chat_id, Action.REMOVE_MEMBER)
        member = await chat_service.delete_chat_member(chat_id, member_id)
        return ChatMemberResponse.model_validate(member)
    except SocialNetworkError:
        raise
    except Exception as e:
        raise _internal_error("delete chat member", e)

# Messages

@router.get("/{chat_id}/messages", response_model=Page[MessageResponse])
async def get_chat_messages(
    chat_id: int,
    limit: int = Query(settings.DEFAULT_PAGE_SIZE),
    cursor: int = Query(0),
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Get all chat messages using pagination (for chat members)"""
    try:
        chat_service = ChatService(db)
        await chat_service.authorize_chat(current_user, chat_id, Action.VIEW_CHAT)
        messages, next_cursor = await chat_service.get_chat_messages(chat_id, limit, cursor)
        return make_page(MessageResponse, messages, limit, cursor, next_cursor)
    except SocialNetworkError:
        raise
    except Exception as e:
        raise _internal_error("get chat messages", e)

@router.post("/{chat_id}/messages", response_model=MessageResponse)
async def send_message(
    chat_id: int,
    message_request: MessageRequest,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Send a message to chat"""
    try:
        chat_service = ChatService(db)
        await chat_service.authorize_chat(current_user, chat_id, Action.POST_MESSAGE)
        message = await chat_service.send_message(chat_id, current_user.id, message_request.content)
        return MessageResponse.model_validate(message)
    except SocialNetworkError:
        raise
    except Exception as e:
        raise _internal_error("send message", e)
