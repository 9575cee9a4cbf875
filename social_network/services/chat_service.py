from typing import List, Optional, Tuple
from sqlalchemy import select, delete, and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from social_network.exceptions import (
    ConflictError,
    InvalidOperationError,
    NotFoundError,
)
from social_network.models.chat import Chat, ChatMember, ChatMemberType, Message
from social_network.models.user import User
from social_network.schemas.auth_schema import AuthenticatedUser
from social_network.services.authorization import Action, authorize
from social_network.utils.pagination import fetch_page, validate_page

logger = logging.getLogger(__name__)

class ChatService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_chat_by_id(self, chat_id: int) -> Optional[Chat]:
        return await self.db.get(Chat, chat_id)

    async def require_chat(self, chat_id: int) -> Chat:
        chat = await self.get_chat_by_id(chat_id)
        if chat is None:
            raise NotFoundError("Chat with request Id doesn't exist")
        return chat

    async def get_chat_member(self, chat_id: int, user_id: int) -> Optional[ChatMember]:
        stmt = select(ChatMember).where(
            and_(ChatMember.chat_id == chat_id, ChatMember.user_id == user_id)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_chat_owner(self, chat_id: int) -> Optional[ChatMember]:
        stmt = select(ChatMember).where(
            and_(ChatMember.chat_id == chat_id, ChatMember.type == ChatMemberType.OWNER)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def is_user_chat_member(self, chat_id: int, user_id: int) -> bool:
        return await self.get_chat_member(chat_id, user_id) is not None

    async def authorize_chat(
        self,
        principal: AuthenticatedUser,
        chat_id: int,
        action: Action
    ) -> Chat:
        """Load the chat and run the policy against the caller's membership"""
        chat = await self.require_chat(chat_id)
        membership = None if principal.is_admin else await self.get_chat_member(chat_id, principal.id)
        authorize(principal, action, membership=membership)
        return chat

    # Chats

    async def create_chat(self, owner_id: int, name: str) -> Chat:
        """Create a chat with ``owner_id`` as its owner member"""
        chat = Chat(name=name)
        self.db.add(chat)
        await self.db.flush()

        self.db.add(ChatMember(chat_id=chat.id, user_id=owner_id, type=ChatMemberType.OWNER))
        await self.db.commit()
        await self.db.refresh(chat)

        logger.info(f"User {owner_id} created chat {chat.id}")
        return chat

    async def rename_chat(self, chat: Chat, name: str) -> Chat:
        chat.name = name
        await self.db.commit()
        await self.db.refresh(chat)
        return chat

    async def delete_chat(self, chat: Chat) -> Chat:
        """Delete a chat together with its messages and members"""
        await self.db.execute(delete(Message).where(Message.chat_id == chat.id))
        await self.db.execute(delete(ChatMember).where(ChatMember.chat_id == chat.id))
        await self.db.delete(chat)
        await self.db.commit()

        logger.info(f"Deleted chat {chat.id}")
        return chat

    # Members

    async def get_chat_members(
        self,
        chat_id: int,
        limit: int,
        cursor: int = 0
    ) -> Tuple[List[ChatMember], Optional[int]]:
        validate_page(limit, cursor)
        stmt = (
            select(ChatMember)
            .where(ChatMember.chat_id == chat_id)
            .order_by(ChatMember.created_at.asc(), ChatMember.id.asc())
        )
        return await fetch_page(self.db, stmt, limit, cursor)

    async def add_chat_member(self, chat_id: int, user_id: int) -> ChatMember:
        if await self.db.get(User, user_id) is None:
            raise NotFoundError("User with this id doesn't exist")

        if await self.is_user_chat_member(chat_id, user_id):
            raise ConflictError("User is already chat member")

        member = ChatMember(chat_id=chat_id, user_id=user_id, type=ChatMemberType.MEMBER)
        self.db.add(member)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError("User is already chat member")

        await self.db.refresh(member)
        logger.info(f"User {user_id} joined chat {chat_id}")
        return member

    async def change_member_type(
        self,
        chat_id: int,
        user_id: int,
        member_type: str
    ) -> ChatMember:
        """Promote a member to chat admin or demote back to member"""
        member = await self.get_chat_member(chat_id, user_id)
        if member is None:
            raise NotFoundError("ChatMemberNotFound", status_code=404)

        if member.is_owner:
            raise InvalidOperationError("Chat owner's status can't be changed")
        if member_type == ChatMemberType.OWNER:
            raise InvalidOperationError("Chat can have only one owner")

        member.type = member_type
        await self.db.commit()
        await self.db.refresh(member)
        return member

    async def delete_chat_member(self, chat_id: int, user_id: int) -> ChatMember:
        member = await self.get_chat_member(chat_id, user_id)
        if member is None:
            raise NotFoundError("ChatMemberNotFound", status_code=404)

        if member.is_owner:
            raise InvalidOperationError("Chat owner can't be removed from chat")

        await self.db.delete(member)
        await self.db.commit()

        logger.info(f"User {user_id} removed from chat {chat_id}")
        return member

    # Messages

    async def get_chat_messages(
        self,
        chat_id: int,
        limit: int,
        cursor: int = 0
    ) -> Tuple[List[Message], Optional[int]]:
        """Messages of a chat, newest first"""
        validate_page(limit, cursor)
        stmt = (
            select(Message)
            .where(Message.chat_id == chat_id)
            .order_by(Message.created_at.desc(), Message.id.desc())
        )
        return await fetch_page(self.db, stmt, limit, cursor)

    async def send_message(self, chat_id: int, sender_id: int, content: str) -> Message:
        message = Message(chat_id=chat_id, sender_id=sender_id, content=content)
        self.db.add(message)
        await self.db.commit()
        await self.db.refresh(message)
        return message
