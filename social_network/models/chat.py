from sqlalchemy import Column, String, Text, Integer, ForeignKey, UniqueConstraint, Index
from social_network.db.base import BaseModel

class ChatMemberType:
    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"

    ALL = (OWNER, ADMIN, MEMBER)

class Chat(BaseModel):
    __tablename__ = "chats"

    name = Column(String(100), nullable=False)

class ChatMember(BaseModel):
    __tablename__ = "chat_members"

    chat_id = Column(Integer, ForeignKey("chats.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    type = Column(String(20), default=ChatMemberType.MEMBER, nullable=False)

    __table_args__ = (
        UniqueConstraint('chat_id', 'user_id', name='unique_chat_member'),
        Index('ix_chat_members_chat_id', 'chat_id'),
        Index('ix_chat_members_user_id', 'user_id'),
    )

    @property
    def is_owner(self) -> bool:
        return self.type == ChatMemberType.OWNER

    @property
    def is_admin(self) -> bool:
        return self.type in (ChatMemberType.OWNER, ChatMemberType.ADMIN)

class Message(BaseModel):
    __tablename__ = "messages"

    chat_id = Column(Integer, ForeignKey("chats.id", ondelete="CASCADE"), nullable=False)
    sender_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    content = Column(Text, nullable=False)

    __table_args__ = (
        Index('ix_messages_chat_id', 'chat_id'),
        Index('ix_messages_created_at', 'created_at'),
    )
