"""
Models package for Social Network API
"""
from social_network.db.base import Base, BaseModel
from social_network.models.user import User, UserRole
from social_network.models.follow import Follow
from social_network.models.friendship import Friendship
from social_network.models.post import Post
from social_network.models.comment import Comment
from social_network.models.like import Like
from social_network.models.chat import Chat, ChatMember, ChatMemberType, Message
from social_network.models.media import Media

__all__ = [
    'Base',
    'BaseModel',
    'User',
    'UserRole',
    'Follow',
    'Friendship',
    'Post',
    'Comment',
    'Like',
    'Chat',
    'ChatMember',
    'ChatMemberType',
    'Message',
    'Media',
]
