"""
User Service for handling user-related business logic
"""
import logging
from typing import Optional, List, Tuple
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from social_network.config import settings
from social_network.exceptions import NotFoundError
from social_network.models.user import User
from social_network.models.chat import Chat, ChatMember
from social_network.schemas.user_schema import UserProfileUpdate, UserProfileResponse
from social_network.services.redis_service import RedisService
from social_network.utils.pagination import fetch_page

logger = logging.getLogger(__name__)

class UserService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.redis = RedisService()

    async def get_user_by_id(self, user_id: int) -> Optional[User]:
        return await self.db.get(User, user_id)

    async def get_user_by_username(self, username: str) -> Optional[User]:
        stmt = select(User).where(User.username == username)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_users(self, limit: int, cursor: int = 0) -> Tuple[List[User], Optional[int]]:
        """All active users, oldest account first"""
        stmt = select(User).where(User.is_active.is_(True)).order_by(User.id.asc())
        return await fetch_page(self.db, stmt, limit, cursor)

    def _profile_cache_key(self, user_id: int) -> str:
        return f"user:{user_id}:profile"

    async def get_user_profile(self, user_id: int) -> UserProfileResponse:
        """Get a user's profile, served from cache when possible"""
        cache_key = self._profile_cache_key(user_id)
        try:
            cached = await self.redis.get(cache_key)
            if cached:
                return UserProfileResponse.model_validate_json(cached)
        except Exception as e:
            logger.error(f"Error reading profile cache: {e}")

        user = await self.get_user_by_id(user_id)
        if user is None:
            raise NotFoundError("User with this id doesn't exist")

        profile = UserProfileResponse.model_validate(user)
        try:
            await self.redis.setex(cache_key, settings.PROFILE_CACHE_TTL, profile.model_dump_json())
        except Exception as e:
            logger.error(f"Error caching profile: {e}")

        return profile

    async def change_user_profile(
        self,
        user_id: int,
        profile_update: UserProfileUpdate
    ) -> UserProfileResponse:
        """Patch the fields present in ``profile_update``"""
        user = await self.get_user_by_id(user_id)
        if user is None:
            raise NotFoundError("User with this id doesn't exist")

        for field, value in profile_update.model_dump(exclude_unset=True).items():
            setattr(user, field, value)

        await self.db.commit()
        await self.db.refresh(user)

        try:
            await self.redis.delete(self._profile_cache_key(user_id))
        except Exception as e:
            logger.error(f"Error invalidating profile cache: {e}")

        logger.info(f"Updated profile of user {user_id}: {sorted(profile_update.model_fields_set)}")
        return UserProfileResponse.model_validate(user)

    async def get_user_chats(
        self,
        user_id: int,
        limit: int,
        cursor: int = 0
    ) -> Tuple[List[Chat], Optional[int]]:
        """Chats ``user_id`` is a member of, most recently joined first"""
        stmt = (
            select(Chat)
            .join(ChatMember, ChatMember.chat_id == Chat.id)
            .where(ChatMember.user_id == user_id)
            .order_by(ChatMember.created_at.desc(), ChatMember.id.desc())
        )
        return await fetch_page(self.db, stmt, limit, cursor)
