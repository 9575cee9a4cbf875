"""
Friend / follower state machine.

For an ordered pair of users the relation is one of: strangers, one-sided
follow (``Follow`` edge source -> target), or friends (a single
``Friendship`` row stored as ``user1_id < user2_id``). A friendship is only
ever created by promoting a reciprocal follow, and it never coexists with a
follow edge in either direction.

Every mutation runs as one transaction on the request session. Deletions
are conditional ``DELETE`` statements whose row count must be exactly one;
creations rely on the unique constraints of both tables. When a concurrent
request wins the race the transaction is rolled back, the precondition is
checked once more, and the caller gets the resulting domain error.
"""
from typing import List, Optional, Tuple
from sqlalchemy import select, delete, and_, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from social_network.exceptions import (
    ConflictError,
    InvalidOperationError,
    NotFoundError,
)
from social_network.models.follow import Follow
from social_network.models.friendship import Friendship
from social_network.models.user import User
from social_network.schemas.relationship_schema import RelationshipStatus
from social_network.utils.pagination import fetch_page, validate_id, validate_page

logger = logging.getLogger(__name__)

class _StaleRelationship(Exception):
    """A conditional delete matched no row: another request got there first"""

class RelationshipService:
    def __init__(self, db: AsyncSession):
        self.db = db

    # Lookups

    async def _require_pair(
        self,
        requester_id: int,
        target_id: int,
        target_label: str
    ) -> Tuple[User, User]:
        requester = await self.db.get(User, requester_id)
        if requester is None:
            raise NotFoundError("Request user doesn't exist")

        target = await self.db.get(User, target_id)
        if target is None:
            raise NotFoundError(f"{target_label} with this id doesn't exist")

        return requester, target

    async def get_follow(self, source_id: int, target_id: int) -> Optional[Follow]:
        stmt = select(Follow).where(
            and_(Follow.source_id == source_id, Follow.target_id == target_id)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_friendship(self, user_a: int, user_b: int) -> Optional[Friendship]:
        user1_id, user2_id = Friendship.canonical_pair(user_a, user_b)
        stmt = select(Friendship).where(
            and_(Friendship.user1_id == user1_id, Friendship.user2_id == user2_id)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def is_friend(self, user_id: int, other_id: int) -> bool:
        return await self.get_friendship(user_id, other_id) is not None

    async def is_follower(self, user_id: int, follower_id: int) -> bool:
        """True when ``follower_id`` follows ``user_id``"""
        return await self.get_follow(follower_id, user_id) is not None

    async def get_relationship_status(self, viewer_id: int, target_id: int) -> RelationshipStatus:
        await self._require_user(viewer_id)
        await self._require_user(target_id)
        if viewer_id == target_id:
            return RelationshipStatus.SELF
        if await self.is_friend(viewer_id, target_id):
            return RelationshipStatus.FRIENDS
        if await self.get_follow(viewer_id, target_id):
            return RelationshipStatus.FOLLOWING
        if await self.get_follow(target_id, viewer_id):
            return RelationshipStatus.FOLLOWED_BY
        return RelationshipStatus.NONE

    # Preconditions

    async def _check_add_friend(self, requester_id: int, target_id: int) -> bool:
        """Validate a friend request; returns whether target already follows requester"""
        if requester_id == target_id:
            raise InvalidOperationError("Can't add yourself to friends")

        if await self.is_friend(requester_id, target_id):
            raise ConflictError("User is already your friend")

        # Checked before our own request so edges in both directions still collapse
        if await self.is_follower(requester_id, target_id):
            return True

        if await self.get_follow(requester_id, target_id):
            raise ConflictError("Friend request already sent")

        return False

    async def _check_delete_friend(self, requester_id: int, target_id: int) -> None:
        if not await self.is_friend(requester_id, target_id):
            raise InvalidOperationError("User is not your Friend")

    async def _check_delete_follower(self, requester_id: int, target_id: int) -> None:
        if not await self.is_follower(requester_id, target_id):
            raise InvalidOperationError("User is not your Follower")

    async def _delete_one(self, stmt) -> None:
        result = await self.db.execute(stmt)
        if result.rowcount != 1:
            raise _StaleRelationship()

    async def _commit_or_recheck(self, check, requester_id: int, target_id: int) -> None:
        """Commit; on a lost race roll back and surface the re-checked precondition"""
        try:
            await self.db.commit()
        except IntegrityError as e:
            logger.warning(f"Relationship write conflict {requester_id} -> {target_id}: {e.orig}")
            await self._recheck(check, requester_id, target_id)

    async def _recheck(self, check, requester_id: int, target_id: int) -> None:
        await self.db.rollback()
        await check(requester_id, target_id)
        raise ConflictError("Relationship was changed by another request")

    # Mutations

    async def add_friend(self, requester_id: int, target_id: int) -> User:
        """Send a friend request, or accept one when target already follows requester.

        Returns the target's profile entity.
        """
        _, target = await self._require_pair(requester_id, target_id, "Friend")
        target_follows_requester = await self._check_add_friend(requester_id, target_id)

        try:
            if target_follows_requester:
                await self._delete_one(
                    delete(Follow).where(
                        and_(Follow.source_id == target_id, Follow.target_id == requester_id)
                    )
                )
                # Concurrent requests can leave edges in both directions
                await self.db.execute(
                    delete(Follow).where(
                        and_(Follow.source_id == requester_id, Follow.target_id == target_id)
                    )
                )
                user1_id, user2_id = Friendship.canonical_pair(requester_id, target_id)
                self.db.add(Friendship(user1_id=user1_id, user2_id=user2_id))
            else:
                self.db.add(Follow(source_id=requester_id, target_id=target_id))
        except _StaleRelationship:
            await self._recheck(self._check_add_friend, requester_id, target_id)

        await self._commit_or_recheck(self._check_add_friend, requester_id, target_id)

        if target_follows_requester:
            logger.info(f"Users {requester_id} and {target_id} are now friends")
        else:
            logger.info(f"User {requester_id} sent a friend request to {target_id}")

        return target

    async def delete_friend(self, requester_id: int, target_id: int) -> User:
        """End a friendship; the former friend stays on as requester's follower.

        Returns the target's profile entity (the new follow's source).
        """
        _, target = await self._require_pair(requester_id, target_id, "Friend")
        await self._check_delete_friend(requester_id, target_id)

        user1_id, user2_id = Friendship.canonical_pair(requester_id, target_id)
        try:
            await self._delete_one(
                delete(Friendship).where(
                    and_(Friendship.user1_id == user1_id, Friendship.user2_id == user2_id)
                )
            )
        except _StaleRelationship:
            await self._recheck(self._check_delete_friend, requester_id, target_id)

        self.db.add(Follow(source_id=target_id, target_id=requester_id))
        await self._commit_or_recheck(self._check_delete_friend, requester_id, target_id)

        logger.info(f"User {requester_id} removed {target_id} from friends")
        return target

    async def delete_follower(self, requester_id: int, target_id: int) -> User:
        """Remove ``target`` from requester's followers. Returns the target's profile entity."""
        _, target = await self._require_pair(requester_id, target_id, "Follower")
        await self._check_delete_follower(requester_id, target_id)

        try:
            await self._delete_one(
                delete(Follow).where(
                    and_(Follow.source_id == target_id, Follow.target_id == requester_id)
                )
            )
        except _StaleRelationship:
            await self._recheck(self._check_delete_follower, requester_id, target_id)

        await self._commit_or_recheck(self._check_delete_follower, requester_id, target_id)

        logger.info(f"User {requester_id} removed follower {target_id}")
        return target

    # Listings

    async def _require_user(self, user_id: int) -> User:
        validate_id(user_id, "user id")
        user = await self.db.get(User, user_id)
        if user is None:
            raise NotFoundError("User with this id doesn't exist")
        return user

    async def list_followers(
        self,
        user_id: int,
        limit: int,
        cursor: int = 0
    ) -> Tuple[List[User], Optional[int]]:
        """Followers of ``user_id`` in follow order (oldest first)"""
        validate_page(limit, cursor)
        await self._require_user(user_id)

        stmt = (
            select(User)
            .join(Follow, Follow.source_id == User.id)
            .where(Follow.target_id == user_id)
            .order_by(Follow.created_at.asc(), Follow.id.asc())
        )
        return await fetch_page(self.db, stmt, limit, cursor)

    async def list_friends(
        self,
        user_id: int,
        limit: int,
        cursor: int = 0
    ) -> Tuple[List[User], Optional[int]]:
        """Friends of ``user_id`` in the order the friendships were made"""
        validate_page(limit, cursor)
        await self._require_user(user_id)

        stmt = (
            select(User)
            .join(
                Friendship,
                or_(
                    and_(Friendship.user1_id == user_id, Friendship.user2_id == User.id),
                    and_(Friendship.user2_id == user_id, Friendship.user1_id == User.id),
                )
            )
            .order_by(Friendship.created_at.asc(), Friendship.id.asc())
        )
        return await fetch_page(self.db, stmt, limit, cursor)
