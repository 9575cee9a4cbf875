from typing import List, Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, and_, update
from sqlalchemy.exc import IntegrityError
import logging

from social_network.exceptions import ConflictError, InvalidOperationError, NotFoundError
from social_network.models.post import Post
from social_network.models.comment import Comment
from social_network.models.like import Like
from social_network.models.user import User
from social_network.schemas.post_schema import PostCreate, PostUpdate, CommentCreate
from social_network.utils.pagination import fetch_page, validate_page

logger = logging.getLogger(__name__)

class PostService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_post(self, user_id: int, post_data: PostCreate) -> Post:
        """Create a post on the user's profile"""
        post = Post(user_id=user_id, content=post_data.content)

        self.db.add(post)
        await self.db.commit()
        await self.db.refresh(post)

        logger.info(f"User {user_id} created post {post.id}")
        return post

    async def get_post(self, post_id: int) -> Optional[Post]:
        """Get a post by ID"""
        return await self.db.get(Post, post_id)

    async def require_post(self, post_id: int) -> Post:
        post = await self.get_post(post_id)
        if post is None:
            raise NotFoundError("Post with this id doesn't exist")
        return post

    async def get_user_posts(
        self,
        user_id: int,
        limit: int,
        cursor: int = 0
    ) -> Tuple[List[Post], Optional[int]]:
        """Posts of a user, newest first"""
        validate_page(limit, cursor)
        if await self.db.get(User, user_id) is None:
            raise NotFoundError("User with this id doesn't exist")

        stmt = (
            select(Post)
            .where(Post.user_id == user_id)
            .order_by(Post.created_at.desc(), Post.id.desc())
        )
        return await fetch_page(self.db, stmt, limit, cursor)

    async def update_post(self, post: Post, post_update: PostUpdate) -> Post:
        post.content = post_update.content
        await self.db.commit()
        await self.db.refresh(post)
        return post

    async def delete_post(self, post: Post) -> None:
        """Delete a post with its likes and comments"""
        await self.db.execute(delete(Like).where(Like.post_id == post.id))
        await self.db.execute(delete(Comment).where(Comment.post_id == post.id))
        await self.db.delete(post)
        await self.db.commit()
        logger.info(f"Deleted post {post.id}")

    # Likes

    async def like_post(self, user_id: int, post_id: int) -> Like:
        await self.require_post(post_id)

        stmt = select(Like).where(and_(Like.user_id == user_id, Like.post_id == post_id))
        if (await self.db.execute(stmt)).scalar_one_or_none():
            raise ConflictError("Post is already liked")

        like = Like(user_id=user_id, post_id=post_id)
        self.db.add(like)
        await self.db.execute(
            update(Post).where(Post.id == post_id).values(like_count=Post.like_count + 1)
        )
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError("Post is already liked")

        await self.db.refresh(like)
        return like

    async def unlike_post(self, user_id: int, post_id: int) -> Like:
        await self.require_post(post_id)

        stmt = select(Like).where(and_(Like.user_id == user_id, Like.post_id == post_id))
        like = (await self.db.execute(stmt)).scalar_one_or_none()
        if like is None:
            raise InvalidOperationError("Post is not liked")

        await self.db.delete(like)
        await self.db.execute(
            update(Post).where(Post.id == post_id).values(like_count=Post.like_count - 1)
        )
        await self.db.commit()
        return like

    async def get_post_likes(
        self,
        post_id: int,
        limit: int,
        cursor: int = 0
    ) -> Tuple[List[Like], Optional[int]]:
        validate_page(limit, cursor)
        await self.require_post(post_id)
        stmt = select(Like).where(Like.post_id == post_id).order_by(Like.id.asc())
        return await fetch_page(self.db, stmt, limit, cursor)

    # Comments

    async def comment_post(self, user_id: int, post_id: int, comment_data: CommentCreate) -> Comment:
        await self.require_post(post_id)

        comment = Comment(post_id=post_id, user_id=user_id, content=comment_data.content)
        self.db.add(comment)
        await self.db.execute(
            update(Post).where(Post.id == post_id).values(comment_count=Post.comment_count + 1)
        )
        await self.db.commit()
        await self.db.refresh(comment)
        return comment

    async def get_post_comments(
        self,
        post_id: int,
        limit: int,
        cursor: int = 0
    ) -> Tuple[List[Comment], Optional[int]]:
        validate_page(limit, cursor)
        await self.require_post(post_id)
        stmt = (
            select(Comment)
            .where(Comment.post_id == post_id)
            .order_by(Comment.created_at.asc(), Comment.id.asc())
        )
        return await fetch_page(self.db, stmt, limit, cursor)
