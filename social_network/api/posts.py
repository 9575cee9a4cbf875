from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from social_network.config import settings
from social_network.db.session import get_db
from social_network.exceptions import SocialNetworkError
from social_network.schemas.auth_schema import AuthenticatedUser
from social_network.schemas.pagination_schema import Page, make_page
from social_network.schemas.post_schema import (
    CommentCreate,
    CommentInDB,
    PostInDB,
    PostLikeResponse,
    PostUpdate,
)
from social_network.services.auth_service import get_current_user
from social_network.services.authorization import Action, authorize
from social_network.services.post_service import PostService

logger = logging.getLogger(__name__)

router = APIRouter()

@router.put("/{post_id}", response_model=PostInDB)
async def update_post(
    post_id: int,
    post_update: PostUpdate,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Change a post (author or admin)"""
    try:
        post_service = PostService(db)
        post = await post_service.require_post(post_id)
        authorize(current_user, Action.ACT_AS_USER, owner_id=post.user_id)

        updated_post = await post_service.update_post(post, post_update)
        return PostInDB.model_validate(updated_post)
    except SocialNetworkError:
        raise
    except Exception as e:
        logger.error(f"Update post error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update post"
        )

@router.delete("/{post_id}", response_model=PostInDB)
async def delete_post(
    post_id: int,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Delete a post (author or admin)"""
    try:
        post_service = PostService(db)
        post = await post_service.require_post(post_id)
        authorize(current_user, Action.ACT_AS_USER, owner_id=post.user_id)

        deleted = PostInDB.model_validate(post)
        await post_service.delete_post(post)
        return deleted
    except SocialNetworkError:
        raise
    except Exception as e:
        logger.error(f"Delete post error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete post"
        )

@router.post("/{post_id}/likes", response_model=PostLikeResponse)
async def like_post(
    post_id: int,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Like a post"""
    try:
        like = await PostService(db).like_post(current_user.id, post_id)
        return PostLikeResponse.model_validate(like)
    except SocialNetworkError:
        raise
    except Exception as e:
        logger.error(f"Like post error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to like post"
        )

@router.delete("/{post_id}/likes", response_model=PostLikeResponse)
async def unlike_post(
    post_id: int,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Unlike a post (for like owner)"""
    try:
        like = await PostService(db).unlike_post(current_user.id, post_id)
        return PostLikeResponse.model_validate(like)
    except SocialNetworkError:
        raise
    except Exception as e:
        logger.error(f"Unlike post error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to unlike post"
        )

@router.get("/{post_id}/likes", response_model=Page[PostLikeResponse])
async def get_post_likes(
    post_id: int,
    limit: int = Query(settings.DEFAULT_PAGE_SIZE),
    cursor: int = Query(0),
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Get all post likes using pagination"""
    try:
        likes, next_cursor = await PostService(db).get_post_likes(post_id, limit, cursor)
        return make_page(PostLikeResponse, likes, limit, cursor, next_cursor)
    except SocialNetworkError:
        raise
    except Exception as e:
        logger.error(f"Get post likes error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get post likes"
        )

@router.post("/{post_id}/comments", response_model=CommentInDB)
async def comment_post(
    post_id: int,
    comment_data: CommentCreate,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Comment a post"""
    try:
        comment = await PostService(db).comment_post(current_user.id, post_id, comment_data)
        return CommentInDB.model_validate(comment)
    except SocialNetworkError:
        raise
    except Exception as e:
        logger.error(f"Comment post error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to comment post"
        )

@router.get("/{post_id}/comments", response_model=Page[CommentInDB])
async def get_post_comments(
    post_id: int,
    limit: int = Query(settings.DEFAULT_PAGE_SIZE),
    cursor: int = Query(0),
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Get all post comments using pagination"""
    try:
        comments, next_cursor = await PostService(db).get_post_comments(post_id, limit, cursor)
        return make_page(CommentInDB, comments, limit, cursor, next_cursor)
    except SocialNetworkError:
        raise
    except Exception as e:
        logger.error(f"Get post comments error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get post comments"
        )
