from fastapi import APIRouter, Depends, File, HTTPException, Query, Request, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
import logging

from social_network.config import settings
from social_network.db.session import get_db
from social_network.exceptions import SocialNetworkError
from social_network.schemas.auth_schema import AuthenticatedUser
from social_network.schemas.chat_schema import ChatResponse
from social_network.schemas.media_schema import MediaResponse
from social_network.schemas.pagination_schema import Page, make_page
from social_network.schemas.post_schema import PostCreate, PostInDB
from social_network.schemas.relationship_schema import UserFriendRequest, UserRelationship
from social_network.schemas.user_schema import UserProfileResponse, UserProfileUpdate, UserResponse
from social_network.services.auth_service import get_current_user
from social_network.services.authorization import Action, authorize
from social_network.services.media_service import MediaService
from social_network.services.post_service import PostService
from social_network.services.relationship_service import RelationshipService
from social_network.services.user_service import UserService
from social_network.utils.rate_limit import limiter

logger = logging.getLogger(__name__)

router = APIRouter()

def _internal_error(action: str, e: Exception) -> HTTPException:
    logger.error(f"Error trying to {action}: {e}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}"
    )

@router.get("", response_model=Page[UserResponse])
async def get_users(
    limit: int = Query(settings.DEFAULT_PAGE_SIZE),
    cursor: int = Query(0),
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Get all users using pagination"""
    try:
        users, next_cursor = await UserService(db).get_users(limit, cursor)
        return make_page(UserResponse, users, limit, cursor, next_cursor)
    except SocialNetworkError:
        raise
    except Exception as e:
        raise _internal_error("get users", e)

@router.get("/chats", response_model=Page[ChatResponse])
async def get_user_chats(
    limit: int = Query(settings.DEFAULT_PAGE_SIZE),
    cursor: int = Query(0),
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Get the caller's chats using pagination"""
    try:
        chats, next_cursor = await UserService(db).get_user_chats(current_user.id, limit, cursor)
        return make_page(ChatResponse, chats, limit, cursor, next_cursor)
    except SocialNetworkError:
        raise
    except Exception as e:
        raise _internal_error("get user chats", e)

@router.patch("/profile", response_model=UserProfileResponse)
async def change_user_profile(
    profile_update: UserProfileUpdate,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Change the caller's profile (full name, bio, status, sex)"""
    try:
        return await UserService(db).change_user_profile(current_user.id, profile_update)
    except SocialNetworkError:
        raise
    except Exception as e:
        raise _internal_error("change user profile", e)

@router.get("/{user_id}/profile", response_model=UserProfileResponse)
async def get_user_profile(
    user_id: int,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Get user's profile"""
    try:
        return await UserService(db).get_user_profile(user_id)
    except SocialNetworkError:
        raise
    except Exception as e:
        raise _internal_error("get user profile", e)

# Posts

@router.post("/posts", response_model=PostInDB)
async def create_user_post(
    post_data: PostCreate,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Create a post on the caller's profile"""
    try:
        post = await PostService(db).create_post(current_user.id, post_data)
        return PostInDB.model_validate(post)
    except SocialNetworkError:
        raise
    except Exception as e:
        raise _internal_error("create post", e)

@router.get("/{user_id}/posts", response_model=Page[PostInDB])
async def get_user_posts(
    user_id: int,
    limit: int = Query(settings.DEFAULT_PAGE_SIZE),
    cursor: int = Query(0),
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Get all user's posts using pagination"""
    try:
        posts, next_cursor = await PostService(db).get_user_posts(user_id, limit, cursor)
        return make_page(PostInDB, posts, limit, cursor, next_cursor)
    except SocialNetworkError:
        raise
    except Exception as e:
        raise _internal_error("get user posts", e)

# Media

@router.post("/medias", response_model=List[MediaResponse])
@limiter.limit(settings.rate_limit)
async def upload_user_medias(
    request: Request,
    files: List[UploadFile] = File(...),
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Upload one or more media files"""
    try:
        medias = await MediaService(db).add_user_medias(current_user.id, files)
        return [MediaResponse.model_validate(media) for media in medias]
    except SocialNetworkError:
        raise
    except Exception as e:
        raise _internal_error("upload media", e)

@router.get("/medias", response_model=Page[MediaResponse])
async def get_user_medias(
    limit: int = Query(settings.DEFAULT_PAGE_SIZE),
    cursor: int = Query(0),
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Get the caller's media using pagination"""
    try:
        medias, next_cursor = await MediaService(db).get_user_medias(current_user.id, limit, cursor)
        return make_page(MediaResponse, medias, limit, cursor, next_cursor)
    except SocialNetworkError:
        raise
    except Exception as e:
        raise _internal_error("get user media", e)

# Friends and followers

@router.post("/{user_id}/friends", response_model=UserProfileResponse)
@limiter.limit(settings.rate_limit)
async def add_user_friend(
    request: Request,
    user_id: int,
    friend_request: UserFriendRequest,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Send a friend request, or accept the one ``id`` already sent"""
    authorize(current_user, Action.ACT_AS_USER, owner_id=user_id)
    try:
        friend = await RelationshipService(db).add_friend(user_id, friend_request.id)
        return UserProfileResponse.model_validate(friend)
    except SocialNetworkError:
        raise
    except Exception as e:
        raise _internal_error("add friend", e)

@router.delete("/{user_id}/friends", response_model=UserProfileResponse)
@limiter.limit(settings.rate_limit)
async def delete_user_friend(
    request: Request,
    user_id: int,
    friend_request: UserFriendRequest,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Remove a friend; they remain as a follower"""
    authorize(current_user, Action.ACT_AS_USER, owner_id=user_id)
    try:
        ex_friend = await RelationshipService(db).delete_friend(user_id, friend_request.id)
        return UserProfileResponse.model_validate(ex_friend)
    except SocialNetworkError:
        raise
    except Exception as e:
        raise _internal_error("delete friend", e)

@router.get("/{user_id}/friends", response_model=Page[UserResponse])
async def get_user_friends(
    user_id: int,
    limit: int = Query(settings.DEFAULT_PAGE_SIZE),
    cursor: int = Query(0),
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Get all user's friends using pagination"""
    try:
        friends, next_cursor = await RelationshipService(db).list_friends(user_id, limit, cursor)
        return make_page(UserResponse, friends, limit, cursor, next_cursor)
    except SocialNetworkError:
        raise
    except Exception as e:
        raise _internal_error("get friends", e)

@router.delete("/{user_id}/followers", response_model=UserProfileResponse)
@limiter.limit(settings.rate_limit)
async def delete_user_follower(
    request: Request,
    user_id: int,
    follower_request: UserFriendRequest,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Remove a follower"""
    authorize(current_user, Action.ACT_AS_USER, owner_id=user_id)
    try:
        follower = await RelationshipService(db).delete_follower(user_id, follower_request.id)
        return UserProfileResponse.model_validate(follower)
    except SocialNetworkError:
        raise
    except Exception as e:
        raise _internal_error("delete follower", e)

@router.get("/{user_id}/followers", response_model=Page[UserResponse])
async def get_user_followers(
    user_id: int,
    limit: int = Query(settings.DEFAULT_PAGE_SIZE),
    cursor: int = Query(0),
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Get user's followers in the order they followed"""
    try:
        followers, next_cursor = await RelationshipService(db).list_followers(user_id, limit, cursor)
        return make_page(UserResponse, followers, limit, cursor, next_cursor)
    except SocialNetworkError:
        raise
    except Exception as e:
        raise _internal_error("get followers", e)

@router.get("/{user_id}/relationships/{target_id}", response_model=UserRelationship)
async def get_relationship(
    user_id: int,
    target_id: int,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """How ``user_id`` relates to ``target_id``"""
    try:
        relationship_status = await RelationshipService(db).get_relationship_status(user_id, target_id)
        return UserRelationship(viewer_id=user_id, target_id=target_id, status=relationship_status)
    except SocialNetworkError:
        raise
    except Exception as e:
        raise _internal_error("get relationship", e)
