from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
from social_network.config import settings
from social_network.db.session import get_db
from social_network.exceptions import SocialNetworkError
from social_network.schemas.auth_schema import LoginRequest, TokenResponse
from social_network.schemas.user_schema import UserCreate, UserInDB
from social_network.services.auth_service import AuthService, cookie_scheme
from social_network.utils.rate_limit import limiter
import logging

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/register", response_model=UserInDB)
async def register(
    user_data: UserCreate,
    db: AsyncSession = Depends(get_db)
):
    """Register a new user"""
    try:
        auth_service = AuthService(db)
        user = await auth_service.create_user(user_data)
        return UserInDB.model_validate(user)
    except SocialNetworkError:
        raise
    except Exception as e:
        logger.error(f"Registration error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Registration failed"
        )

@router.post("/login", response_model=TokenResponse)
@limiter.limit("10/minute")
async def login(
    request: Request,
    response: Response,
    credentials: LoginRequest,
    db: AsyncSession = Depends(get_db)
):
    """Login user; the access token is set as an HTTP-only cookie"""
    try:
        auth_service = AuthService(db)

        user = await auth_service.authenticate_user(
            credentials.username,
            credentials.password
        )

        if not user:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Incorrect username or password",
            )

        access_token, expires_in = auth_service.create_access_token(user)

        response.set_cookie(
            key=settings.AUTH_COOKIE_NAME,
            value=access_token,
            max_age=expires_in,
            httponly=True,
            secure=settings.AUTH_COOKIE_SECURE,
            samesite=settings.AUTH_COOKIE_SAMESITE,
        )

        logger.info(f"User {user.id} logged in")

        return TokenResponse(
            access_token=access_token,
            expires_in=expires_in,
            user_id=user.id,
            role=user.role,
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Login error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Login failed"
        )

@router.post("/logout")
async def logout(
    response: Response,
    token: Optional[str] = Depends(cookie_scheme),
    db: AsyncSession = Depends(get_db)
):
    """Logout user (invalidate token and clear the cookie)"""
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated"
        )

    try:
        auth_service = AuthService(db)
        await auth_service.blacklist_token(token)
        response.delete_cookie(settings.AUTH_COOKIE_NAME)
        return {"message": "Successfully logged out"}
    except Exception as e:
        logger.error(f"Logout error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Logout failed"
        )
