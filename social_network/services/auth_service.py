from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends, HTTPException, status
from fastapi.security import APIKeyCookie
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from social_network.config import settings
from social_network.db.base import utcnow
from social_network.exceptions import ConflictError
from social_network.schemas.auth_schema import AuthenticatedUser, TokenData
from social_network.schemas.user_schema import UserCreate
from social_network.models.user import User, UserRole
from social_network.db.session import get_db
from social_network.services.redis_service import RedisService

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
cookie_scheme = APIKeyCookie(name=settings.AUTH_COOKIE_NAME, auto_error=False)

class AuthService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.redis = RedisService()

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """Verify a password against its hash"""
        return pwd_context.verify(plain_password, hashed_password)

    def get_password_hash(self, password: str) -> str:
        """Hash a password"""
        return pwd_context.hash(password)

    async def create_user(self, user_data: UserCreate, role: str = UserRole.USER) -> User:
        """Create a new user"""
        stmt = select(User).where(User.email == user_data.email)
        if (await self.db.execute(stmt)).scalar_one_or_none():
            raise ConflictError("Email already registered")

        stmt = select(User).where(User.username == user_data.username)
        if (await self.db.execute(stmt)).scalar_one_or_none():
            raise ConflictError("Username already taken")

        user = User(
            username=user_data.username,
            email=user_data.email,
            hashed_password=self.get_password_hash(user_data.password),
            full_name=user_data.full_name,
            bio=user_data.bio,
            role=role,
            is_active=True,
        )

        self.db.add(user)
        await self.db.commit()
        await self.db.refresh(user)

        logger.info(f"Created user {user.id} ({user.username})")
        return user

    async def authenticate_user(self, username: str, password: str) -> Optional[User]:
        """Authenticate a user by username or email"""
        stmt = select(User).where(
            (User.username == username) | (User.email == username)
        )
        result = await self.db.execute(stmt)
        user = result.scalar_one_or_none()

        if not user or not self.verify_password(password, user.hashed_password):
            return None

        if not user.is_active:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Inactive user"
            )

        user.last_active_at = utcnow()
        await self.db.commit()

        return user

    def create_access_token(
        self,
        user: User,
        expires_delta: Optional[timedelta] = None
    ) -> Tuple[str, int]:
        """Create a JWT access token; returns the token and its lifetime in seconds"""
        if expires_delta is None:
            expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

        to_encode = {
            "sub": str(user.id),
            "role": user.role,
            "type": "access",
            "exp": datetime.now(timezone.utc) + expires_delta,
        }
        encoded_jwt = jwt.encode(to_encode, settings.secret_key, algorithm=settings.ALGORITHM)
        return encoded_jwt, int(expires_delta.total_seconds())

    async def verify_token(self, token: str) -> Optional[TokenData]:
        """Verify a JWT token"""
        try:
            # Check if token is blacklisted
            if await self.redis.get(f"blacklist:{token}"):
                return None

            payload = jwt.decode(token, settings.secret_key, algorithms=[settings.ALGORITHM])

            if payload.get("type") != "access":
                return None

            subject = payload.get("sub")
            if subject is None:
                return None

            return TokenData(user_id=int(subject), role=payload.get("role", UserRole.USER))
        except (JWTError, ValueError):
            return None

    async def blacklist_token(self, token: str) -> None:
        """Add token to blacklist until it would have expired anyway"""
        expires_in = settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60
        try:
            claims = jwt.get_unverified_claims(token)
            remaining = int(claims["exp"] - datetime.now(timezone.utc).timestamp())
            expires_in = max(remaining, 1)
        except (JWTError, KeyError, TypeError):
            pass
        await self.redis.setex(f"blacklist:{token}", expires_in, "1")

async def get_current_user(
    token: Optional[str] = Depends(cookie_scheme),
    db: AsyncSession = Depends(get_db)
) -> AuthenticatedUser:
    """Dependency resolving the auth cookie into an AuthenticatedUser"""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
    )

    if not token:
        raise credentials_exception

    auth_service = AuthService(db)
    token_data = await auth_service.verify_token(token)

    if token_data is None:
        raise credentials_exception

    user = await db.get(User, token_data.user_id)

    if user is None:
        raise credentials_exception

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Inactive user"
        )

    # Role comes from the user row, not the token claim
    return AuthenticatedUser(id=user.id, role=user.role, username=user.username)
