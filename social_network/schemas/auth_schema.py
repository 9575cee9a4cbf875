from dataclasses import dataclass
from pydantic import BaseModel, Field

from social_network.models.user import UserRole

class LoginRequest(BaseModel):
    """Schema for login request"""
    username: str = Field(..., description="Username or email address")
    password: str = Field(..., min_length=8, max_length=100, description="Password")

class TokenResponse(BaseModel):
    """Schema for token response; the same token is set as an HTTP-only cookie"""
    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_in: int = Field(..., description="Token expiration in seconds")
    user_id: int
    role: str

class TokenData(BaseModel):
    """Schema for token payload data"""
    user_id: int
    role: str = UserRole.USER

@dataclass(frozen=True)
class AuthenticatedUser:
    """The caller's identity, resolved from the auth cookie for one request"""
    id: int
    role: str
    username: str = ""

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
