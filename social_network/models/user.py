from sqlalchemy import Column, String, Boolean, Text, DateTime, Index
from social_network.db.base import BaseModel

class UserRole:
    USER = "User"
    ADMIN = "Admin"

class User(BaseModel):
    __tablename__ = "users"

    username = Column(String(50), unique=True, index=True, nullable=False)
    email = Column(String(100), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    full_name = Column(String(100))
    bio = Column(Text)
    status = Column(String(255))
    sex = Column(String(20))
    role = Column(String(20), default=UserRole.USER, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    last_active_at = Column(DateTime)

    # Relationship edges reference users by id only, see Follow and Friendship
    __table_args__ = (
        Index('ix_users_created_at', 'created_at'),
    )
