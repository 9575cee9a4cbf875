from typing import Tuple
from sqlalchemy import Column, Integer, ForeignKey, UniqueConstraint, CheckConstraint, Index
from social_network.db.base import BaseModel

class Friendship(BaseModel):
    """Undirected edge stored once, with ``user1_id < user2_id``."""
    __tablename__ = "friendships"

    user1_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    user2_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    __table_args__ = (
        UniqueConstraint('user1_id', 'user2_id', name='unique_friendship'),
        CheckConstraint('user1_id < user2_id', name='check_friendship_order'),
        Index('ix_friendships_user1_id', 'user1_id'),
        Index('ix_friendships_user2_id', 'user2_id'),
    )

    @staticmethod
    def canonical_pair(a: int, b: int) -> Tuple[int, int]:
        return (a, b) if a < b else (b, a)

    def other(self, user_id: int) -> int:
        return self.user2_id if self.user1_id == user_id else self.user1_id
