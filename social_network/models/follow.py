from sqlalchemy import Column, Integer, ForeignKey, UniqueConstraint, CheckConstraint, Index
from social_network.db.base import BaseModel

class Follow(BaseModel):
    """Directed edge: ``source`` follows ``target``."""
    __tablename__ = "follows"

    source_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    target_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    __table_args__ = (
        UniqueConstraint('source_id', 'target_id', name='unique_follow'),
        CheckConstraint('source_id <> target_id', name='check_follow_not_self'),
        Index('ix_follows_source_id', 'source_id'),
        Index('ix_follows_target_id', 'target_id'),
        Index('ix_follows_created_at', 'created_at'),
    )
