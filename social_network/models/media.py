from sqlalchemy import Column, String, Integer, ForeignKey, Index
from social_network.db.base import BaseModel

class Media(BaseModel):
    __tablename__ = "medias"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    file_name = Column(String(255), nullable=False)
    file_path = Column(String(255), nullable=False)
    content_type = Column(String(100))
    size = Column(Integer, default=0, nullable=False)

    __table_args__ = (
        Index('ix_medias_user_id', 'user_id'),
    )
