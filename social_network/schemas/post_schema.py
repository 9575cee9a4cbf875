from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime

class PostCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=5000)

class PostUpdate(BaseModel):
    content: str = Field(..., min_length=1, max_length=5000)

class PostInDB(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    content: str
    like_count: int = 0
    comment_count: int = 0
    created_at: datetime
    updated_at: datetime

class CommentCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=2000)

class CommentInDB(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    post_id: int
    user_id: int
    content: str
    created_at: datetime

class PostLikeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    post_id: int
    user_id: int
    created_at: datetime
