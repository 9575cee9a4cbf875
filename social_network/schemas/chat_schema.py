from pydantic import BaseModel, ConfigDict, Field
from typing import Literal, Optional
from datetime import datetime

class ChatRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)

class ChatResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    created_at: datetime
    updated_at: Optional[datetime] = None

class ChatMemberRequest(BaseModel):
    user_id: int

class ChatMemberTypeRequest(BaseModel):
    type: Literal["owner", "admin", "member"]

class ChatMemberResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    chat_id: int
    user_id: int
    type: str
    created_at: datetime
    updated_at: Optional[datetime] = None

class MessageRequest(BaseModel):
    content: str = Field(..., min_length=1, max_length=4000)

class MessageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    chat_id: int
    sender_id: int
    content: str
    created_at: datetime
