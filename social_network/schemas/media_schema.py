from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime

class MediaResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    file_name: str
    file_path: str
    content_type: Optional[str] = None
    size: int
    created_at: datetime
