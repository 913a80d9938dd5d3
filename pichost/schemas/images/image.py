# pichost/schemas/images/image.py
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class ImageResponse(BaseModel):
    id: int
    url: str
    filename: str
    content_type: str
    file_size: int
    width: Optional[int] = None
    height: Optional[int] = None
    title: Optional[str] = None
    description: Optional[str] = None
    is_public: bool
    created_at: datetime


class UpdateImageRequest(BaseModel):
    title: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    is_public: Optional[bool] = None
