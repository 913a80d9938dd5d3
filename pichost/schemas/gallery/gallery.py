# pichost/schemas/gallery/gallery.py
from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime


class GalleryImageResponse(BaseModel):
    id: int
    url: str
    title: Optional[str] = None
    description: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    created_at: datetime


class GalleryResponse(BaseModel):
    slug: str
    title: Optional[str] = None
    description: Optional[str] = None
    owner: str
    images: List[GalleryImageResponse]
