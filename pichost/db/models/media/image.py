# pichost/db/models/media/image.py
from typing import Optional
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field
from datetime import datetime, timezone


class Image(SQLModel, table=True):
    __tablename__ = "images"
    # Autoincrement id doubles as the creation order
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True, ondelete="CASCADE")
    storage_key: str = Field(max_length=255, unique=True)
    filename: str = Field(max_length=255)
    content_type: str = Field(max_length=100)
    file_size: int
    width: Optional[int] = None
    height: Optional[int] = None
    title: Optional[str] = Field(max_length=200, default=None)
    description: Optional[str] = Field(max_length=1000, default=None)
    is_public: bool = Field(default=False, index=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), sa_type=DateTime(timezone=True))
