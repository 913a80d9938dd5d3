# pichost/db/models/users/config.py
from typing import Optional
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field
from datetime import datetime, timezone


class UserConfig(SQLModel, table=True):
    __tablename__ = "user_configs"
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(foreign_key="users.id", unique=True, ondelete="CASCADE")
    github_token: Optional[str] = Field(max_length=255, default=None)
    github_repo: Optional[str] = Field(max_length=200, default=None)
    github_branch: Optional[str] = Field(max_length=100, default=None)
    github_path: Optional[str] = Field(max_length=255, default=None)
    # NULL for users without a gallery; unique across all users otherwise
    gallery_slug: Optional[str] = Field(max_length=50, default=None, unique=True, index=True)
    gallery_enabled: bool = Field(default=False)
    gallery_title: Optional[str] = Field(max_length=100, default=None)
    gallery_description: Optional[str] = Field(max_length=500, default=None)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), sa_type=DateTime(timezone=True))
