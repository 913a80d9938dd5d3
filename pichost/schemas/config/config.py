# pichost/schemas/config/config.py
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class SaveConfigRequest(BaseModel):
    """Partial update: only the fields present in the request are changed.

    An empty string clears a text field.
    """

    github_token: Optional[str] = Field(None, max_length=255)
    github_repo: Optional[str] = Field(None, max_length=200)
    github_branch: Optional[str] = Field(None, max_length=100)
    github_path: Optional[str] = Field(None, max_length=255)
    gallery_slug: Optional[str] = Field(None, max_length=50)
    gallery_enabled: Optional[bool] = None
    gallery_title: Optional[str] = Field(None, max_length=100)
    gallery_description: Optional[str] = Field(None, max_length=500)


class ConfigResponse(BaseModel):
    has_github_token: bool = False
    github_token_masked: Optional[str] = None
    github_repo: Optional[str] = None
    github_branch: Optional[str] = None
    github_path: Optional[str] = None
    gallery_slug: Optional[str] = None
    gallery_enabled: bool = False
    gallery_title: Optional[str] = None
    gallery_description: Optional[str] = None
    updated_at: Optional[datetime] = None


class SlugAvailabilityResponse(BaseModel):
    slug: str
    available: bool


class VerifyTokenRequest(BaseModel):
    token: str = Field(..., min_length=1, max_length=255)


class RepositoryResponse(BaseModel):
    name: str
    full_name: str
    private: bool
    default_branch: Optional[str] = None
    html_url: Optional[str] = None
