from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional, Protocol


@dataclass
class ConfigDto:
    user_id: str
    github_token: Optional[str]
    github_repo: Optional[str]
    github_branch: Optional[str]
    github_path: Optional[str]
    gallery_slug: Optional[str]
    gallery_enabled: bool
    gallery_title: Optional[str]
    gallery_description: Optional[str]
    created_at: datetime
    updated_at: datetime


class SlugTakenError(Exception):
    def __init__(self, slug: str):
        super().__init__(f"slug {slug!r} is held by another user")
        self.slug = slug


class ConfigRepository(Protocol):
    def get_for_owner(self, owner_id: str) -> Optional[ConfigDto]:
        ...

    def upsert_for_owner(self, owner_id: str, changes: Dict[str, Any]) -> ConfigDto:
        """Create or update the owner's config in one transaction.

        Raises SlugTakenError if ``changes`` claims a slug held by another user.
        """
        ...

    def slug_owner(self, slug: str) -> Optional[str]:
        ...
