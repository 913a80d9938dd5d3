from dataclasses import dataclass
from typing import Any, Dict, List, Optional
import logging
import re

from starlette.concurrency import run_in_threadpool

from ..ports.config_repo import ConfigRepository, ConfigDto, SlugTakenError
from ..ports.repository_provider import Repository, RepositoryProvider
from ...exceptions import InvalidConfig, SlugConflict

logger = logging.getLogger(__name__)

SLUG_PATTERN = re.compile(r"^[a-z0-9](?:[a-z0-9-]{1,48})[a-z0-9]$")
# Path segments under /api/gallery/ that must never resolve as a slug
RESERVED_SLUGS = frozenset({"check-slug", "api", "admin", "assets", "uploads"})

EDITABLE_FIELDS = (
    "github_token",
    "github_repo",
    "github_branch",
    "github_path",
    "gallery_slug",
    "gallery_enabled",
    "gallery_title",
    "gallery_description",
)


def normalize_slug(slug: Optional[str]) -> Optional[str]:
    if slug is None:
        return None
    slug = slug.strip().lower()
    return slug or None


def is_valid_slug(slug: str) -> bool:
    return bool(SLUG_PATTERN.match(slug)) and "--" not in slug and slug not in RESERVED_SLUGS


def mask_token(token: Optional[str]) -> Optional[str]:
    if not token:
        return None
    if len(token) <= 8:
        return "*" * len(token)
    return f"{token[:4]}{'*' * 8}{token[-4:]}"


@dataclass
class ConfigService:
    config_repo: ConfigRepository
    repository_provider: RepositoryProvider

    def get_config(self, user_id: str) -> Optional[ConfigDto]:
        return self.config_repo.get_for_owner(user_id)

    def check_slug_available(self, slug: str, user_id: Optional[str] = None) -> bool:
        slug = normalize_slug(slug)
        if not slug or not is_valid_slug(slug):
            return False
        owner = self.config_repo.slug_owner(slug)
        return owner is None or owner == user_id

    async def save_config(self, user_id: str, fields: Dict[str, Any]) -> ConfigDto:
        changes = self._clean_changes(fields)
        existing = await run_in_threadpool(self.config_repo.get_for_owner, user_id)

        slug = changes["gallery_slug"] if "gallery_slug" in changes else (existing.gallery_slug if existing else None)
        enabled = changes["gallery_enabled"] if "gallery_enabled" in changes else (existing.gallery_enabled if existing else False)
        if enabled and not slug:
            raise InvalidConfig("A gallery slug is required to publish the gallery")

        # Verify a new GitHub token before anything is written
        token = changes.get("github_token")
        if token and (existing is None or token != existing.github_token):
            await self.repository_provider.list_repositories(token)

        if changes.get("gallery_slug"):
            owner = await run_in_threadpool(self.config_repo.slug_owner, changes["gallery_slug"])
            if owner is not None and owner != user_id:
                raise SlugConflict()

        try:
            saved = await run_in_threadpool(self.config_repo.upsert_for_owner, user_id, changes)
        except SlugTakenError:
            logger.info(f"Slug claim lost to a concurrent writer for user {user_id}")
            raise SlugConflict()
        logger.info(f"Config saved for user {user_id} (fields: {sorted(changes)})")
        return saved

    async def verify_token(self, token: str) -> List[Repository]:
        return await self.repository_provider.list_repositories(token)

    async def list_repositories(self, user_id: str) -> List[Repository]:
        config = await run_in_threadpool(self.config_repo.get_for_owner, user_id)
        if not config or not config.github_token:
            raise InvalidConfig("GitHub token is not configured")
        return await self.repository_provider.list_repositories(config.github_token)

    def _clean_changes(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        changes: Dict[str, Any] = {}
        for name, value in fields.items():
            if name not in EDITABLE_FIELDS:
                continue
            if isinstance(value, str):
                value = value.strip() or None
            changes[name] = value

        if "gallery_enabled" in changes:
            changes["gallery_enabled"] = bool(changes["gallery_enabled"])
        if "gallery_slug" in changes:
            slug = normalize_slug(changes["gallery_slug"])
            if slug is not None and not is_valid_slug(slug):
                raise InvalidConfig(
                    "Gallery slug must be 3-50 characters of lowercase letters, digits and single hyphens"
                )
            changes["gallery_slug"] = slug
        return changes
