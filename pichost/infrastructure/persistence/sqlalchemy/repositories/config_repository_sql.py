from datetime import datetime, timezone
from typing import Any, Dict, Optional
import logging

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from .....db.models import UserConfig
from .....application.ports.config_repo import ConfigRepository, ConfigDto, SlugTakenError

logger = logging.getLogger(__name__)


class SqlConfigRepository(ConfigRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_dto(self, row: UserConfig) -> ConfigDto:
        return ConfigDto(
            user_id=row.user_id,
            github_token=row.github_token,
            github_repo=row.github_repo,
            github_branch=row.github_branch,
            github_path=row.github_path,
            gallery_slug=row.gallery_slug,
            gallery_enabled=row.gallery_enabled,
            gallery_title=row.gallery_title,
            gallery_description=row.gallery_description,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def get_for_owner(self, owner_id: str) -> Optional[ConfigDto]:
        row = self.session.exec(select(UserConfig).where(UserConfig.user_id == owner_id)).first()
        return self._to_dto(row) if row else None

    def slug_owner(self, slug: str) -> Optional[str]:
        return self.session.exec(select(UserConfig.user_id).where(UserConfig.gallery_slug == slug)).first()

    def _write(self, owner_id: str, changes: Dict[str, Any]) -> ConfigDto:
        row = self.session.exec(
            select(UserConfig).where(UserConfig.user_id == owner_id).with_for_update()
        ).first()
        if row is None:
            row = UserConfig(user_id=owner_id)
        for name, value in changes.items():
            setattr(row, name, value)
        row.updated_at = datetime.now(timezone.utc)
        self.session.add(row)
        self.session.commit()
        self.session.refresh(row)
        return self._to_dto(row)

    def _raise_if_slug_taken(self, owner_id: str, changes: Dict[str, Any]) -> None:
        slug = changes.get("gallery_slug")
        if slug:
            holder = self.slug_owner(slug)
            if holder is not None and holder != owner_id:
                raise SlugTakenError(slug)

    def upsert_for_owner(self, owner_id: str, changes: Dict[str, Any]) -> ConfigDto:
        # The unique constraint on gallery_slug decides concurrent claims
        try:
            return self._write(owner_id, changes)
        except IntegrityError:
            self.session.rollback()
            self._raise_if_slug_taken(owner_id, changes)

        # A concurrent first save by the same owner won the insert; update that row
        logger.info(f"Retrying config upsert for user {owner_id}")
        try:
            return self._write(owner_id, changes)
        except IntegrityError:
            self.session.rollback()
            self._raise_if_slug_taken(owner_id, changes)
            raise
