import logging
from typing import Optional

from fastapi import Depends, Query

from ..application.ports.config_repo import ConfigDto
from ..application.services.config_service import ConfigService, mask_token, normalize_slug
from ..dependencies import get_config_service, require_user
from ..exceptions import create_success_response
from ..schemas import ConfigResponse, SaveConfigRequest, SlugAvailabilityResponse

logger = logging.getLogger(__name__)


def _config_response(config: Optional[ConfigDto]) -> ConfigResponse:
    if config is None:
        return ConfigResponse()
    # The stored GitHub token is never sent back in full
    return ConfigResponse(
        has_github_token=bool(config.github_token),
        github_token_masked=mask_token(config.github_token),
        github_repo=config.github_repo,
        github_branch=config.github_branch,
        github_path=config.github_path,
        gallery_slug=config.gallery_slug,
        gallery_enabled=config.gallery_enabled,
        gallery_title=config.gallery_title,
        gallery_description=config.gallery_description,
        updated_at=config.updated_at,
    )


def get_config(current_user: str = Depends(require_user), config_service: ConfigService = Depends(get_config_service)):
    return create_success_response(_config_response(config_service.get_config(current_user)))


async def save_config(
    payload: SaveConfigRequest,
    current_user: str = Depends(require_user),
    config_service: ConfigService = Depends(get_config_service),
):
    saved = await config_service.save_config(current_user, payload.model_dump(exclude_unset=True))
    return create_success_response(_config_response(saved))


def check_slug(
    slug: str = Query(..., min_length=1, max_length=50),
    current_user: str = Depends(require_user),
    config_service: ConfigService = Depends(get_config_service),
):
    available = config_service.check_slug_available(slug, current_user)
    return create_success_response(SlugAvailabilityResponse(slug=normalize_slug(slug) or "", available=available))
