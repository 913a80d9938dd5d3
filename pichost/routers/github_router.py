from typing import List

from fastapi import Depends

from ..application.ports.repository_provider import Repository
from ..application.services.config_service import ConfigService
from ..dependencies import get_config_service, require_user
from ..exceptions import create_success_response
from ..schemas import RepositoryResponse, VerifyTokenRequest


def _repositories(repos: List[Repository]) -> dict:
    items = [
        RepositoryResponse(
            name=r.name,
            full_name=r.full_name,
            private=r.private,
            default_branch=r.default_branch,
            html_url=r.html_url,
        )
        for r in repos
    ]
    return {"repositories": items, "total": len(items)}


async def list_repositories(current_user: str = Depends(require_user), config_service: ConfigService = Depends(get_config_service)):
    repos = await config_service.list_repositories(current_user)
    return create_success_response(_repositories(repos))


async def verify_token(payload: VerifyTokenRequest, config_service: ConfigService = Depends(get_config_service)):
    repos = await config_service.verify_token(payload.token.strip())
    return create_success_response({"valid": True, **_repositories(repos)})
