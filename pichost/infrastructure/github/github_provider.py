import asyncio
import logging
from typing import Any, Dict, List, Optional, Tuple

import aiohttp

from ...application.ports.repository_provider import Repository, RepositoryProvider
from ...exceptions import ExternalServiceUnavailable, InvalidExternalToken

logger = logging.getLogger(__name__)


class GitHubRepositoryProvider(RepositoryProvider):
    """Lists the repositories a GitHub token can see.

    A 401 (or a 403 that is not rate limiting) means the token itself is bad
    and is never retried. Network errors, 5xx and rate limiting are retried
    with exponential backoff and end in ExternalServiceUnavailable.
    """

    def __init__(self, api_url: str = "https://api.github.com", timeout: float = 10.0,
                 max_retries: int = 2, backoff: float = 0.5, max_pages: int = 5) -> None:
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff = backoff
        self.max_pages = max_pages

    async def list_repositories(self, token: str) -> List[Repository]:
        repos: List[Repository] = []
        url: Optional[str] = f"{self.api_url}/user/repos"
        params: Optional[Dict[str, Any]] = {"per_page": 100, "sort": "updated"}
        pages = 0
        while url and pages < self.max_pages:
            items, url = await self._get_page(token, url, params)
            params = None  # the next link already carries the query
            pages += 1
            repos.extend(self._to_repository(item) for item in items)
        return repos

    def _headers(self, token: str) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": "pichost",
        }

    @staticmethod
    def _is_rate_limited(response: aiohttp.ClientResponse) -> bool:
        if response.status == 429:
            return True
        return response.headers.get("X-RateLimit-Remaining") == "0" or "Retry-After" in response.headers

    async def _get_page(self, token: str, url: str, params: Optional[Dict[str, Any]]) -> Tuple[List[Dict[str, Any]], Optional[str]]:
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        for attempt in range(self.max_retries + 1):
            try:
                async with aiohttp.ClientSession(timeout=timeout) as session:
                    async with session.get(url, params=params, headers=self._headers(token)) as response:
                        if response.status == 200:
                            try:
                                payload = await response.json()
                            except ValueError:
                                logger.error("GitHub returned a malformed JSON body for /user/repos")
                                raise ExternalServiceUnavailable()
                            if not isinstance(payload, list):
                                logger.error("Unexpected GitHub payload for /user/repos")
                                raise ExternalServiceUnavailable()
                            next_link = response.links.get("next")
                            return payload, (str(next_link["url"]) if next_link else None)
                        if response.status == 401:
                            raise InvalidExternalToken()
                        if response.status == 403 and not self._is_rate_limited(response):
                            raise InvalidExternalToken("GitHub token does not grant access to repositories")
                        if response.status < 500 and response.status not in (403, 429):
                            logger.error(f"GitHub returned unexpected status {response.status}")
                            raise ExternalServiceUnavailable()
                        logger.warning(f"GitHub transient failure: HTTP {response.status} (attempt {attempt + 1})")
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                logger.warning(f"GitHub request failed: {e.__class__.__name__} (attempt {attempt + 1})")

            if attempt < self.max_retries:
                await asyncio.sleep(self.backoff * (2 ** attempt))

        raise ExternalServiceUnavailable()

    @staticmethod
    def _to_repository(item: Dict[str, Any]) -> Repository:
        return Repository(
            name=item.get("name", ""),
            full_name=item.get("full_name", ""),
            private=bool(item.get("private", False)),
            default_branch=item.get("default_branch"),
            html_url=item.get("html_url"),
        )
