from dataclasses import dataclass
from typing import List, Optional, Protocol


@dataclass
class Repository:
    name: str
    full_name: str
    private: bool
    default_branch: Optional[str]
    html_url: Optional[str]


class RepositoryProvider(Protocol):
    async def list_repositories(self, token: str) -> List[Repository]:
        ...
