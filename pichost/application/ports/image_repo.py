from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol


@dataclass
class ImageRecord:
    id: int
    user_id: str
    storage_key: str
    filename: str
    content_type: str
    file_size: int
    width: Optional[int]
    height: Optional[int]
    title: Optional[str]
    description: Optional[str]
    is_public: bool
    created_at: datetime


class ImageRepository(Protocol):
    def create_for_owner(self, owner_id: str, storage_key: str, filename: str, content_type: str,
                         file_size: int, width: Optional[int], height: Optional[int],
                         title: Optional[str], description: Optional[str], is_public: bool) -> ImageRecord:
        ...

    def list_for_owner(self, owner_id: str) -> List[ImageRecord]:
        ...

    def update_for_owner(self, owner_id: str, image_id: int, changes: Dict[str, Any]) -> Optional[ImageRecord]:
        ...

    def delete_for_owner(self, owner_id: str, image_id: int) -> Optional[ImageRecord]:
        """Delete and return the image, or None if the owner has no such image."""
        ...
