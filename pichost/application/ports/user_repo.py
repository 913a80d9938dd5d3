from typing import Protocol, Optional
from datetime import datetime


class UserDto:
    def __init__(self, id: str, username: str, email: Optional[str], password_hash: str,
                 created_at: datetime, updated_at: datetime):
        self.id = id
        self.username = username
        self.email = email
        self.password_hash = password_hash
        self.created_at = created_at
        self.updated_at = updated_at


class UsernameTakenError(Exception):
    pass


class UserRepository(Protocol):
    def get_by_username(self, username: str) -> Optional[UserDto]:
        ...

    def get_by_id(self, user_id: str) -> Optional[UserDto]:
        ...

    def create(self, username: str, password_hash: str, email: Optional[str]) -> UserDto:
        """Raises UsernameTakenError when the username already exists."""
        ...

    def delete_cascade(self, user_id: str) -> None:
        """Delete the user together with their config and image records."""
        ...
