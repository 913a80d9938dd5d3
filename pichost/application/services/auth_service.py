from dataclasses import dataclass
from typing import Optional, Tuple
import logging

from passlib.context import CryptContext

from ..ports.audit_logger import AuditLogger
from ..ports.image_repo import ImageRepository
from ..ports.storage_repo import StorageRepository
from ..ports.user_repo import UserRepository, UserDto, UsernameTakenError
from .token_service import TokenService
from ...exceptions import AuthInvalid, InvalidCredentials, UserAlreadyExists

logger = logging.getLogger(__name__)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Verified against when the username is unknown so both failure paths cost a hash check
_DUMMY_HASH = pwd_context.hash("pichost-dummy-password")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return pwd_context.verify(password, password_hash)
    except ValueError:
        return False


@dataclass
class AuthService:
    user_repo: UserRepository
    token_service: TokenService
    audit_logger: AuditLogger
    image_repo: Optional[ImageRepository] = None
    storage_repo: Optional[StorageRepository] = None

    def register(self, username: str, password: str, email: Optional[str] = None) -> Tuple[UserDto, str]:
        username = username.strip().lower()
        if self.user_repo.get_by_username(username):
            self.audit_logger.log("register", username, success=False, details={"reason": "username_taken"})
            raise UserAlreadyExists()
        try:
            user = self.user_repo.create(username, hash_password(password), email)
        except UsernameTakenError:
            self.audit_logger.log("register", username, success=False, details={"reason": "username_taken"})
            raise UserAlreadyExists()
        self.audit_logger.log("register", username, user_id=user.id)
        return user, self.token_service.issue(user.id)

    def login(self, username: str, password: str) -> Tuple[UserDto, str]:
        username = username.strip().lower()
        user = self.user_repo.get_by_username(username)
        if not user:
            verify_password(password, _DUMMY_HASH)
            self.audit_logger.log("login", username, success=False, details={"reason": "unknown_user"})
            raise InvalidCredentials()
        if not verify_password(password, user.password_hash):
            self.audit_logger.log("login", username, user_id=user.id, success=False, details={"reason": "bad_password"})
            raise InvalidCredentials()
        self.audit_logger.log("login", username, user_id=user.id)
        return user, self.token_service.issue(user.id)

    def authenticate(self, token: str) -> str:
        """Verify ``token`` and check that its subject still exists."""
        user_id = self.token_service.verify(token)
        if not self.user_repo.get_by_id(user_id):
            logger.warning("Valid token for unknown user")
            raise AuthInvalid()
        return user_id

    def me(self, user_id: str) -> UserDto:
        user = self.user_repo.get_by_id(user_id)
        if not user:
            raise AuthInvalid()
        return user

    def delete_account(self, user_id: str) -> None:
        user = self.me(user_id)
        storage_keys = []
        if self.image_repo is not None:
            storage_keys = [img.storage_key for img in self.image_repo.list_for_owner(user_id)]
        self.user_repo.delete_cascade(user_id)
        if self.storage_repo is not None:
            for key in storage_keys:
                self.storage_repo.delete(key)
        self.audit_logger.log("delete_account", user.username, user_id=user_id, details={"images": len(storage_keys)})
