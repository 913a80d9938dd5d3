from typing import Optional
import logging

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from .....db.models import Image, User, UserConfig
from .....application.ports.user_repo import UserRepository, UserDto, UsernameTakenError

logger = logging.getLogger(__name__)


class SqlUserRepository(UserRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_dto(self, user: User) -> UserDto:
        return UserDto(
            id=user.id,
            username=user.username,
            email=user.email,
            password_hash=user.password_hash,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )

    def get_by_username(self, username: str) -> Optional[UserDto]:
        user = self.session.exec(select(User).where(User.username == username)).first()
        return self._to_dto(user) if user else None

    def get_by_id(self, user_id: str) -> Optional[UserDto]:
        user = self.session.get(User, user_id)
        return self._to_dto(user) if user else None

    def create(self, username: str, password_hash: str, email: Optional[str]) -> UserDto:
        user = User(username=username, password_hash=password_hash, email=email)
        self.session.add(user)
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            raise UsernameTakenError(username)
        self.session.refresh(user)
        return self._to_dto(user)

    def delete_cascade(self, user_id: str) -> None:
        try:
            self.session.execute(delete(Image).where(Image.user_id == user_id))
            self.session.execute(delete(UserConfig).where(UserConfig.user_id == user_id))
            self.session.execute(delete(User).where(User.id == user_id))
            self.session.commit()
        except Exception:
            logger.exception(f"Error deleting user {user_id}")
            self.session.rollback()
            raise
