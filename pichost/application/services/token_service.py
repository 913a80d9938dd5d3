from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional
import logging

import jwt

from ...exceptions import AuthExpired, AuthInvalid

logger = logging.getLogger(__name__)

ACCESS_TOKEN_TYPE = "access"


@dataclass(frozen=True)
class TokenService:
    """Issues and verifies signed session tokens.

    Stateless: a token is a pure function of the signing secret, the user id
    and the issue time. There is no session table, so a token stays valid
    until it expires.
    """

    secret_key: str
    algorithm: str = "HS256"
    expires_minutes: int = 60 * 24

    def issue(self, user_id: str, expires_delta: Optional[timedelta] = None) -> str:
        now = datetime.now(timezone.utc)
        if expires_delta is None:
            expires_delta = timedelta(minutes=self.expires_minutes)
        payload = {
            "sub": user_id,
            "iat": now,
            "exp": now + expires_delta,
            "type": ACCESS_TOKEN_TYPE,
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> str:
        """Return the user id embedded in ``token``."""
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"require": ["exp", "sub"]},
            )
        except jwt.ExpiredSignatureError:
            raise AuthExpired()
        except jwt.InvalidTokenError as e:
            logger.info(f"Rejected token: {e.__class__.__name__}")
            raise AuthInvalid()

        user_id = payload.get("sub")
        if not isinstance(user_id, str) or not user_id:
            raise AuthInvalid("Invalid token: missing user ID")
        if payload.get("type") != ACCESS_TOKEN_TYPE:
            raise AuthInvalid("Invalid token type")
        return user_id
