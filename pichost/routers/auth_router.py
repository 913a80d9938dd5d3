import logging

from fastapi import Depends, Request

from ..application.ports.user_repo import UserDto
from ..application.services.auth_service import AuthService
from ..dependencies import get_auth_service, require_user
from ..exceptions import create_success_response
from ..schemas import AuthResponse, LoginRequest, MessageResponse, RegisterRequest, UserResponse

logger = logging.getLogger(__name__)


def _user_response(user: UserDto) -> UserResponse:
    return UserResponse(id=user.id, username=user.username, email=user.email, created_at=user.created_at)


def _auth_response(request: Request, user: UserDto, token: str) -> AuthResponse:
    expires_in = request.app.state.token_service.expires_minutes * 60
    return AuthResponse(token=token, expires_in=expires_in, user=_user_response(user))


def register(payload: RegisterRequest, request: Request, auth_service: AuthService = Depends(get_auth_service)):
    user, token = auth_service.register(payload.username, payload.password, payload.email)
    logger.info(f"Registered user {user.id}")
    return create_success_response(_auth_response(request, user, token))


def login(payload: LoginRequest, request: Request, auth_service: AuthService = Depends(get_auth_service)):
    user, token = auth_service.login(payload.username, payload.password)
    return create_success_response(_auth_response(request, user, token))


def me(current_user: str = Depends(require_user), auth_service: AuthService = Depends(get_auth_service)):
    return create_success_response(_user_response(auth_service.me(current_user)))


def delete_account(current_user: str = Depends(require_user), auth_service: AuthService = Depends(get_auth_service)):
    auth_service.delete_account(current_user)
    return create_success_response(MessageResponse(message="Account deleted"))
