import json
import logging
from datetime import datetime, timezone
from typing import Optional
import uuid

import pytest

from pichost.application.ports.image_repo import ImageRecord
from pichost.application.ports.user_repo import UserRepository, UserDto, UsernameTakenError
from pichost.application.services.auth_service import AuthService, hash_password
from pichost.application.services.token_service import TokenService
from pichost.exceptions import AuthInvalid, InvalidCredentials, UserAlreadyExists
from pichost.infrastructure.audit.std_logger import StdAuditLogger


class FakeUserRepo(UserRepository):
    def __init__(self):
        self.users = {}
        self.deleted = []

    def get_by_username(self, username: str) -> Optional[UserDto]:
        return next((u for u in self.users.values() if u.username == username), None)

    def get_by_id(self, user_id: str) -> Optional[UserDto]:
        return self.users.get(user_id)

    def create(self, username: str, password_hash: str, email: Optional[str]) -> UserDto:
        if self.get_by_username(username):
            raise UsernameTakenError(username)
        now = datetime.now(timezone.utc)
        user = UserDto(str(uuid.uuid4()), username, email, password_hash, now, now)
        self.users[user.id] = user
        return user

    def delete_cascade(self, user_id: str) -> None:
        self.deleted.append(user_id)
        self.users.pop(user_id, None)


class FakeAudit:
    def __init__(self):
        self.entries = []

    def log(self, action, username, user_id=None, success=True, details=None):
        self.entries.append((action, username, success))


class FakeImages:
    def __init__(self, records):
        self.records = records

    def list_for_owner(self, owner_id: str):
        return [r for r in self.records if r.user_id == owner_id]


class FakeStorage:
    def __init__(self):
        self.deleted = []

    def delete(self, key: str) -> bool:
        self.deleted.append(key)
        return True


def make_service(**kwargs) -> AuthService:
    return AuthService(
        user_repo=kwargs.get("user_repo") or FakeUserRepo(),
        token_service=TokenService(secret_key="auth-service-test-secret-0123456789"),
        audit_logger=kwargs.get("audit") or FakeAudit(),
        image_repo=kwargs.get("image_repo"),
        storage_repo=kwargs.get("storage_repo"),
    )


def test_register_issues_token_for_new_user():
    svc = make_service()
    user, token = svc.register("Alice", "password123")
    assert user.username == "alice"
    assert svc.token_service.verify(token) == user.id
    assert user.password_hash != "password123"


def test_register_rejects_taken_username():
    audit = FakeAudit()
    svc = make_service(audit=audit)
    svc.register("alice", "password123")
    with pytest.raises(UserAlreadyExists):
        svc.register("ALICE", "password456")
    assert ("register", "alice", False) in audit.entries


def test_register_race_on_unique_constraint_maps_to_user_exists():
    class RacingRepo(FakeUserRepo):
        def create(self, username, password_hash, email):
            raise UsernameTakenError(username)

    svc = make_service(user_repo=RacingRepo())
    with pytest.raises(UserAlreadyExists):
        svc.register("alice", "password123")


def test_login_with_correct_password():
    svc = make_service()
    created, _ = svc.register("alice", "password123")
    user, token = svc.login("alice", "password123")
    assert user.id == created.id
    assert svc.token_service.verify(token) == created.id


def test_login_failures_are_indistinguishable():
    svc = make_service()
    svc.register("alice", "password123")
    with pytest.raises(InvalidCredentials) as wrong_password:
        svc.login("alice", "wrong-password")
    with pytest.raises(InvalidCredentials) as unknown_user:
        svc.login("nobody", "password123")
    assert wrong_password.value.detail == unknown_user.value.detail
    assert wrong_password.value.status_code == unknown_user.value.status_code == 401


def test_authenticate_rejects_token_for_missing_user():
    svc = make_service()
    token = svc.token_service.issue("ghost-user")
    with pytest.raises(AuthInvalid):
        svc.authenticate(token)


def test_delete_account_removes_stored_content():
    repo = FakeUserRepo()
    svc = make_service(user_repo=repo)
    user, _ = svc.register("alice", "password123")
    now = datetime.now(timezone.utc)
    records = [
        ImageRecord(1, user.id, f"{user.id}/a.png", "a.png", "image/png", 10, 1, 1, None, None, True, now),
        ImageRecord(2, "someone-else", "other/b.png", "b.png", "image/png", 10, 1, 1, None, None, True, now),
    ]
    storage = FakeStorage()
    svc.image_repo = FakeImages(records)
    svc.storage_repo = storage

    svc.delete_account(user.id)

    assert repo.deleted == [user.id]
    assert storage.deleted == [f"{user.id}/a.png"]


def test_hash_password_is_salted():
    assert hash_password("password123") != hash_password("password123")


def test_audit_lines_never_contain_the_username(caplog):
    audit = StdAuditLogger()
    with caplog.at_level(logging.INFO, logger="pichost.audit"):
        audit.log("login", "Alice", success=False, details={"reason": "bad_password"})
        audit.log("login", "alice", user_id="u1")

    denied, ok = caplog.records
    assert denied.levelno == logging.WARNING
    assert denied.getMessage().startswith("AUDIT: ")
    assert "alice" not in denied.getMessage().lower()
    first = json.loads(denied.getMessage().split(" ", 1)[1])
    second = json.loads(ok.getMessage().split(" ", 1)[1])
    assert first["outcome"] == "denied"
    assert first["details"] == {"reason": "bad_password"}
    assert second["outcome"] == "ok"
    assert first["actor"] == second["actor"] == StdAuditLogger.actor_digest("alice")
