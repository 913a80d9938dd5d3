import io
from typing import Dict, List

import pytest
from fastapi.testclient import TestClient
from PIL import Image as PILImage

from pichost.application.ports.repository_provider import Repository
from pichost.core.config import Settings
from pichost.exceptions import ExternalServiceUnavailable, InvalidExternalToken
from pichost.main import create_app

TEST_SECRET = "test-secret-key-that-is-long-enough-for-hs256"
VALID_GITHUB_TOKEN = "ghp_validtoken1234567890"


class FakeRepositoryProvider:
    def __init__(self):
        self.repos: Dict[str, List[Repository]] = {
            VALID_GITHUB_TOKEN: [
                Repository(name="pics", full_name="alice/pics", private=False,
                           default_branch="main", html_url="https://github.com/alice/pics"),
            ]
        }
        self.calls: List[str] = []
        self.unavailable = False

    async def list_repositories(self, token: str) -> List[Repository]:
        self.calls.append(token)
        if self.unavailable:
            raise ExternalServiceUnavailable()
        if token not in self.repos:
            raise InvalidExternalToken()
        return list(self.repos[token])


def make_image_bytes(fmt: str = "PNG", size=(4, 3), color=(200, 30, 30)) -> bytes:
    buf = io.BytesIO()
    PILImage.new("RGB", size, color).save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        DATABASE_URL=f"sqlite:///{tmp_path / 'test.db'}",
        JWT_SECRET_KEY=TEST_SECRET,
        UPLOAD_DIR=str(tmp_path / "uploads"),
        FRONTEND_DIST_DIR=str(tmp_path / "dist"),
        MAX_FILE_SIZE=64 * 1024,
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def github() -> FakeRepositoryProvider:
    return FakeRepositoryProvider()


@pytest.fixture
def app(settings, github):
    return create_app(settings, repository_provider=github)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


def register(client: TestClient, username: str, password: str = "password123") -> str:
    resp = client.post("/api/auth/register", json={"username": username, "password": password})
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]["token"]


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def upload(client: TestClient, token: str, title: str = None, is_public: bool = False,
           content: bytes = None, content_type: str = "image/png", filename: str = "pic.png"):
    data = {"is_public": "true" if is_public else "false"}
    if title is not None:
        data["title"] = title
    files = {"file": (filename, content if content is not None else make_image_bytes(), content_type)}
    return client.post("/api/upload", headers=auth(token), data=data, files=files)


@pytest.fixture
def alice(client) -> str:
    return register(client, "alice")


@pytest.fixture
def bob(client) -> str:
    return register(client, "bob")
