import asyncio
import threading

import pytest
from sqlmodel import Session

from conftest import TEST_SECRET, FakeRepositoryProvider
from pichost.application.ports.config_repo import SlugTakenError
from pichost.application.services.config_service import ConfigService
from pichost.core.config import Settings
from pichost.database import build_engine, create_db_and_tables
from pichost.db.models import Image, User, UserConfig
from pichost.exceptions import SlugConflict
from pichost.infrastructure.persistence.sqlalchemy.repositories.config_repository_sql import SqlConfigRepository
from pichost.infrastructure.persistence.sqlalchemy.repositories.gallery_repository_sql import SqlGalleryRepository
from pichost.infrastructure.persistence.sqlalchemy.repositories.image_repository_sql import SqlImageRepository
from pichost.infrastructure.persistence.sqlalchemy.repositories.user_repository_sql import SqlUserRepository


@pytest.fixture
def engine(tmp_path):
    settings = Settings(DATABASE_URL=f"sqlite:///{tmp_path / 'repo.db'}", JWT_SECRET_KEY=TEST_SECRET)
    engine = build_engine(settings)
    create_db_and_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def users(engine):
    with Session(engine) as session:
        repo = SqlUserRepository(session)
        return repo.create("alice", "x", None).id, repo.create("bob", "x", None).id


def add_image(session, owner, key, public):
    return SqlImageRepository(session).create_for_owner(
        owner, storage_key=key, filename=key, content_type="image/png", file_size=1,
        width=1, height=1, title=key, description=None, is_public=public,
    )


def test_image_repository_is_owner_scoped(engine, users):
    alice, bob = users
    with Session(engine) as session:
        mine = add_image(session, alice, "a.png", False)
        theirs = add_image(session, bob, "b.png", False)
        repo = SqlImageRepository(session)

        assert [r.id for r in repo.list_for_owner(alice)] == [mine.id]
        assert repo.delete_for_owner(alice, theirs.id) is None
        assert repo.update_for_owner(alice, theirs.id, {"is_public": True}) is None
        assert [r.id for r in repo.list_for_owner(bob)] == [theirs.id]
        assert repo.list_for_owner(bob)[0].is_public is False

        assert repo.delete_for_owner(alice, mine.id).storage_key == "a.png"
        assert repo.list_for_owner(alice) == []


def test_config_upsert_keeps_one_row_per_user(engine, users):
    alice, _ = users
    with Session(engine) as session:
        repo = SqlConfigRepository(session)
        repo.upsert_for_owner(alice, {"gallery_slug": "first"})
        repo.upsert_for_owner(alice, {"gallery_title": "Title"})
        cfg = repo.get_for_owner(alice)
        assert cfg.gallery_slug == "first"
        assert cfg.gallery_title == "Title"


def test_config_slug_unique_constraint(engine, users):
    alice, bob = users
    with Session(engine) as session:
        repo = SqlConfigRepository(session)
        repo.upsert_for_owner(alice, {"gallery_slug": "taken"})
        with pytest.raises(SlugTakenError):
            repo.upsert_for_owner(bob, {"gallery_slug": "taken"})
        assert repo.get_for_owner(bob) is None
        assert repo.slug_owner("taken") == alice


def test_gallery_repository_filters_visibility(engine, users):
    alice, bob = users
    with Session(engine) as session:
        first = add_image(session, alice, "1.png", True)
        add_image(session, alice, "2.png", False)
        add_image(session, bob, "3.png", True)
        last = add_image(session, alice, "4.png", True)
        configs = SqlConfigRepository(session)
        configs.upsert_for_owner(alice, {"gallery_slug": "alice", "gallery_enabled": True})
        configs.upsert_for_owner(bob, {"gallery_slug": "bob", "gallery_enabled": False})

        galleries = SqlGalleryRepository(session)
        assert galleries.find_published("bob") is None
        gallery = galleries.find_published("alice")
        assert gallery.owner_username == "alice"
        assert [r.id for r in galleries.list_published_images(gallery)] == [first.id, last.id]


def test_user_delete_cascades(engine, users):
    alice, bob = users
    with Session(engine) as session:
        add_image(session, alice, "a.png", True)
        SqlConfigRepository(session).upsert_for_owner(alice, {"gallery_slug": "gone"})
        SqlUserRepository(session).delete_cascade(alice)

        assert SqlUserRepository(session).get_by_id(alice) is None
        assert SqlImageRepository(session).list_for_owner(alice) == []
        assert SqlConfigRepository(session).slug_owner("gone") is None
        assert SqlUserRepository(session).get_by_id(bob) is not None


def test_concurrent_slug_claims_have_exactly_one_winner(engine, users):
    barrier = threading.Barrier(len(users))
    results = {}

    def claim(user_id):
        with Session(engine) as session:
            svc = ConfigService(SqlConfigRepository(session), FakeRepositoryProvider())
            barrier.wait()
            try:
                asyncio.run(svc.save_config(user_id, {"gallery_slug": "contested", "gallery_enabled": True}))
                results[user_id] = "saved"
            except SlugConflict:
                results[user_id] = "conflict"

    threads = [threading.Thread(target=claim, args=(uid,)) for uid in users]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)

    assert sorted(results.values()) == ["conflict", "saved"]
    with Session(engine) as session:
        owner = SqlConfigRepository(session).slug_owner("contested")
    assert results[owner] == "saved"


@pytest.mark.parametrize("model,column", [
    (User, "created_at"),
    (User, "updated_at"),
    (UserConfig, "created_at"),
    (UserConfig, "updated_at"),
    (Image, "created_at"),
])
def test_timestamp_columns_are_timezone_aware(model, column):
    assert model.__table__.c[column].type.timezone is True
    assert getattr(model(**_required_fields(model)), column).tzinfo is not None


def _required_fields(model):
    if model is User:
        return {"username": "tz", "password_hash": "x"}
    if model is UserConfig:
        return {"user_id": "u"}
    return {"user_id": "u", "storage_key": "k", "filename": "f", "content_type": "image/png", "file_size": 1}


def test_writes_stamp_timestamps(engine, users):
    alice, _ = users
    with Session(engine) as session:
        assert SqlUserRepository(session).get_by_id(alice).created_at is not None
        saved = SqlConfigRepository(session).upsert_for_owner(alice, {"gallery_title": "Trips"})
        assert saved.updated_at is not None
        assert add_image(session, alice, "tz.png", True).created_at is not None
