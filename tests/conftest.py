# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# Settings are read at import time, so the test environment is set up before
# anything from songshare is imported. Each test gets its own SQLite file and
# its own blob store directory.
# =============================================================================

import io
import os
import tempfile

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("REDIS_URL", "")
os.environ.setdefault("SERVE_STATIC", "false")
os.environ.setdefault("STORAGE_ROOT", tempfile.mkdtemp(prefix="songshare-test-"))
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi import UploadFile
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from songshare.api.dependencies import get_blob_store
from songshare.core.security import create_access_token
from songshare.core.storage import AssetCategory, LocalBlobStore
from songshare.db.base import Base, load_models
from songshare.db.models.song import Song
from songshare.db.session import build_engine, get_db, get_session_factory
from songshare.main import app
from songshare.schemas.user import UserCreate
from songshare.services.user_service import user_service


def make_upload(filename: str, content: bytes = b"data") -> UploadFile:
    """In-memory stand-in for a multipart file"""
    return UploadFile(file=io.BytesIO(content), filename=filename)


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'test.db'}")
    load_models()
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def store(tmp_path):
    store = LocalBlobStore(str(tmp_path / "storage"))
    store.ensure_namespaces()
    return store


@pytest.fixture
def client(session_factory, store):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_blob_store] = lambda: store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    """Factory creating live users with password 'secret'"""

    def _make_user(username: str = "alice", name: str = None, role: str = "user"):
        return user_service.create_user(
            db, UserCreate(username=username, password="secret", name=name or username.title()), role=role
        )

    return _make_user


@pytest.fixture
def make_song(db, store):
    """Factory creating a song whose track blob really exists"""

    def _make_song(uploader, title: str = "Song", **fields):
        track = store.put(AssetCategory.TRACKS, io.BytesIO(b"audio"), f"{title}.mp3")
        song = Song(title=title, track_url=track, uploader_id=uploader.id, **fields)
        db.add(song)
        db.commit()
        db.refresh(song)
        return song

    return _make_song


def auth_headers(user) -> dict:
    token = create_access_token({"sub": str(user.id), "username": user.username, "role": user.role})
    return {"Authorization": f"Bearer {token}"}
