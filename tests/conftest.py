"""Pytest fixtures for Tubely tests.

The container is booted once per session against the ``test`` configuration.
Each test gets its own in-memory SQLite database, staging directory and local
object store, and the external media tools are replaced by doubles so that
neither ffprobe nor ffmpeg needs to be installed.

Usage:
    def test_get_video(client: TestClient, video_factory, auth_headers):
        video = video_factory(owner)
        response = client.get(f"/api/videos/{video.video_id}", headers=auth_headers(owner))
        assert response.status_code == 200
"""

from __future__ import annotations

import os
import typing as t
from pathlib import Path

import bcrypt
import httpx
import pydantic as p
import pytest
import sqlalchemy
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

import tubely
from tubely.auth.jwt import JWTManager
from tubely.core import TubelyContainer
from tubely.errors import ProbeFailed, RemuxFailed
from tubely.media.probe import classify_aspect_ratio
from tubely.model import DeploymentEnvironment, MediaProbe, User, UserID, Video, VideoID
from tubely.storage.object import LocalObjectStore, ObjectStoreError, UploadResult
from tubely.storage.table import base, users, videos

TEST_JWT_SECRET = "test-jwt-secret-for-integration-tests"


class FakeProber(object):
    """Reports fixed dimensions, or fails, and records what it was asked to probe."""

    def __init__(self, width: int = 1280, height: int = 720, fail: bool = False):
        self.width = width
        self.height = height
        self.fail = fail
        self.calls: list[Path] = []

    async def probe(self, path: Path) -> MediaProbe:
        self.calls.append(path)
        assert path.exists(), "probed file must still be staged"
        if self.fail:
            raise ProbeFailed("no media streams found")
        return MediaProbe(
            width=self.width, height=self.height, aspect_ratio=classify_aspect_ratio(self.width, self.height)
        )


class FakeRemuxer(object):
    """Copies the input to ``<input>.processing``, as ffmpeg would, or fails."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls: list[Path] = []
        self.outputs: list[Path] = []

    async def remux(self, path: Path) -> Path:
        self.calls.append(path)
        if self.fail:
            raise RemuxFailed()
        output = path.with_name(path.name + ".processing")
        output.write_bytes(b"faststart:" + path.read_bytes())
        self.outputs.append(output)
        return output


class FailingObjectStore(LocalObjectStore):
    """A local store whose writes always fail."""

    async def upload_stream(self, key: str, file: t.BinaryIO, content_type: str = "application/octet-stream"):
        raise ObjectStoreError(key, "simulated outage")

    async def upload(self, key: str, data: bytes, content_type: str = "application/octet-stream") -> UploadResult:
        raise ObjectStoreError(key, "simulated outage")


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Run ``@pytest.mark.anyio`` tests on asyncio, the loop the app is built on."""
    return "asyncio"


@pytest.fixture(scope="session")
def container() -> t.Generator[TubelyContainer]:
    """Boot the DI container for the test session."""
    ct = TubelyContainer()
    root = Path(os.path.dirname(tubely.__file__)).parent

    TubelyContainer.boot(
        ct,
        debug=False,
        env=DeploymentEnvironment.Test,
        config_root=p.FileUrl(f"file://{root}/config"),
        override=(),
    )
    # the test environment has no vault
    ct.auth().jwt_manager.override(JWTManager(p.Secret(TEST_JWT_SECRET), access_token_expire_minutes=30))

    yield ct

    ct.auth().jwt_manager.reset_override()
    ct.shutdown_resources()


@pytest.fixture(scope="session")
def app_store(tmp_path_factory: pytest.TempPathFactory) -> LocalObjectStore:
    return LocalObjectStore(tmp_path_factory.mktemp("assets"), url_prefix="/assets")


@pytest.fixture(scope="session")
def app(container: TubelyContainer, app_store: LocalObjectStore) -> FastAPI:
    from tubely.core.config.web import TubelyWebSettings
    from tubely.web.tubely.main import _create_app  # pyright: ignore[reportPrivateUsage]

    return _create_app(config=TubelyWebSettings(**container.config.web.tubely()), object_store=app_store)


@pytest.fixture
def db_session() -> t.Generator[Session]:
    """A session on a fresh in-memory database holding the full schema.

    ``autobegin=False`` matches production, so code under test must open its
    own ``session.begin()`` blocks.
    """
    engine = sqlalchemy.create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    base.metadata.create_all(engine)
    session = Session(bind=engine, autobegin=False, expire_on_commit=False)

    yield session

    session.close()
    engine.dispose()


@pytest.fixture
def staging_path(tmp_path: Path) -> Path:
    path = tmp_path / "staging"
    path.mkdir()
    return path


@pytest.fixture
def object_store(tmp_path: Path) -> LocalObjectStore:
    return LocalObjectStore(tmp_path / "objects", url_prefix="/assets")


@pytest.fixture
def prober() -> FakeProber:
    return FakeProber()


@pytest.fixture
def remuxer() -> FakeRemuxer:
    return FakeRemuxer()


@pytest.fixture
def wired(
    container: TubelyContainer,
    db_session: Session,
    staging_path: Path,
    object_store: LocalObjectStore,
    prober: FakeProber,
    remuxer: FakeRemuxer,
) -> t.Generator[TubelyContainer]:
    """Route requests to this test's database, staging area, store and tool doubles."""
    container.storage().persistent().session.override(db_session)
    container.storage().object.override(object_store)
    container.media().staging_path.override(staging_path)
    container.media().prober.override(prober)
    container.media().remuxer.override(remuxer)

    yield container

    container.media().remuxer.reset_override()
    container.media().prober.reset_override()
    container.media().staging_path.reset_override()
    container.storage().object.reset_override()
    container.storage().persistent().session.reset_override()


@pytest.fixture
def client(app: FastAPI, wired: TubelyContainer) -> t.Generator[TestClient]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def stream_client(app: FastAPI, wired: TubelyContainer) -> httpx.AsyncClient:
    """An async client that hands the request body to the app chunk by chunk.

    Unlike ``TestClient``, which reads a streamed body in full before the app
    sees any of it, this shows how much of a body the app actually consumed.
    """
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://testserver")


@pytest.fixture
def user_factory(db_session: Session) -> t.Callable[..., User]:
    """Factory fixture for creating users with sensible defaults."""

    def create_user(email: str = "owner@example.com", password: str = "password123") -> User:
        from sqlalchemy import select

        user_id = UserID()
        password_hash = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")

        with db_session.begin():
            db_session.add(users(user_id=user_id, email=email, password_hash=password_hash))
            db_session.flush()

            stmt = select(users.__table__).where(users.user_id == user_id)
            row = db_session.execute(stmt).mappings().one()
            return User(**row)

    return create_user


@pytest.fixture
def video_factory(db_session: Session) -> t.Callable[..., Video]:
    """Factory fixture for creating draft videos owned by a given user."""

    def create_video(owner: User, title: str = "Boots on the ground", description: str = "") -> Video:
        from sqlalchemy import select

        video_id = VideoID()
        with db_session.begin():
            db_session.add(videos(video_id=video_id, user_id=owner.user_id, title=title, description=description))
            db_session.flush()

            stmt = select(videos.__table__).where(videos.video_id == video_id)
            row = db_session.execute(stmt).mappings().one()
            return Video(**row)

    return create_video


@pytest.fixture
def owner(user_factory: t.Callable[..., User]) -> User:
    return user_factory(email="owner@example.com")


@pytest.fixture
def stranger(user_factory: t.Callable[..., User]) -> User:
    return user_factory(email="stranger@example.com")


@pytest.fixture
def auth_headers(container: TubelyContainer) -> t.Callable[[User], dict[str, str]]:
    """Build an ``Authorization`` header carrying a fresh token for a user."""
    manager: JWTManager = container.auth().jwt_manager()

    def headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {manager.create_access_token(user.user_id)}"}

    return headers
