"""Service test fixtures — async SQLite store, realtime fakes, FastAPI test client.

Invariants:
    - Every test gets a fresh file-backed SQLite database under tmp_path
    - Store adapters run against a DatabaseSessionManager bound to that database
    - The client fixture wires app.state through build_app_state (same graph as
      the lifespan), so readiness checks hit the test database too

Design Decisions:
    - File SQLite over :memory:: gallery annotation opens concurrent sessions,
      and each pooled :memory: connection would see its own empty database
    - DatabaseSessionManager wraps the test engine directly instead of building
      a second one from a URL
"""

import pytest
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)

from pixelcanvas.config import get_settings
from pixelcanvas.core.registry import ProjectRegistry
from pixelcanvas.db.base import Base
from pixelcanvas.infrastructure.database import DatabaseSessionManager
from pixelcanvas.infrastructure.tokens import TokenVerifier
from pixelcanvas.main import app, build_app_state
from pixelcanvas.services.gallery_service import GalleryService
from pixelcanvas.services.lifecycle_manager import LifecycleManager
from pixelcanvas.services.moderation_store import ModerationStoreAdapter
from pixelcanvas.services.project_store import ProjectStoreAdapter
from pixelcanvas.services.realtime_dispatch import RealtimeDispatcher
from pixelcanvas.services.room_broadcaster import RoomBroadcaster

TEST_SECRET = "test-secret"


class FakeConnection:
    """Records frames sent to it; can be told to fail like a dropped socket."""

    def __init__(self, name: str = "conn", fail: bool = False):
        self.name = name
        self.fail = fail
        self.sent: list[dict] = []

    async def send_json(self, message: dict) -> None:
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(message)

    def of_type(self, message_type: str) -> list[dict]:
        return [m for m in self.sent if m["type"] == message_type]

    def __repr__(self) -> str:
        return f"FakeConnection({self.name})"


@pytest.fixture
async def test_engine(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'pixelcanvas.db'}", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
def db_manager(test_engine):
    return DatabaseSessionManager(test_engine)


@pytest.fixture
def project_store(db_manager):
    return ProjectStoreAdapter(db_manager)


@pytest.fixture
def moderation_store(db_manager):
    return ModerationStoreAdapter(db_manager)


@pytest.fixture
def verifier():
    return TokenVerifier(TEST_SECRET)


@pytest.fixture
def make_token():
    """Sign a bearer token the way the identity service does."""
    def _make(user_id: int, name: str | None = None, secret: str = TEST_SECRET) -> str:
        claims = {"sub": str(user_id)}
        if name is not None:
            claims["name"] = name
        return jwt.encode(claims, secret, algorithm="HS256")
    return _make


@pytest.fixture
def registry():
    return ProjectRegistry()


@pytest.fixture
def lifecycle(project_store, registry):
    return LifecycleManager(project_store, registry)


@pytest.fixture
def gallery_service(project_store, moderation_store, verifier):
    return GalleryService(project_store, moderation_store, verifier)


@pytest.fixture
def broadcaster():
    return RoomBroadcaster()


@pytest.fixture
def dispatcher(broadcaster, lifecycle, gallery_service, verifier):
    return RealtimeDispatcher(broadcaster, lifecycle, gallery_service, verifier)


@pytest.fixture
def connect(broadcaster):
    """Factory: a FakeConnection already registered with the broadcaster."""
    def _connect(name: str = "conn", fail: bool = False) -> FakeConnection:
        conn = FakeConnection(name, fail)
        broadcaster.connect(conn)
        return conn
    return _connect


@pytest.fixture
async def client(db_manager):
    """FastAPI test client with app.state wired to the test database."""
    await build_app_state(app, db_manager, get_settings())

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c


@pytest.fixture
def auth_header(make_token):
    def _header(user_id: int, name: str | None = None) -> dict:
        return {"Authorization": f"Bearer {make_token(user_id, name)}"}
    return _header
