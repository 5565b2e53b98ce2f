from datetime import date
from typing import Dict, List, Tuple

import pytest
from httpx import ASGITransport, AsyncClient

from youthsync.database import build_engine, build_session_factory, get_db
from youthsync.main import app
from youthsync.models import Base
from youthsync.routers.attendance import get_report_service
from youthsync.schemas.attendance import AttendanceEvent
from youthsync.services.attendance import ReportService
from youthsync.services.errors import StorageError


class InMemoryStore:
    def __init__(self, events=()):
        self._by_key: Dict[Tuple[int, date], AttendanceEvent] = {}
        self.writes = 0
        for event in events:
            self._by_key[event.key] = event

    async def upsert(self, event: AttendanceEvent) -> None:
        self.writes += 1
        self._by_key[event.key] = event

    async def list_events(self) -> List[AttendanceEvent]:
        # Deliberately unordered so callers cannot lean on store ordering.
        return list(reversed(list(self._by_key.values())))


class BrokenStore:
    async def upsert(self, event: AttendanceEvent) -> None:
        raise StorageError("database is locked")

    async def list_events(self) -> List[AttendanceEvent]:
        raise StorageError("database is locked")


@pytest.fixture
async def engine():
    engine = build_engine("sqlite+aiosqlite://", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def service(store):
    return ReportService(store)


@pytest.fixture
def asgi_app(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def broken_app(asgi_app):
    asgi_app.dependency_overrides[get_report_service] = lambda: ReportService(BrokenStore())
    return asgi_app


@pytest.fixture
async def api(asgi_app):
    transport = ASGITransport(app=asgi_app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
