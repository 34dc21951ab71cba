"""
Pytest configuration and fixtures for MeetMe Search tests
"""

import os
import sys
from collections.abc import AsyncGenerator

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))  # noqa: PTH100, PTH118, PTH120

from meetme.database import Base, get_db  # noqa: E402
from meetme.services.search_service import SearchService  # noqa: E402
from meetme.services.search_tracker import SearchTracker  # noqa: E402


@pytest.fixture(scope="function")
async def test_engine(tmp_path):
    """
    Fresh SQLite database file per test.

    A file (not :memory:) so the tracker's background sessions see the
    same data as the test session.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'search_test.db'}", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture(scope="function")
def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture(scope="function")
async def test_db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Database session used both to seed data and to run searches"""
    async with session_factory() as session:
        yield session


@pytest.fixture(scope="function")
async def tracker(session_factory):
    """Tracker writing to the test database; pending writes are drained on teardown"""
    search_tracker = SearchTracker(session_factory=session_factory, enabled=True)
    yield search_tracker
    await search_tracker.drain()


@pytest.fixture(scope="function")
def service(tracker) -> SearchService:
    return SearchService(tracker=tracker)


@pytest.fixture(scope="function")
async def client(session_factory, tracker, monkeypatch) -> AsyncGenerator[httpx.AsyncClient, None]:
    """HTTP client bound to the app, with the test database and tracker swapped in"""
    from meetme.main import app
    from meetme.services.search_service import search_service

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    monkeypatch.setattr(search_service, "tracker", tracker)

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        yield async_client

    await tracker.drain()
    app.dependency_overrides.clear()
