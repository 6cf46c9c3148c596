"""Service test fixtures: file-backed SQLite store, seeded slots, API client.

Invariants:
    - Every test gets a fresh SQLite database under tmp_path
    - The client reads the session manager from app.state, exactly like the lifespan sets it
    - get_settings and get_clock are overridden: 10 slots in pages of 5, frozen clock

Design Decisions:
    - File-backed SQLite instead of :memory: so every short-lived session the
      repositories open sees the same database
    - Lifespan is not run by ASGITransport; the fixture installs db_manager itself
"""

from datetime import timedelta

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine

from slot_rotation.api.deps import get_clock
from slot_rotation.config import Settings, get_settings
from slot_rotation.db.base import Base
from slot_rotation.infrastructure.database import DatabaseSessionManager
from slot_rotation.main import app
from slot_rotation.models.purchased_slot import PurchasedSlot
from tests.factories import BASE_TIME, LOGO, fixed_clock


@pytest.fixture
async def test_engine(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'rotation.db'}", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def db_manager(test_engine):
    return DatabaseSessionManager.from_engine(test_engine)


@pytest.fixture
def small_settings():
    return Settings(slot_count=10, group_size=5)


@pytest.fixture
def seed_slots(db_manager):
    """Insert `count` active, paid purchased slots: rec-00001 .. rec-{count}."""
    async def _seed(count: int, group_size: int = 5, **overrides):
        async with db_manager.session() as session:
            async with session.begin():
                for i in range(1, count + 1):
                    fields = {
                        "id": f"rec-{i:05d}",
                        "slot_number": i,
                        "group_number": -(-i // group_size),
                        "status": "active",
                        "payment_confirmed": True,
                        "display_asset": LOGO,
                        "business_name": f"Business {i}",
                        "contact_email": f"owner{i}@example.com",
                        "destination_url": f"https://example.com/{i}",
                        "created_at": BASE_TIME + timedelta(seconds=i),
                    }
                    fields.update(overrides)
                    session.add(PurchasedSlot(**fields))
    return _seed


async def _client(db_manager, settings):
    app.state.db_manager = db_manager
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_clock] = lambda: fixed_clock(
        interval_ms=settings.rotation_interval_ms,
    )
    try:
        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test",
        ) as c:
            yield c
    finally:
        app.dependency_overrides.clear()
        app.state.db_manager = None


@pytest.fixture
async def client(db_manager, small_settings):
    """API client backed by the test database."""
    async for c in _client(db_manager, small_settings):
        yield c


@pytest.fixture
async def unconfigured_client(small_settings):
    """API client with no session manager on app.state."""
    async for c in _client(None, small_settings):
        yield c
