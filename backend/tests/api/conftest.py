"""API test fixtures: FastAPI app wired to an in-memory SQLite store.

Invariants:
    - Every test gets a fresh database, store and recording notifier on app.state
    - db_manager patched so the readiness probe sees the test database

Design Decisions:
    - httpx ASGITransport does not run the lifespan; fixtures set app.state directly
"""

import pytest
from httpx import ASGITransport, AsyncClient

import tradehub.infrastructure.database as db_module
from tradehub.db.base import Base
from tradehub.infrastructure.database import DatabaseSessionManager
from tradehub.infrastructure.trade_store import SqlTradeStore
from tradehub.main import app
from tests.fakes import RecordingNotifier
from tests.seed import Seeder


@pytest.fixture
async def db():
    manager = DatabaseSessionManager("sqlite+aiosqlite:///:memory:")
    async with manager.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield manager
    await manager.dispose()


@pytest.fixture
def seed(db):
    return Seeder(db)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
async def client(db, notifier):
    original_manager = db_module.db_manager
    db_module.db_manager = db
    app.state.trade_store = SqlTradeStore(db)
    app.state.notifier = notifier
    app.state.background_effects = False

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    db_module.db_manager = original_manager
