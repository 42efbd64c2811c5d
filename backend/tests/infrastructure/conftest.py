"""Store test fixtures: fresh in-memory SQLite database per test.

Invariants:
    - Every test gets a new DatabaseSessionManager with all tables created
    - Rows are seeded through the ORM directly, never through procedures

Design Decisions:
    - SQLite in-memory: fast, no external dependency; FOR UPDATE is a no-op there,
      so these tests cover procedure logic, not lock behavior
"""

import pytest

from tradehub.db.base import Base
from tradehub.infrastructure.database import DatabaseSessionManager
from tradehub.infrastructure.trade_store import SqlTradeStore
from tests.seed import Seeder


@pytest.fixture
async def db():
    manager = DatabaseSessionManager("sqlite+aiosqlite:///:memory:")
    async with manager.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield manager
    await manager.dispose()


@pytest.fixture
def store(db):
    return SqlTradeStore(db)


@pytest.fixture
def seed(db):
    return Seeder(db)
