"""Shared fixtures: a file-backed SQLite store and pool usage counters."""

import pytest
import pytest_asyncio
from sqlalchemy import event

from car_registry.infrastructure.database.connection import DatabaseManager


class PoolUsage:
    """Counts connections checked out of and returned to the pool."""

    def __init__(self):
        self.checkouts = 0
        self.checkins = 0

    @property
    def outstanding(self) -> int:
        return self.checkouts - self.checkins


@pytest_asyncio.fixture
async def database_manager(tmp_path):
    """Connected database manager with the car table created."""
    manager = DatabaseManager(f"sqlite+aiosqlite:///{tmp_path / 'cars.db'}")
    await manager.connect()
    await manager.create_tables()

    yield manager

    await manager.disconnect()


@pytest.fixture
def pool_usage(database_manager):
    """Attach checkout/checkin listeners to the manager's pool."""
    usage = PoolUsage()

    def on_checkout(dbapi_connection, connection_record, connection_proxy):
        usage.checkouts += 1

    def on_checkin(dbapi_connection, connection_record):
        usage.checkins += 1

    engine = database_manager.engine.sync_engine
    event.listen(engine, "checkout", on_checkout)
    event.listen(engine, "checkin", on_checkin)

    yield usage

    event.remove(engine, "checkout", on_checkout)
    event.remove(engine, "checkin", on_checkin)
