import os
from pathlib import Path
from types import SimpleNamespace

import pytest
import pytest_asyncio

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from db.database import Database  # noqa: E402
from db.inventory import Location, Product  # noqa: E402
from ledger import MovementEngine  # noqa: E402
from ledger.movements import MovementLedger  # noqa: E402
from ledger.projection import StockProjection  # noqa: E402


def pytest_collection_modifyitems(config, items):
    """Mark tests that never touch storage as domain tests, the rest as integration."""
    for item in items:
        if Path(item.fspath).name in ("test_movement_rules.py", "test_locks.py", "test_auth.py"):
            item.add_marker(pytest.mark.domain)
        else:
            item.add_marker(pytest.mark.integration)


def sqlite_url(path: Path) -> str:
    return f"sqlite+aiosqlite:///{path}"


@pytest_asyncio.fixture
async def database(tmp_path):
    db = Database(sqlite_url(tmp_path / "ledger.db"))
    await db.create_all()
    yield db
    await db.dispose()


@pytest.fixture
def engine(database):
    return MovementEngine(database.session_maker)


@pytest_asyncio.fixture
async def catalog(database):
    """One product with a SKU, one without, and three locations (L1, L2, L3)."""
    async with database.session_maker() as session:
        product = Product(name="Steel Rods 20mm", sku="ST-2025", category="Raw Material")
        other = Product(name="Copper Wire")
        l1 = Location(name="Main Warehouse", type="warehouse")
        l2 = Location(name="Production Floor")
        l3 = Location(name="Showroom", type="location", address="1 High Street")
        session.add_all([product, other, l1, l2, l3])
        await session.commit()
    return SimpleNamespace(product=product, other=other, l1=l1, l2=l2, l3=l3)


@pytest.fixture
def ledger_state(database):
    """Async callable returning (movement ids, projection snapshot)."""

    async def _state():
        async with database.session_maker() as session:
            movements = await MovementLedger().list(session, limit=None)
            stock = await StockProjection().snapshot(session)
        return [m.id for m in movements], stock

    return _state


@pytest.fixture
def quantity_at(database):
    async def _quantity(product, location) -> int:
        async with database.session_maker() as session:
            return await StockProjection().get(session, product.id, location.id)

    return _quantity
