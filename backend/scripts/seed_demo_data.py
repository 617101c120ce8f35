import argparse
import asyncio
import sys
from pathlib import Path

"""
Seed demo data (admin user, locations, one product with opening stock).

This script can be run from either:
- backend/: `python scripts/seed_demo_data.py`
- repo root: `python backend/scripts/seed_demo_data.py`

Pass --reset to wipe movements, stock, locations and products first.
"""

# Allow running from repo root by ensuring `backend/` is on sys.path
BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from sqlalchemy import delete, select  # noqa: E402
from fastapi_users.password import PasswordHelper  # noqa: E402

from core.config import settings  # noqa: E402
from core.logging import configure_logging  # noqa: E402
from db.database import Database  # noqa: E402
from db.inventory import Location, Product, StockItem, StockMovement  # noqa: E402
from db.users import User  # noqa: E402
from ledger import Err, MovementEngine, MovementRequest  # noqa: E402
from routers.locations import DEFAULT_LOCATIONS, ensure_locations  # noqa: E402


password_helper = PasswordHelper()

DEMO_PRODUCT = {"name": "Steel Rods 20mm", "sku": "ST-2025", "category": "Raw Material"}


async def get_or_create_user(session, email: str, password: str) -> User:
    result = await session.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()
    if user:
        return user

    user = User(
        email=email,
        hashed_password=password_helper.hash(password),
        is_active=True,
        is_superuser=True,
        is_verified=True,
        name="Admin",
    )
    session.add(user)
    await session.flush()
    return user


async def get_or_create_product(session, name: str, sku: str, category: str) -> Product:
    result = await session.execute(select(Product).where(Product.sku == sku))
    product = result.scalar_one_or_none()
    if product:
        return product
    product = Product(name=name, sku=sku, category=category)
    session.add(product)
    await session.flush()
    return product


async def seed(reset: bool, email: str, password: str, opening_quantity: int) -> None:
    database = Database(settings.database_url, echo=settings.database_echo)
    await database.create_all()
    try:
        async with database.session_maker() as session:
            if reset:
                # Children first (FK)
                await session.execute(delete(StockMovement))
                await session.execute(delete(StockItem))
                await session.execute(delete(Location))
                await session.execute(delete(Product))
                print("Cleared movements, stock, locations and products")

            await get_or_create_user(session, email, password)
            locations = await ensure_locations(session, DEFAULT_LOCATIONS)
            product = await get_or_create_product(session, **DEMO_PRODUCT)
            await session.commit()

        if opening_quantity > 0:
            engine = MovementEngine(database.session_maker)
            result = await engine.apply_movement(
                MovementRequest(
                    type="IN",
                    product_ref=product.sku,
                    quantity=opening_quantity,
                    location_id=str(locations[0].id),
                    reference="OPENING-BALANCE",
                )
            )
            if isinstance(result, Err):
                print(f"Opening balance not recorded: {result.kind.value}: {result.message}")
            else:
                print(f"Received {opening_quantity} x {product.sku} into {locations[0].name}")

        print("Database seeded!")
        print(f"Use this Product ID: {product.id} (SKU {product.sku})")
        for loc in locations:
            print(f"Location {loc.name}: {loc.id}")
    finally:
        await database.dispose()


def main():
    p = argparse.ArgumentParser()
    p.add_argument("--reset", action="store_true", help="Delete ledger and catalog rows before seeding")
    p.add_argument("--email", default="admin@example.com")
    p.add_argument("--password", default="admin")
    p.add_argument("--opening-quantity", type=int, default=100, help="IN movement recorded for the demo product")
    args = p.parse_args()

    configure_logging()
    asyncio.run(seed(args.reset, args.email, args.password, args.opening_quantity))


if __name__ == "__main__":
    main()
