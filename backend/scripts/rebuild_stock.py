"""
Rebuild the stock_items table by replaying every stock movement.

  python scripts/rebuild_stock.py --verify-only   # report drift, change nothing
  python scripts/rebuild_stock.py                 # rewrite stock_items from the ledger

Exits with status 1 when --verify-only finds drift.
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Allow running from repo root by ensuring `backend/` is on sys.path
BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from core.config import settings  # noqa: E402
from core.logging import configure_logging  # noqa: E402
from db.database import Database  # noqa: E402
from db.unit_of_work import UnitOfWork  # noqa: E402
from ledger.replay import rebuild_projection, verify_projection  # noqa: E402


async def main(verify_only: bool) -> int:
    database = Database(settings.database_url, echo=settings.database_echo)
    try:
        async with UnitOfWork(database.session_maker) as uow:
            drift = await verify_projection(uow.session)
            for (product_id, location_id), (live, replayed) in sorted(drift.items(), key=str):
                print(f"product={product_id} location={location_id} live={live} ledger={replayed}")
            print(f"Pairs out of sync: {len(drift)}")

            if verify_only:
                return 1 if drift else 0

            n = await rebuild_projection(uow.session)
            await uow.commit()
            print(f"Rebuilt {n} stock rows from the ledger")
            return 0
    finally:
        await database.dispose()


if __name__ == "__main__":
    p = argparse.ArgumentParser()
    p.add_argument("--verify-only", action="store_true")
    args = p.parse_args()

    configure_logging()
    sys.exit(asyncio.run(main(args.verify_only)))
