"""Rebuild and verify the stock projection from the movement ledger."""

from collections import defaultdict

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from db.inventory.movement import StockMovement
from db.inventory.stock import StockItem
from ledger.movements import stock_deltas
from ledger.projection import PairKey, StockProjection


async def replay_ledger(session: AsyncSession) -> dict[PairKey, int]:
    """Fold every movement, oldest first, into per-pair quantities."""
    quantities: dict[PairKey, int] = defaultdict(int)
    res = await session.scalars(
        select(StockMovement).order_by(StockMovement.created_at.asc(), StockMovement.id.asc())
    )
    for movement in res:
        for location_id, delta in stock_deltas(movement):
            quantities[(movement.product_id, location_id)] += delta
    return dict(quantities)


def diff_projection(live: dict[PairKey, int], replayed: dict[PairKey, int]) -> dict[PairKey, tuple[int, int]]:
    """Pairs whose live quantity differs from the replayed one, as (live, replayed).

    A pair missing on one side counts as zero, so retained zero rows never show up.
    """
    out = {}
    for key in set(live) | set(replayed):
        a, b = live.get(key, 0), replayed.get(key, 0)
        if a != b:
            out[key] = (a, b)
    return out


async def verify_projection(session: AsyncSession) -> dict[PairKey, tuple[int, int]]:
    live = await StockProjection().snapshot(session)
    replayed = await replay_ledger(session)
    return diff_projection(live, replayed)


async def rebuild_projection(session: AsyncSession) -> int:
    """Replace every StockItem row with the replayed quantities. Caller commits."""
    replayed = await replay_ledger(session)
    await session.execute(delete(StockItem))
    for (product_id, location_id), quantity in replayed.items():
        session.add(StockItem(product_id=product_id, location_id=location_id, quantity=quantity))
    await session.flush()
    return len(replayed)
