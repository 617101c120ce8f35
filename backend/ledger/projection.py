import uuid
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from db.inventory.stock import MAX_QUANTITY, StockItem

PairKey = tuple[uuid.UUID, uuid.UUID]


class StockProjection:
    """Current on-hand quantity per (product, location).

    A materialized view of the movement ledger. Every write goes through
    ``apply_delta`` inside the caller's transaction.
    """

    async def get(self, session: AsyncSession, product_id: uuid.UUID, location_id: uuid.UUID) -> int:
        res = await session.execute(
            select(StockItem.quantity).where(
                StockItem.product_id == product_id,
                StockItem.location_id == location_id,
            )
        )
        quantity = res.scalar_one_or_none()
        return int(quantity) if quantity is not None else 0

    async def apply_delta(
        self,
        session: AsyncSession,
        product_id: uuid.UUID,
        location_id: uuid.UUID,
        delta: int,
    ) -> Optional[int]:
        """Add ``delta`` to the pair and return the new quantity.

        Returns None when the change is refused: a debit larger than the
        balance, a debit against a pair that has no row yet, or a credit that
        would push the balance past ``MAX_QUANTITY``.
        """
        pair = (StockItem.product_id == product_id, StockItem.location_id == location_id)
        stmt = (
            update(StockItem)
            .where(*pair)
            .values(quantity=StockItem.quantity + delta)
            .execution_options(synchronize_session=False)
        )
        if delta < 0:
            # Check and decrement in one statement; the row lock taken by the
            # UPDATE makes concurrent debits re-read the committed balance.
            if -delta > MAX_QUANTITY:
                return None
            stmt = stmt.where(StockItem.quantity >= -delta)
        else:
            if delta > MAX_QUANTITY:
                return None
            stmt = stmt.where(StockItem.quantity <= MAX_QUANTITY - delta)

        res = await session.execute(stmt)
        if res.rowcount:
            return await self.get(session, product_id, location_id)

        if delta < 0:
            return None

        existing = await session.execute(select(StockItem.id).where(*pair))
        if existing.first() is not None:
            return None

        session.add(StockItem(product_id=product_id, location_id=location_id, quantity=delta))
        await session.flush()
        return delta

    async def snapshot(self, session: AsyncSession) -> dict[PairKey, int]:
        res = await session.execute(select(StockItem.product_id, StockItem.location_id, StockItem.quantity))
        return {(product_id, location_id): int(quantity) for product_id, location_id, quantity in res.all()}
