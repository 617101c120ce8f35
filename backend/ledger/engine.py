"""
Movement engine.

Turns a MovementRequest into a committed StockMovement:

1. normalise the request (shorthand, type, quantity, location shape)
2. resolve the product reference once
3. under the pair locks, in one unit of work: check the locations exist,
   debit the source (OUT/TRANSFER), append the ledger entry, credit the
   destination (IN/TRANSFER), commit

The timeout bounds step 3 up to, but not including, the COMMIT.

Every rejection is returned as an Err and leaves both the ledger and the
stock projection untouched.
"""

import asyncio
import uuid
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from core.logging import get_logger
from db.inventory.location import Location
from db.inventory.movement import StockMovement
from db.inventory.product import Product
from db.inventory.stock import MAX_QUANTITY, StockItem
from db.unit_of_work import UnitOfWork
from ledger.locks import PairLocks
from ledger.movements import MovementFilter, MovementLedger, MovementRequest, NormalizedMovement, normalize_request
from ledger.projection import StockProjection
from ledger.resolver import CatalogResolver
from ledger.result import Err, ErrorKind, Ok, Result

logger = get_logger(__name__)

STORAGE_UNAVAILABLE_MESSAGE = "Storage is temporarily unavailable; the movement was not applied"


class MovementEngine:
    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        *,
        resolver: Optional[CatalogResolver] = None,
        projection: Optional[StockProjection] = None,
        ledger: Optional[MovementLedger] = None,
        timeout: Optional[float] = None,
    ):
        self.session_maker = session_maker
        self.resolver = resolver or CatalogResolver()
        self.projection = projection or StockProjection()
        self.ledger = ledger or MovementLedger()
        self.timeout = timeout
        self.locks = PairLocks()

    async def apply_movement(self, request: MovementRequest) -> Result[StockMovement]:
        normalized = normalize_request(request)
        if isinstance(normalized, Err):
            return self._rejected(normalized, request)
        movement = normalized.value

        try:
            async with self.session_maker() as session:
                product = await self.resolver.resolve(session, movement.product_ref)
            if product is None:
                return self._rejected(
                    Err(ErrorKind.PRODUCT_NOT_FOUND, f"Product {movement.product_ref!r} not found"),
                    request,
                )

            keys = [(product.id, location_id) for location_id in movement.location_ids]
            async with self.locks.hold(keys):
                result = await self._commit(product, movement)
        except asyncio.TimeoutError:
            logger.warning("movement timed out before commit", type=movement.type, product_ref=movement.product_ref)
            return Err(ErrorKind.STORAGE_UNAVAILABLE, STORAGE_UNAVAILABLE_MESSAGE)
        except (SQLAlchemyError, OSError):
            logger.exception("movement failed in storage", type=movement.type, product_ref=movement.product_ref)
            return Err(ErrorKind.STORAGE_UNAVAILABLE, STORAGE_UNAVAILABLE_MESSAGE)

        if isinstance(result, Err):
            return self._rejected(result, request)

        committed = result.value
        logger.info(
            "movement committed",
            movement_id=str(committed.id),
            type=committed.type,
            product_id=str(committed.product_id),
            quantity=committed.quantity,
            from_location_id=str(committed.from_location_id) if committed.from_location_id else None,
            to_location_id=str(committed.to_location_id) if committed.to_location_id else None,
        )
        return result

    async def _commit(self, product: Product, movement: NormalizedMovement) -> Result[StockMovement]:
        async with UnitOfWork(self.session_maker) as uow:
            if self.timeout:
                result = await asyncio.wait_for(self._stage(uow.session, product, movement), timeout=self.timeout)
            else:
                result = await self._stage(uow.session, product, movement)

            # COMMIT is outside the timeout: a movement reported as timed out was never written
            if isinstance(result, Ok):
                await uow.commit()
            return result

    async def _stage(
        self, session: AsyncSession, product: Product, movement: NormalizedMovement
    ) -> Result[StockMovement]:
        for location_id in movement.location_ids:
            if await session.get(Location, location_id) is None:
                return Err(ErrorKind.LOCATION_NOT_FOUND, f"Location {location_id} not found")

        # Feasibility check and debit happen before anything is written to the ledger
        if movement.from_location_id is not None:
            remaining = await self.projection.apply_delta(
                session, product.id, movement.from_location_id, -movement.quantity
            )
            if remaining is None:
                available = await self.projection.get(session, product.id, movement.from_location_id)
                return Err(
                    ErrorKind.INSUFFICIENT_STOCK,
                    f"Insufficient stock at location {movement.from_location_id}: "
                    f"available={available} requested={movement.quantity}",
                )

        entry = await self.ledger.append(
            session,
            StockMovement(
                id=uuid.uuid4(),
                type=movement.type,
                product_id=product.id,
                quantity=movement.quantity,
                from_location_id=movement.from_location_id,
                to_location_id=movement.to_location_id,
                reference=movement.reference,
                partner=movement.partner,
                created_by_user_id=movement.created_by_user_id,
            ),
        )

        if movement.to_location_id is not None:
            total = await self.projection.apply_delta(session, product.id, movement.to_location_id, movement.quantity)
            if total is None:
                return Err(
                    ErrorKind.INVALID_QUANTITY,
                    f"Receiving {movement.quantity} at location {movement.to_location_id} "
                    f"would exceed the maximum quantity of {MAX_QUANTITY}",
                )

        return Ok(entry)

    def _rejected(self, err: Err, request: MovementRequest) -> Err:
        logger.info(
            "movement rejected",
            code=err.kind.value,
            reason=err.message,
            type=request.type,
            product_ref=request.product_ref,
        )
        return err

    async def list_recent_movements(
        self, limit: int = 20, movement_filter: Optional[MovementFilter] = None
    ) -> list[StockMovement]:
        async with self.session_maker() as session:
            return await self.ledger.list(session, movement_filter, limit=limit)

    async def list_stock_levels(
        self,
        product_id: Optional[uuid.UUID] = None,
        location_id: Optional[uuid.UUID] = None,
    ) -> list[StockItem]:
        stmt = (
            select(StockItem)
            .join(Product, StockItem.product_id == Product.id)
            .join(Location, StockItem.location_id == Location.id)
            .options(selectinload(StockItem.product), selectinload(StockItem.location))
        )
        if product_id:
            stmt = stmt.where(StockItem.product_id == product_id)
        if location_id:
            stmt = stmt.where(StockItem.location_id == location_id)
        stmt = stmt.order_by(func.lower(Product.name).asc(), func.lower(Location.name).asc())

        async with self.session_maker() as session:
            res = await session.execute(stmt)
            return list(res.scalars().all())

    async def count_products(self) -> int:
        async with self.session_maker() as session:
            res = await session.execute(select(func.count()).select_from(Product))
            return int(res.scalar_one())
