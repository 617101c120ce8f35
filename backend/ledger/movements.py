"""Movement ledger: entry rules, request normalisation, append and list."""

import re
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from db.inventory.movement import MOVEMENT_TYPES, StockMovement
from db.inventory.stock import MAX_QUANTITY
from ledger.resolver import as_uuid
from ledger.result import Err, ErrorKind, Ok, Result

_INT_RE = re.compile(r"^[+-]?\d+$")


@dataclass
class MovementRequest:
    """A movement as the caller sent it, before any validation."""

    type: Any = None
    product_ref: Any = None
    quantity: Any = None
    from_location_id: Any = None
    to_location_id: Any = None
    # Shorthand: destination for IN, source for OUT
    location_id: Any = None
    reference: Optional[str] = None
    partner: Optional[str] = None
    created_by_user_id: Optional[uuid.UUID] = None


@dataclass(frozen=True)
class NormalizedMovement:
    type: str
    product_ref: str
    quantity: int
    from_location_id: Optional[uuid.UUID]
    to_location_id: Optional[uuid.UUID]
    reference: Optional[str]
    partner: Optional[str]
    created_by_user_id: Optional[uuid.UUID]

    @property
    def location_ids(self) -> list[uuid.UUID]:
        return [loc for loc in (self.from_location_id, self.to_location_id) if loc is not None]


@dataclass
class MovementFilter:
    product_id: Optional[uuid.UUID] = None
    # Matches either side of the movement
    location_id: Optional[uuid.UUID] = None
    type: Optional[str] = None
    since: Optional[datetime] = None
    until: Optional[datetime] = None


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def parse_quantity(value: Any) -> Optional[int]:
    """Integer in 1..MAX_QUANTITY, or None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        qty = value
    elif isinstance(value, float):
        if not value.is_integer():
            return None
        qty = int(value)
    elif isinstance(value, str) and _INT_RE.match(value.strip()):
        qty = int(value.strip())
    else:
        return None
    return qty if 0 < qty <= MAX_QUANTITY else None


def normalize_request(request: MovementRequest) -> Result[NormalizedMovement]:
    """Apply the location shorthand and the shape rules of a ledger entry.

    Pure: no storage access. Product resolution and stock checks happen later.
    """
    movement_type = request.type
    from_location = request.from_location_id
    to_location = request.to_location_id

    if not _blank(request.location_id):
        if movement_type == "IN" and _blank(to_location):
            to_location = request.location_id
        if movement_type == "OUT" and _blank(from_location):
            from_location = request.location_id

    if movement_type not in MOVEMENT_TYPES:
        return Err(ErrorKind.INVALID_TYPE, f"Invalid type {movement_type!r}; expected one of IN, OUT, TRANSFER")

    if _blank(request.product_ref):
        return Err(ErrorKind.PRODUCT_NOT_FOUND, "product reference is required")

    qty = parse_quantity(request.quantity)
    if qty is None:
        return Err(ErrorKind.INVALID_QUANTITY, "quantity must be a positive integer")

    # The side a type does not use is dropped
    if movement_type == "IN":
        from_location = None
    elif movement_type == "OUT":
        to_location = None

    if movement_type in ("OUT", "TRANSFER") and _blank(from_location):
        return Err(ErrorKind.MISSING_LOCATION, "source location is required")
    if movement_type in ("IN", "TRANSFER") and _blank(to_location):
        return Err(ErrorKind.MISSING_LOCATION, "destination location is required")

    from_id = as_uuid(from_location) if from_location is not None else None
    to_id = as_uuid(to_location) if to_location is not None else None
    if from_location is not None and from_id is None:
        return Err(ErrorKind.LOCATION_NOT_FOUND, f"Location {from_location} not found")
    if to_location is not None and to_id is None:
        return Err(ErrorKind.LOCATION_NOT_FOUND, f"Location {to_location} not found")

    if movement_type == "TRANSFER" and from_id == to_id:
        return Err(ErrorKind.INVALID_LOCATION, "source and destination must differ")

    return Ok(
        NormalizedMovement(
            type=movement_type,
            product_ref=str(request.product_ref).strip(),
            quantity=qty,
            from_location_id=from_id,
            to_location_id=to_id,
            reference=request.reference,
            partner=request.partner,
            created_by_user_id=request.created_by_user_id,
        )
    )


def stock_deltas(movement: StockMovement) -> list[tuple[uuid.UUID, int]]:
    """(location_id, delta) pairs a committed movement applies to the projection."""
    out = []
    if movement.from_location_id is not None:
        out.append((movement.from_location_id, -int(movement.quantity)))
    if movement.to_location_id is not None:
        out.append((movement.to_location_id, int(movement.quantity)))
    return out


class MovementLedger:
    """Append-only log of committed movements. There is no update or delete."""

    async def append(self, session: AsyncSession, entry: StockMovement) -> StockMovement:
        session.add(entry)
        await session.flush()
        return entry

    async def list(
        self,
        session: AsyncSession,
        movement_filter: Optional[MovementFilter] = None,
        limit: Optional[int] = 20,
        newest_first: bool = True,
    ) -> list[StockMovement]:
        stmt = select(StockMovement).options(
            selectinload(StockMovement.product),
            selectinload(StockMovement.from_location),
            selectinload(StockMovement.to_location),
        )

        f = movement_filter or MovementFilter()
        if f.product_id:
            stmt = stmt.where(StockMovement.product_id == f.product_id)
        if f.location_id:
            stmt = stmt.where(
                or_(
                    StockMovement.from_location_id == f.location_id,
                    StockMovement.to_location_id == f.location_id,
                )
            )
        if f.type:
            stmt = stmt.where(StockMovement.type == f.type)
        if f.since:
            stmt = stmt.where(StockMovement.created_at >= f.since)
        if f.until:
            stmt = stmt.where(StockMovement.created_at < f.until)

        if newest_first:
            stmt = stmt.order_by(StockMovement.created_at.desc(), StockMovement.id.desc())
        else:
            stmt = stmt.order_by(StockMovement.created_at.asc(), StockMovement.id.asc())
        if limit is not None:
            stmt = stmt.limit(limit)

        res = await session.execute(stmt)
        return list(res.scalars().all())
