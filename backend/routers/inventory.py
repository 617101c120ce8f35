from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends

from core.auth import current_active_user
from core.config import settings
from db.users import User
from ledger import MovementEngine
from routers.movements import get_movement_engine
from schemas.inventory import DashboardRead, StockItemRead

router = APIRouter()


@router.get("/stock", response_model=List[StockItemRead])
async def get_stock(
    product_id: Optional[UUID] = None,
    location_id: Optional[UUID] = None,
    user: User = Depends(current_active_user),
    engine: MovementEngine = Depends(get_movement_engine),
):
    """Current quantity per product per location (zero rows included)."""
    items = await engine.list_stock_levels(product_id=product_id, location_id=location_id)
    return [s.to_schema for s in items]


@router.get("/dashboard", response_model=DashboardRead)
async def get_dashboard(
    user: User = Depends(current_active_user),
    engine: MovementEngine = Depends(get_movement_engine),
):
    total_products = await engine.count_products()
    recent = await engine.list_recent_movements(limit=settings.recent_movements_limit)
    levels = await engine.list_stock_levels()
    return {
        "total_products": total_products,
        "recent_movements": [m.to_schema for m in recent],
        "stock_levels": [s.to_schema for s in levels],
    }
