from datetime import datetime
from typing import Any, List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


LocationType = Literal["internal", "warehouse", "location"]


class ProductCreate(BaseModel):
    name: str
    sku: Optional[str] = None
    category: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _strip_required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("Product name required")
        return v

    @field_validator("sku", "category")
    @classmethod
    def _empty_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        return v or None


class ProductRead(BaseModel):
    id: UUID
    name: str
    sku: Optional[str] = None
    category: Optional[str] = None


class LocationCreate(BaseModel):
    name: str
    type: LocationType = "internal"
    address: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _strip_required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("Name is required")
        return v


class LocationRead(BaseModel):
    id: UUID
    name: str
    type: str
    address: Optional[str] = None


class MovementCreate(BaseModel):
    """Loosely typed on purpose: the movement engine owns every business rule
    and reports a specific error code for each, so nothing is rejected here."""

    # The browser client sends camelCase (productId, fromLocationId, ...)
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    type: Any = None
    product_id: Any = None
    quantity: Any = None
    from_location_id: Any = None
    to_location_id: Any = None
    location_id: Any = None
    reference: Optional[str] = None
    partner: Optional[str] = None


class MovementRead(BaseModel):
    id: UUID
    type: str
    product_id: UUID
    quantity: int
    from_location_id: Optional[UUID] = None
    to_location_id: Optional[UUID] = None
    reference: Optional[str] = None
    partner: Optional[str] = None
    created_at: Optional[datetime] = None
    created_by_user_id: Optional[UUID] = None
    product: Optional[ProductRead] = None
    from_location: Optional[LocationRead] = None
    to_location: Optional[LocationRead] = None


class MovementCreated(BaseModel):
    success: bool = True
    movement: MovementRead


class StockItemRead(BaseModel):
    id: UUID
    product_id: UUID
    location_id: UUID
    quantity: int
    product: Optional[ProductRead] = None
    location: Optional[LocationRead] = None


class DashboardRead(BaseModel):
    total_products: int
    recent_movements: List[MovementRead]
    stock_levels: List[StockItemRead]
