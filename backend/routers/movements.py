from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from core.auth import current_active_user
from db.users import User
from ledger import Err, ErrorKind, MovementEngine, MovementFilter, MovementRequest
from schemas.inventory import MovementCreate, MovementCreated, MovementRead

router = APIRouter()


_STATUS_BY_KIND = {
    ErrorKind.INVALID_TYPE: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INVALID_QUANTITY: status.HTTP_400_BAD_REQUEST,
    ErrorKind.MISSING_LOCATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INVALID_LOCATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.PRODUCT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.LOCATION_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.INSUFFICIENT_STOCK: status.HTTP_409_CONFLICT,
    ErrorKind.STORAGE_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def get_movement_engine(request: Request) -> MovementEngine:
    return request.app.state.movement_engine


def error_to_http(err: Err) -> HTTPException:
    return HTTPException(
        status_code=_STATUS_BY_KIND.get(err.kind, status.HTTP_400_BAD_REQUEST),
        detail={"code": err.kind.value, "message": err.message},
    )


@router.post("/", response_model=MovementCreated, status_code=status.HTTP_201_CREATED)
async def create_movement(
    payload: MovementCreate,
    user: User = Depends(current_active_user),
    engine: MovementEngine = Depends(get_movement_engine),
):
    """Record an IN, OUT or TRANSFER movement and update stock in one transaction."""
    result = await engine.apply_movement(
        MovementRequest(
            type=payload.type,
            product_ref=payload.product_id,
            quantity=payload.quantity,
            from_location_id=payload.from_location_id,
            to_location_id=payload.to_location_id,
            location_id=payload.location_id,
            reference=payload.reference,
            partner=payload.partner,
            created_by_user_id=user.id,
        )
    )
    if isinstance(result, Err):
        raise error_to_http(result)
    return {"success": True, "movement": result.value.to_schema}


@router.get("/", response_model=List[MovementRead])
async def list_movements(
    product_id: Optional[UUID] = None,
    location_id: Optional[UUID] = None,
    type: Optional[str] = Query(None, pattern="^(IN|OUT|TRANSFER)$"),
    limit: int = Query(50, ge=1, le=1000),
    user: User = Depends(current_active_user),
    engine: MovementEngine = Depends(get_movement_engine),
):
    movements = await engine.list_recent_movements(
        limit=limit,
        movement_filter=MovementFilter(product_id=product_id, location_id=location_id, type=type),
    )
    return [m.to_schema for m in movements]
