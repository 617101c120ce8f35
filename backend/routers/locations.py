from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from core.auth import current_active_user
from db.database import get_async_session
from db.inventory.location import Location as LocationModel
from db.users import User
from schemas.inventory import LocationCreate, LocationRead

router = APIRouter()

DEFAULT_LOCATIONS = ["Main Warehouse", "Production Floor", "Showroom"]


async def ensure_locations(db: AsyncSession, names: List[str], location_type: str = "internal") -> List[LocationModel]:
    """Create any of ``names`` that do not exist yet. Caller commits."""
    out = []
    for name in names:
        res = await db.execute(select(LocationModel).where(func.lower(LocationModel.name) == name.lower()))
        location = res.scalar_one_or_none()
        if not location:
            location = LocationModel(name=name, type=location_type)
            db.add(location)
            await db.flush()
        out.append(location)
    return out


@router.get("/", response_model=List[LocationRead])
async def list_locations(db: AsyncSession = Depends(get_async_session)):
    res = await db.execute(select(LocationModel).order_by(LocationModel.name.asc()))
    return [loc.to_schema for loc in res.scalars().all()]


@router.post("/", response_model=LocationRead, status_code=status.HTTP_201_CREATED)
async def create_location(
    payload: LocationCreate,
    user: User = Depends(current_active_user),
    db: AsyncSession = Depends(get_async_session),
):
    existing = await db.execute(select(LocationModel).where(func.lower(LocationModel.name) == payload.name.lower()))
    if existing.scalar_one_or_none():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Location already exists")

    location = LocationModel(name=payload.name, type=payload.type, address=payload.address)
    db.add(location)
    await db.commit()
    await db.refresh(location)
    return location.to_schema


@router.post("/seed", response_model=List[LocationRead])
async def seed_locations(
    user: User = Depends(current_active_user),
    db: AsyncSession = Depends(get_async_session),
):
    """Create the default locations if they are missing"""
    locations = await ensure_locations(db, DEFAULT_LOCATIONS)
    await db.commit()
    return [loc.to_schema for loc in locations]
