from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from core.auth import current_active_user
from db.database import get_async_session
from db.inventory.product import Product as ProductModel
from db.users import User
from ledger.resolver import CatalogResolver
from schemas.inventory import ProductCreate, ProductRead

router = APIRouter()


@router.get("/", response_model=List[ProductRead])
async def list_products(db: AsyncSession = Depends(get_async_session)):
    res = await db.execute(select(ProductModel).order_by(func.lower(ProductModel.name).asc()))
    return [p.to_schema for p in res.scalars().all()]


@router.get("/{reference}", response_model=ProductRead)
async def get_product(reference: str, db: AsyncSession = Depends(get_async_session)):
    """Look a product up by internal id or SKU"""
    product = await CatalogResolver().resolve(db, reference)
    if not product:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Product {reference} not found")
    return product.to_schema


@router.post("/", response_model=ProductRead, status_code=status.HTTP_201_CREATED)
async def create_product(
    payload: ProductCreate,
    user: User = Depends(current_active_user),
    db: AsyncSession = Depends(get_async_session),
):
    if payload.sku:
        existing = await db.execute(select(ProductModel).where(ProductModel.sku == payload.sku))
        if existing.scalar_one_or_none():
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="SKU already exists")

    product = ProductModel(name=payload.name, sku=payload.sku, category=payload.category)
    db.add(product)
    await db.commit()
    await db.refresh(product)
    return product.to_schema
