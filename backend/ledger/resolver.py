import re
import uuid
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from db.inventory.product import Product

_UUID_RE = re.compile(
    r"^\{?[0-9a-fA-F]{8}-?[0-9a-fA-F]{4}-?[0-9a-fA-F]{4}-?[0-9a-fA-F]{4}-?[0-9a-fA-F]{12}\}?$"
)


def as_uuid(value: Any) -> Optional[uuid.UUID]:
    """Return ``value`` as a UUID when it is shaped like one, else None."""
    if isinstance(value, uuid.UUID):
        return value
    if not isinstance(value, str):
        return None
    candidate = value.strip()
    if not _UUID_RE.match(candidate):
        return None
    return uuid.UUID(candidate)


class CatalogResolver:
    """Maps a product reference (internal id or SKU) to its Product row.

    Read-only; safe to call speculatively.
    """

    async def resolve(self, session: AsyncSession, reference: Any) -> Optional[Product]:
        if reference is None:
            return None
        if not isinstance(reference, (str, uuid.UUID)):
            reference = str(reference)

        product_id = as_uuid(reference)
        if product_id is not None:
            product = await session.get(Product, product_id)
            if product is not None:
                return product

        sku = str(reference).strip()
        if not sku:
            return None
        res = await session.execute(select(Product).where(Product.sku == sku))
        return res.scalar_one_or_none()
