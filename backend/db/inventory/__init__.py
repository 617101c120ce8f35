"""
Inventory ledger models.

Models:
- Product (catalog, referenced by id or SKU)
- Location (internal place, warehouse, or generic location)
- StockItem (current quantity per product per location, derived from movements)
- StockMovement (append-only IN / OUT / TRANSFER entries)
"""

from .product import Product
from .location import Location
from .stock import StockItem
from .movement import StockMovement

__all__ = ["Product", "Location", "StockItem", "StockMovement"]
