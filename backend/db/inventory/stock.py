import uuid

from sqlalchemy import CheckConstraint, Column, ForeignKey, Integer, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from ..database import Base

# Largest on-hand or movement quantity the Integer (int4) columns can hold
MAX_QUANTITY = 2**31 - 1


class StockItem(Base):
    """Current on-hand quantity for one (product, location) pair.

    Derived state: always equal to the sum of the movements touching the pair.
    Rows are created on the first movement into a location and kept at zero.
    """

    __tablename__ = "stock_items"
    __table_args__ = (
        UniqueConstraint("product_id", "location_id", name="ux_stock_items_product_location"),
        CheckConstraint("quantity >= 0", name="ck_stock_items_quantity_non_negative"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    product_id = Column(Uuid, ForeignKey("products.id", ondelete="RESTRICT"), nullable=False, index=True)
    location_id = Column(Uuid, ForeignKey("locations.id", ondelete="RESTRICT"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False, default=0)

    product = relationship("Product", back_populates="stock_items")
    location = relationship("Location", back_populates="stock_items")

    @property
    def to_schema(self):
        loaded = self.__dict__
        return {
            "id": self.id,
            "product_id": self.product_id,
            "location_id": self.location_id,
            "quantity": int(self.quantity or 0),
            "product": loaded["product"].to_schema if loaded.get("product") is not None else None,
            "location": loaded["location"].to_schema if loaded.get("location") is not None else None,
        }
