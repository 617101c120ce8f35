import uuid

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import relationship

from ..database import Base
from .product import _utcnow

MOVEMENT_TYPES = ("IN", "OUT", "TRANSFER")


class StockMovement(Base):
    """Append-only ledger entry. Never updated or deleted once committed."""

    __tablename__ = "stock_movements"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_stock_movements_quantity_positive"),
        CheckConstraint(
            "(type = 'IN' AND to_location_id IS NOT NULL AND from_location_id IS NULL)"
            " OR (type = 'OUT' AND from_location_id IS NOT NULL AND to_location_id IS NULL)"
            " OR (type = 'TRANSFER' AND from_location_id IS NOT NULL AND to_location_id IS NOT NULL"
            " AND from_location_id <> to_location_id)",
            name="ck_stock_movements_location_shape",
        ),
        Index("ix_stock_movements_product_from", "product_id", "from_location_id"),
        Index("ix_stock_movements_product_to", "product_id", "to_location_id"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    type = Column(String(16), nullable=False)
    product_id = Column(Uuid, ForeignKey("products.id", ondelete="RESTRICT"), nullable=False)
    quantity = Column(Integer, nullable=False)

    # NULL on one side means an external partner
    from_location_id = Column(Uuid, ForeignKey("locations.id", ondelete="RESTRICT"), nullable=True)
    to_location_id = Column(Uuid, ForeignKey("locations.id", ondelete="RESTRICT"), nullable=True)

    reference = Column(Text, nullable=True)
    partner = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)
    created_by_user_id = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    product = relationship("Product")
    from_location = relationship("Location", foreign_keys=[from_location_id])
    to_location = relationship("Location", foreign_keys=[to_location_id])

    @property
    def to_schema(self):
        """Plain dict; related objects are included only when already loaded."""
        loaded = self.__dict__
        return {
            "id": self.id,
            "type": self.type,
            "product_id": self.product_id,
            "quantity": int(self.quantity),
            "from_location_id": self.from_location_id,
            "to_location_id": self.to_location_id,
            "reference": self.reference,
            "partner": self.partner,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "created_by_user_id": self.created_by_user_id,
            "product": loaded["product"].to_schema if loaded.get("product") is not None else None,
            "from_location": (
                loaded["from_location"].to_schema if loaded.get("from_location") is not None else None
            ),
            "to_location": loaded["to_location"].to_schema if loaded.get("to_location") is not None else None,
        }
