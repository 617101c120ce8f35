import uuid

from sqlalchemy import CheckConstraint, Column, DateTime, String, Text, Uuid
from sqlalchemy.orm import relationship

from ..database import Base
from .product import _utcnow

LOCATION_TYPES = ("internal", "warehouse", "location")


class Location(Base):
    __tablename__ = "locations"
    __table_args__ = (
        CheckConstraint("type IN ('internal', 'warehouse', 'location')", name="ck_locations_type"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False, unique=True, index=True)
    type = Column(String, nullable=False, default="internal")
    address = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    stock_items = relationship("StockItem", back_populates="location")

    @property
    def to_schema(self):
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "address": self.address,
        }
