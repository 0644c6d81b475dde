"""Product (single scanned item) model."""

import enum
import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pvz.database import Base


class ProductType(str, enum.Enum):
    ELECTRONICS = "electronics"
    CLOTHES = "clothes"
    SHOES = "shoes"


class Product(Base):
    __tablename__ = "products"
    __table_args__ = (
        Index("ix_products_reception_time", "reception_id", "adding_time"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    adding_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    product_type: Mapped[str] = mapped_column(String(50), nullable=False)
    reception_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("receptions.id", ondelete="CASCADE"), nullable=False
    )

    reception = relationship("Reception", back_populates="products")
