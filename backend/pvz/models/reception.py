"""Reception (batch of incoming goods) model."""

import enum
import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pvz.database import Base


class ReceptionStatus(str, enum.Enum):
    IN_PROGRESS = "in_progress"
    CLOSED = "closed"


class Reception(Base):
    __tablename__ = "receptions"
    __table_args__ = (
        # At most one open reception per pickup point.
        Index(
            "uq_receptions_pvz_in_progress",
            "pvz_id",
            unique=True,
            postgresql_where=text("status = 'in_progress'"),
            sqlite_where=text("status = 'in_progress'"),
        ),
        Index("ix_receptions_pvz_time", "pvz_id", "reception_time"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    reception_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    pvz_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("pvz.id", ondelete="CASCADE"), nullable=False
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False)

    pickup_point = relationship("PickupPoint", back_populates="receptions")
    products = relationship(
        "Product", back_populates="reception", cascade="all, delete-orphan", passive_deletes=True
    )
