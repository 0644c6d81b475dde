"""Pickup point (PVZ) model."""

import enum
import uuid
from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pvz.database import Base


class City(str, enum.Enum):
    MOSCOW = "Moscow"
    SAINT_PETERSBURG = "Saint Petersburg"
    KAZAN = "Kazan"


class PickupPoint(Base):
    __tablename__ = "pvz"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    registration_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    city: Mapped[str] = mapped_column(String(50), nullable=False)

    receptions = relationship(
        "Reception", back_populates="pickup_point", cascade="all, delete-orphan", passive_deletes=True
    )
