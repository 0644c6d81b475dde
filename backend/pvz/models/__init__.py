"""SQLAlchemy models."""

from pvz.models.pickup_point import City, PickupPoint
from pvz.models.product import Product, ProductType
from pvz.models.reception import Reception, ReceptionStatus
from pvz.models.user import User, UserRole

__all__ = [
    "City",
    "PickupPoint",
    "Product",
    "ProductType",
    "Reception",
    "ReceptionStatus",
    "User",
    "UserRole",
]
