"""Application services."""

from pvz.services.pickup_point_registry import PickupPointRegistry, PickupPointView, ReceptionView
from pvz.services.product_ledger import ProductLedger
from pvz.services.reception_lifecycle import ReceptionLifecycle
from pvz.services.user_accounts import UserAccounts

__all__ = [
    "PickupPointRegistry",
    "PickupPointView",
    "ProductLedger",
    "ReceptionLifecycle",
    "ReceptionView",
    "UserAccounts",
]
