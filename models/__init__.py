from .base import utcnow, iso_z
from .user import User
from .order import Drink, Sugar, Slot, Order, OrderItem
from .broadcast import BroadcastType, Broadcast

__all__ = [
    "utcnow", "iso_z",
    "User",
    "Drink", "Sugar", "Slot", "Order", "OrderItem",
    "BroadcastType", "Broadcast",
]
