from .order import Order, Payout, SubOrder
from .return_request import ReturnCase


__all__ = ["Order", "SubOrder", "Payout", "ReturnCase"]
