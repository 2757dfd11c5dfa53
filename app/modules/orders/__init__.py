"""Order status and delivery location tracking."""

from modules.orders.tracking import OrderTracker

__all__ = ["OrderTracker"]
