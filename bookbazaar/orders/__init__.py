"""Orders package."""
from .models import Order, OrderItem, OrderStatus
from .service import OrderService

__all__ = ["Order", "OrderItem", "OrderStatus", "OrderService"]
