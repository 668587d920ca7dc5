"""Cart package: line item models and the server-mirroring synchronizer."""
from .models import Cart, CartLineItem
from .service import CartSynchronizer

__all__ = [
    "Cart",
    "CartLineItem",
    "CartSynchronizer",
]
