"""
BookBazaar storefront client

This package contains the client-side state layer of the bookstore:
- auth: session manager (identity, token, API key)
- cart: cart synchronizer mirroring the server cart
- orders: order placement and history
- catalog: books and reviews
- storefront: composition root wiring them together

Note: Imports are lazy; ``bookbazaar.logging`` loads without httpx.
"""

__all__ = [
    "Storefront",
    "Settings",
    "get_settings",
]


def __getattr__(name):
    """Lazy attribute access."""
    if name == "Storefront":
        from bookbazaar.storefront import Storefront
        return Storefront
    if name == "Settings":
        from bookbazaar.config import Settings
        return Settings
    if name == "get_settings":
        from bookbazaar.config import get_settings
        return get_settings
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
