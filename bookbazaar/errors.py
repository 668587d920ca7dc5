"""
Common Error Constants and Exceptions

Centralized user-facing messages and the exception hierarchy shared by the
session, cart, order and catalog services.
"""

from typing import Optional

# Generic
ERROR_TRY_AGAIN = "Please try again"

# Auth errors
ERROR_LOGIN_FAILED = "Login failed"
ERROR_REGISTRATION_FAILED = "Registration failed"
ERROR_API_KEY_FAILED = "Failed to generate API key"
ERROR_LOGIN_REQUIRED = "Please login"

# Cart errors
ERROR_CART_ADD_FAILED = "Failed to add to cart"
ERROR_CART_UPDATE_FAILED = "Failed to update quantity"
ERROR_CART_REMOVE_FAILED = "Failed to remove from cart"

# Order errors
ERROR_ORDER_FAILED = "Failed to place order"
ERROR_ORDERS_FETCH_FAILED = "Failed to fetch orders"
ERROR_ORDER_EMPTY_CART = "Cart is empty"

# Catalog errors
ERROR_BOOKS_FETCH_FAILED = "Failed to fetch books"
ERROR_BOOK_FETCH_FAILED = "Failed to fetch book"
ERROR_REVIEWS_FETCH_FAILED = "Failed to fetch reviews"
ERROR_REVIEW_ADD_FAILED = "Failed to add review"
ERROR_REVIEW_DELETE_FAILED = "Failed to delete review"
ERROR_INVALID_RATING = "Rating must be between 1 and 5"
ERROR_BOOK_CREATE_FAILED = "Failed to create book"
ERROR_BOOK_UPDATE_FAILED = "Failed to update book"
ERROR_BOOK_DELETE_FAILED = "Failed to delete book"
ERROR_ADMIN_REQUIRED = "Admin access required"


class BookBazaarError(Exception):
    """Base class for all storefront client errors."""


class ApiError(BookBazaarError):
    """Remote service answered with a non-success status.

    ``message`` is the body's ``message`` field when the server sent one.
    """

    def __init__(self, status_code: Optional[int], message: Optional[str] = None):
        self.status_code = status_code
        self.message = message
        super().__init__(message or f"Request failed with status {status_code}")


class NetworkError(ApiError):
    """Transport-level failure: no response was obtained."""

    def __init__(self, detail: str):
        super().__init__(None, None)
        self.detail = detail
        self.args = (f"Network error: {detail}",)


class AuthenticationError(BookBazaarError):
    """Login or registration was rejected or could not be performed."""


class ApiKeyError(BookBazaarError):
    """API key generation failed."""


class OrderError(BookBazaarError):
    """Order placement or order history retrieval failed."""


class CatalogError(BookBazaarError):
    """Catalog or review request failed."""
