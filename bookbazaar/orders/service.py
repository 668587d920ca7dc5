"""
Order Service - placing orders from the cart and reading order history.

A successful placement is the one trigger for clearing the local cart.
"""
from typing import List

from pydantic import ValidationError

from bookbazaar.api_client import ApiClient
from bookbazaar.auth.session import SessionManager
from bookbazaar.cart.service import CartSynchronizer
from bookbazaar.errors import (
    ERROR_ORDER_EMPTY_CART,
    ERROR_ORDER_FAILED,
    ERROR_ORDERS_FETCH_FAILED,
    ERROR_TRY_AGAIN,
    ApiError,
    OrderError,
)
from bookbazaar.logging import get_logger
from bookbazaar.notifications import NotificationService

from .models import Order

logger = get_logger(__name__)


class OrderService:
    """Order placement and history for the logged-in user."""

    def __init__(
        self,
        api: ApiClient,
        session: SessionManager,
        cart: CartSynchronizer,
        notifications: NotificationService,
    ):
        self._api = api
        self._session = session
        self._cart = cart
        self._notifications = notifications

    async def place_order(self) -> Order:
        """
        Submit the current cart as an order.

        Returns:
            The created order

        Raises:
            OrderError: Cart empty, request rejected or unreachable
        """
        snapshot = self._cart.cart
        if snapshot.is_empty:
            raise OrderError(ERROR_ORDER_EMPTY_CART)

        try:
            data = await self._api.post(
                "/orders",
                token=self._session.token,
                json={"items": snapshot.order_lines()},
            )
            order = Order.model_validate(data)
        except (ApiError, ValidationError) as e:
            logger.warning(f"Order placement failed: {e}")
            self._notifications.notify_error(ERROR_ORDER_FAILED, ERROR_TRY_AGAIN)
            raise OrderError(ERROR_ORDER_FAILED) from e

        self._cart.clear()
        logger.info(f"Order placed: {order.id}")
        self._notifications.notify(
            "Order placed successfully!", f"Order #{order.id} has been confirmed"
        )
        return order

    async def list_orders(self) -> List[Order]:
        """Fetch the user's orders, newest first as the server returns them."""
        try:
            data = await self._api.get("/orders", token=self._session.token)
            return [Order.model_validate(record) for record in data or []]
        except (ApiError, ValidationError, TypeError) as e:
            logger.warning(f"Failed to fetch orders: {e}")
            raise OrderError(ERROR_ORDERS_FETCH_FAILED) from e
