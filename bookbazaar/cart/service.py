"""
Cart Synchronizer - local mirror of the server-side cart.

Write-through: every mutation goes to the server first and, on success,
the whole cart is re-read. Local items are never patched optimistically,
so after a successful call the mirror equals what ``GET /cart`` returns.
"""
import asyncio
from decimal import Decimal
from typing import List, Optional

from bookbazaar.api_client import ApiClient
from bookbazaar.auth.session import SessionManager
from bookbazaar.errors import (
    ERROR_CART_ADD_FAILED,
    ERROR_CART_REMOVE_FAILED,
    ERROR_CART_UPDATE_FAILED,
    ERROR_LOGIN_REQUIRED,
    ERROR_TRY_AGAIN,
    ApiError,
)
from bookbazaar.events import IdentityChanged
from bookbazaar.logging import get_logger
from bookbazaar.notifications import NotificationService

from .models import Cart, CartLineItem

logger = get_logger(__name__)

MIN_QUANTITY = 1


class CartSynchronizer:
    """
    Mirrors the authenticated user's cart.

    Mutations (and the reload that follows each of them) are serialized
    through one lock, so overlapping calls resolve in the order issued.
    ``clear()`` and identity-loss clearing never wait for the lock.
    """

    def __init__(
        self,
        api: ApiClient,
        session: SessionManager,
        notifications: NotificationService,
    ):
        self._api = api
        self._session = session
        self._notifications = notifications
        self._items: List[CartLineItem] = []
        self._lock = asyncio.Lock()
        self.loading = False

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def items(self) -> List[CartLineItem]:
        return list(self._items)

    @property
    def cart(self) -> Cart:
        return Cart(items=list(self._items))

    @property
    def total_items(self) -> int:
        return self.cart.total_items

    @property
    def total_price(self) -> Decimal:
        return self.cart.total_price

    # ------------------------------------------------------------------
    # Session coupling
    # ------------------------------------------------------------------

    async def handle_identity_changed(self, event: IdentityChanged) -> None:
        """Reload when a user is confirmed; drop local items when there is none."""
        if event.authenticated:
            await self.load()
        else:
            self.clear()

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def load(self) -> bool:
        """
        Replace local items with the server's cart.

        Failures are logged only; the previous items stay in place.

        Returns:
            True if the local mirror was replaced
        """
        async with self._lock:
            return await self._reload()

    async def add_item(self, book_id: str, title: Optional[str] = None, quantity: int = 1) -> None:
        """Add a book to the cart. ``title`` is only used for the confirmation text."""
        token = self._session.token
        if not token:
            self._notifications.notify_error(
                ERROR_LOGIN_REQUIRED, "You need to be logged in to add items to cart"
            )
            return

        async with self._lock:
            try:
                await self._api.post(
                    "/cart",
                    token=token,
                    json={"bookId": book_id, "quantity": max(MIN_QUANTITY, quantity)},
                )
            except ApiError as e:
                logger.warning(f"Add to cart failed for book {book_id}: {e}")
                self._notifications.notify_error(ERROR_CART_ADD_FAILED, ERROR_TRY_AGAIN)
                return
            await self._reload()

        label = title or "Item"
        self._notifications.notify("Added to cart", f"{label} has been added to your cart")

    async def set_quantity(self, item_id: str, quantity: int) -> None:
        """Set a line's quantity. Values below 1 are raised to 1."""
        token = self._session.token
        if not token:
            return

        quantity = max(MIN_QUANTITY, quantity)
        async with self._lock:
            try:
                await self._api.put(f"/cart/{item_id}", token=token, json={"quantity": quantity})
            except ApiError as e:
                logger.warning(f"Quantity update failed for line {item_id}: {e}")
                self._notifications.notify_error(ERROR_CART_UPDATE_FAILED, ERROR_TRY_AGAIN)
                return
            await self._reload()

    async def remove_item(self, item_id: str) -> None:
        """Delete a line from the cart."""
        token = self._session.token
        if not token:
            return

        async with self._lock:
            try:
                await self._api.delete(f"/cart/{item_id}", token=token)
            except ApiError as e:
                logger.warning(f"Remove failed for line {item_id}: {e}")
                self._notifications.notify_error(ERROR_CART_REMOVE_FAILED, ERROR_TRY_AGAIN)
                return
            await self._reload()

        self._notifications.notify("Removed from cart", "Item has been removed from your cart")

    def clear(self) -> None:
        """Empty the local mirror without contacting the server."""
        self._items = []

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _reload(self) -> bool:
        """Re-read the cart. Caller holds the lock."""
        token = self._session.token
        if not token:
            return False

        self.loading = True
        try:
            data = await self._api.get("/cart", token=token)
            records = data.get("items") if isinstance(data, dict) else None
            items = [CartLineItem.from_dict(record) for record in records or []]
        except ApiError as e:
            logger.warning(f"Failed to fetch cart: {e}")
            return False
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Malformed cart response, keeping previous items: {e}")
            return False
        finally:
            self.loading = False

        # Session ended or changed while the request was in flight
        if self._session.token != token:
            logger.info("Discarding cart response for a stale session")
            return False

        self._items = items
        return True
