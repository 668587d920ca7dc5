"""
Storefront - composition root.

Builds every service once and wires the cart to the session explicitly.
Nothing here is global: create a ``Storefront`` at application start and
hand its attributes to whatever needs them.
"""
from typing import Optional

import httpx

from bookbazaar.api_client import ApiClient
from bookbazaar.auth.session import SessionManager
from bookbazaar.cart.service import CartSynchronizer
from bookbazaar.catalog.service import CatalogService
from bookbazaar.config import Settings, get_settings
from bookbazaar.events import EventBus
from bookbazaar.logging import get_logger
from bookbazaar.notifications import NotificationService
from bookbazaar.orders.service import OrderService
from bookbazaar.storage import JsonFileStorage, KeyValueStorage

logger = get_logger(__name__)


class Storefront:
    """Session, cart, orders and catalog sharing one HTTP client."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        storage: Optional[KeyValueStorage] = None,
        notifications: Optional[NotificationService] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or get_settings()
        self.storage = storage or JsonFileStorage(self.settings.storage_path)
        self.notifications = notifications or NotificationService()
        self.api = ApiClient(self.settings, transport=transport)
        self.events = EventBus()

        self.session = SessionManager(self.api, self.storage, self.notifications, self.events)
        self.cart = CartSynchronizer(self.api, self.session, self.notifications)
        self._unsubscribe_cart = self.session.subscribe(self.cart.handle_identity_changed)

        self.orders = OrderService(self.api, self.session, self.cart, self.notifications)
        self.catalog = CatalogService(self.api, self.session, self.notifications)

    async def start(self) -> None:
        """Rehydrate the session; the cart follows through its subscription."""
        logger.info(f"Starting storefront against {self.settings.api_url}")
        await self.session.initialize()

    async def aclose(self) -> None:
        self._unsubscribe_cart()
        await self.api.aclose()

    async def __aenter__(self) -> "Storefront":
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
