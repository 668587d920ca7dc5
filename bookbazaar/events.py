"""
Identity-change events.

The session manager publishes an ``IdentityChanged`` event whenever its
identity or token changes; dependents (the cart) subscribe explicitly when the
storefront is wired together.
"""
from dataclasses import dataclass
from typing import TYPE_CHECKING, Awaitable, Callable, List, Optional

from bookbazaar.logging import get_logger

if TYPE_CHECKING:
    from bookbazaar.auth.models import Identity

logger = get_logger(__name__)


@dataclass(frozen=True)
class IdentityChanged:
    """Snapshot of the session after an identity-affecting transition."""
    identity: Optional["Identity"]
    token: Optional[str]

    @property
    def authenticated(self) -> bool:
        return self.identity is not None and self.token is not None


Listener = Callable[[IdentityChanged], Awaitable[None]]


class EventBus:
    """In-order async publish/subscribe for identity changes."""

    def __init__(self):
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener. Returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def publish(self, event: IdentityChanged) -> None:
        """Deliver ``event`` to every listener, one after another, in subscription order."""
        logger.debug(f"Publishing identity change (authenticated={event.authenticated})")
        for listener in list(self._listeners):
            await listener(event)
