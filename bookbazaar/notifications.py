"""
Notification Service - short-lived user-facing messages (toasts).

Every state-changing success and most failures in the session, cart and
order services surface a notification here. Presentation is pluggable: a
handler receives each ``Notification`` and decides how to render it.
"""
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Deque, List

from bookbazaar.logging import get_logger

logger = get_logger(__name__)

# How many recent notifications are kept for inspection
HISTORY_SIZE = 50


class NotificationVariant(str, Enum):
    """Visual treatment of a notification."""
    DEFAULT = "default"
    DESTRUCTIVE = "destructive"  # Failures


@dataclass(frozen=True)
class Notification:
    """Title + description pair shown to the user."""
    title: str
    description: str
    variant: NotificationVariant = NotificationVariant.DEFAULT

    @property
    def is_error(self) -> bool:
        return self.variant == NotificationVariant.DESTRUCTIVE


NotificationHandler = Callable[[Notification], None]


class NotificationService:
    """Dispatches notifications to registered handlers and keeps a short history."""

    def __init__(self, history_size: int = HISTORY_SIZE):
        self._handlers: List[NotificationHandler] = []
        self._history: Deque[Notification] = deque(maxlen=history_size)

    def add_handler(self, handler: NotificationHandler) -> None:
        self._handlers.append(handler)

    @property
    def history(self) -> List[Notification]:
        return list(self._history)

    def notify(self, title: str, description: str) -> Notification:
        """Show a success/info notification."""
        return self._dispatch(Notification(title, description))

    def notify_error(self, title: str, description: str) -> Notification:
        """Show a failure notification (destructive variant)."""
        return self._dispatch(Notification(title, description, NotificationVariant.DESTRUCTIVE))

    def _dispatch(self, notification: Notification) -> Notification:
        self._history.append(notification)
        log = logger.warning if notification.is_error else logger.info
        log(f"Notification: {notification.title} - {notification.description}")

        for handler in list(self._handlers):
            try:
                handler(notification)
            except Exception as e:
                # Handler failures never reach the caller
                logger.warning(f"Notification handler {handler!r} failed: {e}", exc_info=True)
        return notification
