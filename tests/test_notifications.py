"""Tests for notification service"""
from bookbazaar.notifications import NotificationService, NotificationVariant


def test_notify_records_history_and_calls_handlers():
    service = NotificationService()
    shown = []
    service.add_handler(shown.append)

    service.notify("Added to cart", "Dune has been added to your cart")
    service.notify_error("Failed to add to cart", "Please try again")

    assert [n.title for n in shown] == ["Added to cart", "Failed to add to cart"]
    assert shown[0].variant == NotificationVariant.DEFAULT
    assert shown[1].is_error
    assert service.history == shown


def test_failing_handler_does_not_propagate():
    service = NotificationService()
    shown = []

    def broken(notification):
        raise RuntimeError("renderer gone")

    service.add_handler(broken)
    service.add_handler(shown.append)

    service.notify("Logged out", "See you soon!")

    assert len(shown) == 1


def test_history_is_bounded():
    service = NotificationService(history_size=2)

    for i in range(5):
        service.notify(f"n{i}", "")

    assert [n.title for n in service.history] == ["n3", "n4"]
