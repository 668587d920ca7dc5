"""Tests for identity-changed publish/subscribe"""
import pytest

from bookbazaar.auth import Identity
from bookbazaar.events import EventBus, IdentityChanged


@pytest.mark.asyncio
async def test_publish_in_subscription_order_and_unsubscribe():
    bus = EventBus()
    received = []

    async def first(event):
        received.append(("first", event.authenticated))

    async def second(event):
        received.append(("second", event.authenticated))

    unsubscribe = bus.subscribe(first)
    bus.subscribe(second)
    identity = Identity(id="1", username="alice", email="a@example.com")

    await bus.publish(IdentityChanged(identity=identity, token="t"))
    unsubscribe()
    await bus.publish(IdentityChanged(identity=None, token=None))

    assert received == [("first", True), ("second", True), ("second", False)]


def test_token_without_identity_is_not_authenticated():
    assert IdentityChanged(identity=None, token="t").authenticated is False


@pytest.mark.asyncio
async def test_session_publishes_on_login_and_logout(store, login):
    events = []

    async def record(event):
        events.append(event)

    store.session.subscribe(record)
    await login()
    await store.session.logout()

    assert [e.authenticated for e in events] == [True, False]
    assert events[0].identity.username == "alice"
