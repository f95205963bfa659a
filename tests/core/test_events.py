"""Tests for the event bus."""

import pytest

from keyvify.core.events import EventBus
from keyvify.core.models import Pair, StoreEvent


def test_subscribe_and_emit():
    bus = EventBus()
    received = []
    bus.subscribe(StoreEvent.VALUE_GET, received.append)

    pair = Pair("a", 1)
    bus.emit(StoreEvent.VALUE_GET, pair)
    bus.emit(StoreEvent.VALUE_SET, Pair("b", 2))

    assert received == [pair]


def test_subscribe_by_wire_name():
    """Test events can be named by their wire string."""
    bus = EventBus()
    deletes = []
    bus.subscribe("valueDelete", lambda key, count: deletes.append((key, count)))

    bus.emit(StoreEvent.VALUE_DELETE, "a", 1)

    assert deletes == [("a", 1)]
    assert bus.handler_count(StoreEvent.VALUE_DELETE) == 1


def test_unknown_event_name_rejected():
    bus = EventBus()
    with pytest.raises(ValueError):
        bus.subscribe("valueExplode", print)


def test_unsubscribe():
    bus = EventBus()
    calls = []
    remove = bus.subscribe(StoreEvent.CONNECT, lambda: calls.append("first"))
    bus.subscribe(StoreEvent.CONNECT, lambda: calls.append("second"))

    remove()
    bus.emit(StoreEvent.CONNECT)

    assert calls == ["second"]
    # Removing twice is harmless
    remove()


def test_handlers_run_in_subscription_order():
    bus = EventBus()
    order = []
    for i in range(3):
        bus.subscribe(StoreEvent.TRUNCATE, lambda count, i=i: order.append((i, count)))

    bus.emit(StoreEvent.TRUNCATE, 5)

    assert order == [(0, 5), (1, 5), (2, 5)]


def test_handler_errors_propagate():
    bus = EventBus()

    def broken(pair):
        raise RuntimeError("handler failed")

    bus.subscribe(StoreEvent.VALUE_GET, broken)
    with pytest.raises(RuntimeError, match="handler failed"):
        bus.emit(StoreEvent.VALUE_GET, Pair("a", 1))
