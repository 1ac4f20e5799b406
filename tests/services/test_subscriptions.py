from __future__ import annotations

import threading

import pytest

from currency_exchange.services import SubscriberRegistry, SubscriptionClosed


def test_subscriber_receives_initial_value():
    registry: SubscriberRegistry[int] = SubscriberRegistry()

    subscription = registry.subscribe(1)

    assert subscription.get(timeout=1) == 1
    assert len(registry) == 1


def test_slow_reader_sees_latest_value_only():
    registry: SubscriberRegistry[int] = SubscriberRegistry()
    subscription = registry.subscribe(0)

    registry.publish(1)
    registry.publish(2)

    assert subscription.get(timeout=1) == 2
    assert subscription.get_nowait() is None


def test_get_times_out_when_nothing_published():
    registry: SubscriberRegistry[int] = SubscriberRegistry()
    subscription = registry.subscribe(0)
    subscription.get(timeout=1)

    with pytest.raises(TimeoutError):
        subscription.get(timeout=0.05)


def test_close_unsubscribes_and_wakes_waiters():
    registry: SubscriberRegistry[int] = SubscriberRegistry()
    subscription = registry.subscribe(0)
    subscription.get(timeout=1)
    errors: list[BaseException] = []

    def _wait():
        try:
            subscription.get(timeout=5)
        except SubscriptionClosed as exc:
            errors.append(exc)

    waiter = threading.Thread(target=_wait)
    waiter.start()
    subscription.close()
    waiter.join(timeout=5)

    assert len(errors) == 1
    assert len(registry) == 0
    registry.publish(3)
    assert subscription.get_nowait() is None


def test_iteration_stops_after_close():
    registry: SubscriberRegistry[str] = SubscriberRegistry()
    received: list[str] = []

    with registry.subscribe("first") as subscription:
        for value in subscription:
            received.append(value)
            if value == "first":
                registry.publish("second")
            else:
                subscription.close()

    assert received == ["first", "second"]


def test_publish_reaches_every_subscriber():
    registry: SubscriberRegistry[int] = SubscriberRegistry()
    first = registry.subscribe(0)
    second = registry.subscribe(0)

    registry.publish(5)

    assert first.get(timeout=1) == 5
    assert second.get(timeout=1) == 5
