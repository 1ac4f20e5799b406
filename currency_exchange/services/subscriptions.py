"""Latest-value subscriptions used to broadcast rate state to observers."""

from __future__ import annotations

import threading
import uuid
from collections.abc import Iterator
from typing import Generic, TypeVar

T = TypeVar("T")

_EMPTY = object()


class SubscriptionClosed(Exception):
    """Raised by ``Subscription.get`` once the subscription is closed and drained."""


class Subscription(Generic[T]):
    """Single-slot delivery channel.

    Publishing overwrites an undelivered value, so a slow reader skips intermediate
    values but always sees them in production order and never blocks the publisher.
    """

    def __init__(self, registry: SubscriberRegistry[T], key: uuid.UUID) -> None:
        self._registry = registry
        self.key = key
        self._condition = threading.Condition()
        self._slot: object = _EMPTY
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def get(self, timeout: float | None = None) -> T:
        """Return the next value, waiting up to ``timeout`` seconds.

        Raises:
            TimeoutError: Nothing was published within ``timeout``.
            SubscriptionClosed: The subscription was closed with nothing pending.
        """

        with self._condition:
            ready = self._condition.wait_for(
                lambda: self._slot is not _EMPTY or self._closed, timeout=timeout
            )
            if self._slot is not _EMPTY:
                value, self._slot = self._slot, _EMPTY
                return value  # type: ignore[return-value]
            if not ready:
                raise TimeoutError("No value published before timeout")
            raise SubscriptionClosed()

    def get_nowait(self) -> T | None:
        with self._condition:
            if self._slot is _EMPTY:
                return None
            value, self._slot = self._slot, _EMPTY
            return value  # type: ignore[return-value]

    def close(self) -> None:
        self._registry.unsubscribe(self.key)
        with self._condition:
            self._closed = True
            self._condition.notify_all()

    def _deliver(self, value: T) -> None:
        with self._condition:
            if self._closed:
                return
            self._slot = value
            self._condition.notify_all()

    def __iter__(self) -> Iterator[T]:
        while True:
            try:
                yield self.get()
            except SubscriptionClosed:
                return

    def __enter__(self) -> Subscription[T]:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class SubscriberRegistry(Generic[T]):
    """Subscriptions keyed by handle; removal is explicit through ``unsubscribe``."""

    def __init__(self) -> None:
        self._subscriptions: dict[uuid.UUID, Subscription[T]] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def subscribe(self, initial: T) -> Subscription[T]:
        subscription: Subscription[T] = Subscription(self, uuid.uuid4())
        subscription._deliver(initial)
        with self._lock:
            self._subscriptions[subscription.key] = subscription
        return subscription

    def unsubscribe(self, key: uuid.UUID) -> None:
        with self._lock:
            self._subscriptions.pop(key, None)

    def publish(self, value: T) -> None:
        with self._lock:
            subscriptions = list(self._subscriptions.values())
        for subscription in subscriptions:
            subscription._deliver(value)
