# src/snaptick/core/live.py

"""
Live (push-updated) reads.

Stores are synchronous and may be mutated from worker threads, while
subscribers are coroutines on an event loop. ChangeFeed bridges the two:
publishers call `publish(topic)` from any thread, and every subscriber queue
receives the topic on its own loop via `call_soon_threadsafe`.

`watch()` turns a feed + a blocking fetch function into an async generator
that yields a fresh snapshot on subscribe and after each relevant change.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
from collections.abc import AsyncIterator, Callable
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ChangeFeed:
    """Thread-safe fan-out of change topics to asyncio subscribers."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subs: list[tuple[asyncio.AbstractEventLoop, asyncio.Queue[str]]] = []

    def subscribe(self) -> asyncio.Queue[str]:
        """Must be called from a running event loop."""
        loop = asyncio.get_running_loop()
        queue: asyncio.Queue[str] = asyncio.Queue()
        with self._lock:
            self._subs.append((loop, queue))
        return queue

    def unsubscribe(self, queue: asyncio.Queue[str]) -> None:
        with self._lock:
            self._subs = [(lp, q) for (lp, q) in self._subs if q is not queue]

    def publish(self, topic: str) -> None:
        with self._lock:
            subs = list(self._subs)
        for loop, queue in subs:
            try:
                loop.call_soon_threadsafe(queue.put_nowait, topic)
            except RuntimeError:
                # Subscriber's loop is already closed; it will never read again.
                self.unsubscribe(queue)

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subs)


async def watch(
    feed: ChangeFeed,
    fetch: Callable[[], T],
    *,
    matches: Callable[[str], bool] = lambda _topic: True,
) -> AsyncIterator[T]:
    """
    Yield `fetch()` now and again after every matching change.

    A burst of changes that arrives while the consumer is busy collapses into
    a single refetch. The generator never ends on its own; close it (or cancel
    the consuming task) to unsubscribe.
    """
    queue = feed.subscribe()
    try:
        yield await asyncio.to_thread(fetch)
        while True:
            topic = await queue.get()
            relevant = matches(topic)
            while not queue.empty():
                relevant = matches(queue.get_nowait()) or relevant
            if relevant:
                yield await asyncio.to_thread(fetch)
    finally:
        feed.unsubscribe(queue)


class LiveValue(Generic[T]):
    """
    Observable in-memory value owned by the event loop.

    Listeners are called synchronously on every `set`, in subscription order.
    """

    def __init__(self, initial: T) -> None:
        self._value = initial
        self._listeners: list[Callable[[T], None]] = []

    @property
    def value(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        self._value = value
        for listener in list(self._listeners):
            try:
                listener(value)
            except Exception:
                logger.exception("LiveValue listener failed")

    def subscribe(self, listener: Callable[[T], None]) -> Callable[[], None]:
        """Register a listener; returns a function that removes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            with contextlib.suppress(ValueError):
                self._listeners.remove(listener)

        return _unsubscribe
