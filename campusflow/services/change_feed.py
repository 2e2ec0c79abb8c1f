"""Live delivery of newly inserted rows to subscribed callers.

Delivery is at-most-once: a subscriber that reconnects does not receive
events it missed and should re-list the collection instead.
"""

import asyncio
import logging
from threading import Lock

from campusflow.core import config
from campusflow.services.policy import Caller, Operation, authorize

logger = logging.getLogger(__name__)

_CLOSED = object()


def _running_loop() -> asyncio.AbstractEventLoop | None:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


class Subscription:
    """One caller's view of a collection's inserts.

    Events are buffered in a bounded queue owned by the subscriber's event
    loop. When the queue is full new events are dropped for this subscriber
    only.
    """

    def __init__(self, feed: 'ChangeFeed', collection: str, caller: Caller,
                 loop: asyncio.AbstractEventLoop, maxsize: int):
        self.collection = collection
        self.caller = caller
        self.dropped = 0
        self._feed = feed
        self._loop = loop
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def pending(self) -> int:
        return self._queue.qsize()

    def offer(self, payload: dict) -> None:
        if self._closed:
            return
        self._call_on_loop(self._enqueue, payload)

    async def get(self) -> dict | None:
        """Wait for the next event. Returns None once the subscription is closed."""
        if self._closed and self._queue.empty():
            return None
        item = await self._queue.get()
        if item is _CLOSED:
            return None
        return item

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._feed.unsubscribe(self)
        self._call_on_loop(self._shutdown)

    def __aiter__(self):
        return self

    async def __anext__(self) -> dict:
        item = await self.get()
        if item is None:
            raise StopAsyncIteration
        return item

    def _call_on_loop(self, callback, *args) -> None:
        if _running_loop() is self._loop:
            callback(*args)
            return
        try:
            self._loop.call_soon_threadsafe(callback, *args)
        except RuntimeError:
            # The subscriber's loop is gone; nobody is left to read.
            self._closed = True

    def _enqueue(self, payload: dict) -> None:
        if self._closed:
            return
        try:
            self._queue.put_nowait(payload)
        except asyncio.QueueFull:
            self.dropped += 1
            logger.warning(
                'Dropped %s event for subscriber %s; queue is full.',
                self.collection,
                self.caller.id,
            )

    def _shutdown(self) -> None:
        while not self._queue.empty():
            self._queue.get_nowait()
        self._queue.put_nowait(_CLOSED)


class ChangeFeed:
    def __init__(self, queue_size: int | None = None):
        self._queue_size = queue_size or config.FEED_QUEUE_SIZE
        self._subscriptions: dict[str, list[Subscription]] = {}
        self._lock = Lock()

    def subscribe(self, collection: str, caller: Caller) -> Subscription:
        """Must be called from the event loop that will consume the events."""
        loop = asyncio.get_running_loop()
        subscription = Subscription(self, collection, caller, loop, self._queue_size)
        with self._lock:
            self._subscriptions.setdefault(collection, []).append(subscription)
        logger.info('Caller %s subscribed to %s', caller.id, collection)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            subscribers = self._subscriptions.get(subscription.collection, [])
            if subscription in subscribers:
                subscribers.remove(subscription)

    def subscriber_count(self, collection: str) -> int:
        with self._lock:
            return len(self._subscriptions.get(collection, []))

    def publish(self, collection: str, record, payload: dict) -> int:
        """Offer an inserted row to every subscriber allowed to read it."""
        with self._lock:
            subscribers = list(self._subscriptions.get(collection, []))

        delivered = 0
        for subscription in subscribers:
            if authorize(Operation.READ, collection, subscription.caller, record):
                subscription.offer(payload)
                delivered += 1
        return delivered


change_feed = ChangeFeed()
