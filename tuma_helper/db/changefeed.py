# tuma_helper/db/changefeed.py
"""
In-process change feed.

The gateway publishes one ChangeEvent per inserted/updated/deleted row after
the transaction commits. Subscribers register a table, an event kind and an
equality filter, and receive matching events on an asyncio queue bound to the
loop they subscribed from. Publishing is thread-safe, so sync request handlers
running in the threadpool can feed async SSE streams.
"""
import asyncio
import itertools
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

INSERT = "INSERT"
UPDATE = "UPDATE"
DELETE = "DELETE"
ANY = "*"


@dataclass(frozen=True)
class ChangeEvent:
    table: str
    event: str
    record: Dict[str, Any]
    committed_at: datetime = field(default_factory=datetime.utcnow)


class Subscription:
    def __init__(self, feed: "ChangeFeed", table: str, event: str, filters: Dict[str, Any]):
        self.id = next(feed._ids)
        self.table = table
        self.event = event
        self.filters = dict(filters)
        self.queue: asyncio.Queue = asyncio.Queue()
        self.loop = asyncio.get_running_loop()
        self._feed = feed
        self.closed = False

    def matches(self, change: ChangeEvent) -> bool:
        if change.table != self.table:
            return False
        if self.event != ANY and change.event != self.event:
            return False
        return all(change.record.get(key) == value for key, value in self.filters.items())

    def deliver(self, change: ChangeEvent) -> None:
        self.loop.call_soon_threadsafe(self.queue.put_nowait, change)

    async def get(self, timeout: Optional[float] = None) -> ChangeEvent:
        if timeout is None:
            return await self.queue.get()
        return await asyncio.wait_for(self.queue.get(), timeout=timeout)

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            self._feed.unsubscribe(self)

    def __aiter__(self):
        return self

    async def __anext__(self) -> ChangeEvent:
        if self.closed:
            raise StopAsyncIteration
        return await self.queue.get()

    async def __aenter__(self) -> "Subscription":
        return self

    async def __aexit__(self, *exc) -> None:
        self.close()


class ChangeFeed:
    def __init__(self):
        self._lock = threading.Lock()
        self._subscriptions: Dict[int, Subscription] = {}
        self._ids = itertools.count(1)

    def subscribe(self, table: str, event: str = ANY, filters: Optional[Dict[str, Any]] = None) -> Subscription:
        """Must be called from inside a running event loop."""
        sub = Subscription(self, table, event, filters or {})
        with self._lock:
            self._subscriptions[sub.id] = sub
        logger.info("Change-feed subscription %d opened: %s %s %s", sub.id, table, event, sub.filters)
        return sub

    def unsubscribe(self, sub: Subscription) -> None:
        with self._lock:
            self._subscriptions.pop(sub.id, None)
        logger.info("Change-feed subscription %d closed", sub.id)

    def publish(self, change: ChangeEvent) -> int:
        with self._lock:
            targets = [s for s in self._subscriptions.values() if s.matches(change)]
        for sub in targets:
            try:
                sub.deliver(change)
            except RuntimeError:
                # subscriber's loop is gone; drop it
                self.unsubscribe(sub)
        return len(targets)

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)


feed = ChangeFeed()
