"""Fan-out of ranked leaderboard snapshots to live subscribers."""

from __future__ import annotations

import asyncio
import itertools
import logging
import uuid
from dataclasses import dataclass, field
from threading import RLock
from typing import Any, Dict, List, Optional

from ..core.errors import BroadcastFailure

logger = logging.getLogger(__name__)

UPDATE_EVENT = "leaderboard-update"


@dataclass(frozen=True)
class LeaderboardSnapshot:
    """Serialized ranked user list stamped with its commit sequence."""

    sequence: int
    users: List[Dict[str, Any]]

    def to_message(self) -> Dict[str, Any]:
        return {"type": UPDATE_EVENT, "sequence": self.sequence, "payload": self.users}

    def find(self, user_id: Any) -> Optional[Dict[str, Any]]:
        for user in self.users:
            if user["id"] == user_id:
                return user
        return None


class Subscriber:
    """Bounded mailbox for one observer.

    Only touched from the event loop thread. Snapshots that are not newer
    than the last accepted one are dropped, so delivery never goes back in
    time.
    """

    def __init__(self, maxsize: int = 32) -> None:
        self.id = uuid.uuid4().hex
        self.last_sequence = 0
        self._queue: asyncio.Queue[LeaderboardSnapshot] = asyncio.Queue(maxsize=maxsize)

    def offer(self, snapshot: LeaderboardSnapshot) -> bool:
        if snapshot.sequence <= self.last_sequence:
            return False
        if self._queue.full():
            self._queue.get_nowait()
        self._queue.put_nowait(snapshot)
        self.last_sequence = snapshot.sequence
        return True

    def pending(self) -> int:
        return self._queue.qsize()

    async def get(self) -> LeaderboardSnapshot:
        return await self._queue.get()


@dataclass
class UpdateBroadcaster:
    """Observer registry that pushes snapshots to every subscriber."""

    mailbox_size: int = 32
    _lock: RLock = field(default_factory=RLock, init=False, repr=False)
    _subscribers: Dict[str, Subscriber] = field(default_factory=dict, init=False)
    _loop: Optional[asyncio.AbstractEventLoop] = field(default=None, init=False, repr=False)
    _sequence: Any = field(default_factory=lambda: itertools.count(1), init=False, repr=False)

    # ---------- lifecycle ----------
    def bind(self, loop: asyncio.AbstractEventLoop) -> None:
        """Attach the event loop that owns the subscriber mailboxes."""
        self._loop = loop

    def unbind(self) -> None:
        self._loop = None
        with self._lock:
            self._subscribers.clear()

    def next_sequence(self) -> int:
        with self._lock:
            return next(self._sequence)

    # ---------- registry ----------
    def subscribe(self) -> Subscriber:
        subscriber = Subscriber(maxsize=self.mailbox_size)
        with self._lock:
            self._subscribers[subscriber.id] = subscriber
        logger.info("Subscriber %s connected (%d live)", subscriber.id, len(self))
        return subscriber

    def unsubscribe(self, subscriber: Subscriber) -> None:
        with self._lock:
            removed = self._subscribers.pop(subscriber.id, None)
        if removed is not None:
            logger.info("Subscriber %s disconnected (%d live)", subscriber.id, len(self))

    def __len__(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def _snapshot_subscribers(self) -> List[Subscriber]:
        with self._lock:
            return list(self._subscribers.values())

    # ---------- delivery ----------
    def publish(self, snapshot: LeaderboardSnapshot) -> None:
        """Hand ``snapshot`` to the event loop without waiting for delivery.

        Safe to call from worker threads. Never raises.
        """

        loop = self._loop
        if loop is None or loop.is_closed():
            logger.debug("No event loop bound; snapshot %s not broadcast", snapshot.sequence)
            return

        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is loop:
            self.broadcast(snapshot)
            return
        try:
            loop.call_soon_threadsafe(self.broadcast, snapshot)
        except RuntimeError as exc:
            logger.warning("Dropping snapshot %s: %s", snapshot.sequence, exc)

    def broadcast(self, snapshot: LeaderboardSnapshot) -> int:
        """Offer ``snapshot`` to every subscriber; return how many took it."""

        delivered = 0
        for subscriber in self._snapshot_subscribers():
            try:
                if subscriber.offer(snapshot):
                    delivered += 1
            except Exception as exc:
                self.report_failure(subscriber, exc)
        return delivered

    def report_failure(self, subscriber: Subscriber, exc: BaseException) -> None:
        """Log a delivery failure and drop the subscriber."""

        failure = BroadcastFailure(f"Delivery to subscriber {subscriber.id} failed: {exc}")
        logger.warning("%s", failure.message)
        self.unsubscribe(subscriber)


__all__ = [
    "LeaderboardSnapshot",
    "Subscriber",
    "UPDATE_EVENT",
    "UpdateBroadcaster",
]
