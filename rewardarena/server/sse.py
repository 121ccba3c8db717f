# rewardarena/server/sse.py
"""Reward and success events fanned out to dashboard subscribers over SSE.

Each subscriber may restrict itself to a subset of regimes. Queues are
bounded and drop their oldest event when full, so a stalled dashboard only
loses history and never slows the frame loop. A short replay buffer lets a
reconnecting browser (Last-Event-ID) catch up on what it missed.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import time
import uuid
from collections import deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterable

from .config import settings

logger = logging.getLogger("rewardarena.server")

# (event_id, event_type, data)
Frame = tuple[int, str, str]


@dataclass(frozen=True)
class ArenaEvent:
    event_id: int
    event_type: str  # "reward" | "success"
    regime: str | None
    data: str


@dataclass
class Subscriber:
    """One connected dashboard and the regimes it follows."""

    subscriber_id: str
    queue: asyncio.Queue[Frame]
    regimes: frozenset[str] | None = None  # None follows every panel
    last_event_id: int = 0
    connected_at: float = field(default_factory=time.time)
    dropped: int = 0
    closed: bool = False

    def wants(self, regime: str | None) -> bool:
        return regime is None or self.regimes is None or regime in self.regimes

    def offer(self, frame: Frame) -> None:
        """Queue without blocking; the oldest queued frame makes room."""
        if self.queue.full():
            with contextlib.suppress(asyncio.QueueEmpty):
                self.queue.get_nowait()
                self.dropped += 1
        self.queue.put_nowait(frame)
        self.last_event_id = frame[0]

    def close(self) -> None:
        self.closed = True
        # Wakes a reader blocked on queue.get()
        with contextlib.suppress(asyncio.QueueFull):
            self.queue.put_nowait((0, "_close", ""))


class EventHub:
    """Fan-out of arena events to SSE subscribers."""

    def __init__(self, queue_size: int | None = None, replay_size: int | None = None) -> None:
        self._subscribers: dict[str, Subscriber] = {}
        self._replay: deque[ArenaEvent] = deque(maxlen=replay_size or settings.SSE_REPLAY_MAX)
        self._queue_size = queue_size or settings.SSE_QUEUE_SIZE
        self._next_id = 0
        self._closed = False

    async def subscribe(self, regimes: Iterable[str] | None = None, last_event_id: int = 0) -> Subscriber:
        """Add a subscriber, replaying buffered events newer than last_event_id."""
        if len(self._subscribers) >= settings.SSE_MAX_CLIENTS:
            oldest = min(self._subscribers.values(), key=lambda s: s.connected_at)
            self._drop(oldest)
            logger.warning(f"Subscriber limit reached, dropped {oldest.subscriber_id}")

        sub = Subscriber(
            subscriber_id=uuid.uuid4().hex[:8],
            queue=asyncio.Queue(maxsize=self._queue_size),
            regimes=frozenset(regimes) if regimes is not None else None,
            last_event_id=last_event_id,
        )
        if last_event_id:
            for event in self._replay:
                if event.event_id > last_event_id and sub.wants(event.regime):
                    sub.offer((event.event_id, event.event_type, event.data))
        self._subscribers[sub.subscriber_id] = sub
        follows = ",".join(sorted(sub.regimes)) if sub.regimes is not None else "all"
        logger.info(f"Subscriber {sub.subscriber_id} joined (regimes={follows}, total={len(self._subscribers)})")
        return sub

    async def unsubscribe(self, sub: Subscriber) -> None:
        if self._subscribers.pop(sub.subscriber_id, None) is not None:
            logger.info(
                f"Subscriber {sub.subscriber_id} left (dropped={sub.dropped}, total={len(self._subscribers)})"
            )

    def _drop(self, sub: Subscriber) -> None:
        sub.close()
        self._subscribers.pop(sub.subscriber_id, None)

    async def publish(self, event_type: str, payload: dict[str, Any], regime: str | None = None) -> int:
        """Record an event and queue it for matching subscribers. Returns how many got it."""
        self._next_id += 1
        event = ArenaEvent(self._next_id, event_type, regime, json.dumps(payload))
        self._replay.append(event)

        notified = 0
        for sub in list(self._subscribers.values()):
            if sub.closed or not sub.wants(regime):
                continue
            sub.offer((event.event_id, event.event_type, event.data))
            notified += 1
        return notified

    async def publish_step(self, regime: str, reward: float, done: bool, success_count: int) -> int:
        """Reward event every tick, plus a success event on the terminal tick."""
        notified = await self.publish("reward", {"regime": regime, "reward": reward}, regime=regime)
        if done:
            await self.publish("success", {"regime": regime, "count": success_count}, regime=regime)
        return notified

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    @property
    def is_closed(self) -> bool:
        return self._closed

    def start(self) -> None:
        """Accept subscribers again after a previous shutdown."""
        self._closed = False

    async def shutdown(self) -> None:
        self._closed = True
        for sub in list(self._subscribers.values()):
            self._drop(sub)
        logger.info("Event hub shutdown complete")


async def sse_event_generator(sub: Subscriber, hub: EventHub) -> AsyncIterator[str]:
    """Render queued events as SSE frames, with keepalives while idle."""
    try:
        while not sub.closed and not hub.is_closed:
            try:
                event_id, event_type, data = await asyncio.wait_for(sub.queue.get(), timeout=settings.SSE_KEEPALIVE_S)
            except TimeoutError:
                yield f": keepalive {int(time.time())}\n\n"
                continue
            if event_type == "_close":
                break
            yield f"id: {event_id}\nevent: {event_type}\ndata: {data}\n\n"
    finally:
        await hub.unsubscribe(sub)


# Global instance
event_hub = EventHub()
