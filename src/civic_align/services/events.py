"""Domain event outbox, live subscriptions and the relay between them.

State changes append a :class:`DomainEvent` in the same transaction that
makes the change. :class:`OutboxRelay` later fans pending events out to
:class:`EventHub` subscribers and marks them dispatched only after fan-out,
so a crash in between redelivers rather than drops (at-least-once).
"""

from __future__ import annotations

import asyncio
import logging
import queue
import threading
from collections import defaultdict
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from civic_align.db.session import SessionLocal
from civic_align.models import DomainEvent

logger = logging.getLogger(__name__)

# Subscribing to this id receives every event.
ALL_AGGREGATES = "*"


def record_event(
    db: Session,
    event_type: str,
    aggregate_id: str,
    payload: dict[str, Any] | None = None,
) -> DomainEvent:
    """Append an event to the outbox as part of the caller's transaction."""
    event = DomainEvent(
        event_type=event_type,
        aggregate_id=aggregate_id,
        payload=payload or {},
    )
    db.add(event)
    return event


@dataclass(frozen=True)
class EventMessage:
    """Event as delivered to subscribers."""

    id: int
    event_type: str
    aggregate_id: str
    payload: dict[str, Any]


_CLOSED = object()


class Subscription:
    """Stream of events for one aggregate id.

    Iterating blocks until the next event arrives and stops once the
    subscription is closed.
    """

    def __init__(self, aggregate_id: str) -> None:
        self.aggregate_id = aggregate_id
        self._queue: queue.Queue[object] = queue.Queue()
        self.closed = False

    def put(self, message: EventMessage) -> None:
        if not self.closed:
            self._queue.put(message)

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            self._queue.put(_CLOSED)

    def get(self, timeout: float | None = None) -> EventMessage | None:
        """Return the next event, or None on timeout or once closed."""
        try:
            item = self._queue.get(timeout=timeout)
        except queue.Empty:
            return None
        if item is _CLOSED:
            return None
        return item  # type: ignore[return-value]

    def __iter__(self) -> Iterator[EventMessage]:
        while True:
            item = self._queue.get()
            if item is _CLOSED:
                return
            yield item  # type: ignore[misc]


class EventHub:
    """In-process fan-out of events to live subscribers."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subscribers: dict[str, list[Subscription]] = defaultdict(list)

    def subscribe(self, aggregate_id: str) -> tuple[Subscription, Callable[[], None]]:
        """Register interest in ``aggregate_id``.

        Returns:
            The event stream and a callable that unsubscribes and closes it.
        """
        subscription = Subscription(aggregate_id)
        with self._lock:
            self._subscribers[aggregate_id].append(subscription)

        def unsubscribe() -> None:
            with self._lock:
                subscribers = self._subscribers.get(aggregate_id, [])
                if subscription in subscribers:
                    subscribers.remove(subscription)
                if not subscribers:
                    self._subscribers.pop(aggregate_id, None)
            subscription.close()

        return subscription, unsubscribe

    def publish(self, message: EventMessage) -> int:
        """Deliver ``message`` to matching subscribers and return how many got it."""
        with self._lock:
            targets = list(self._subscribers.get(message.aggregate_id, ()))
            if message.aggregate_id != ALL_AGGREGATES:
                targets.extend(self._subscribers.get(ALL_AGGREGATES, ()))
        for subscription in targets:
            subscription.put(message)
        return len(targets)

    def subscriber_count(self, aggregate_id: str) -> int:
        with self._lock:
            return len(self._subscribers.get(aggregate_id, ()))


class OutboxRelay:
    """Moves pending outbox events to the hub."""

    def __init__(
        self,
        hub: EventHub,
        session_factory: sessionmaker[Session] | None = None,
    ) -> None:
        self.hub = hub
        self.session_factory = session_factory or SessionLocal

    def dispatch_pending(self, batch_size: int = 100) -> int:
        """Publish up to ``batch_size`` undispatched events in id order.

        Returns:
            Number of events published and marked dispatched.
        """
        with self.session_factory() as db:
            events = list(
                db.execute(
                    select(DomainEvent)
                    .where(DomainEvent.dispatched.is_(False))
                    .order_by(DomainEvent.id)
                    .limit(batch_size)
                ).scalars()
            )
            if not events:
                return 0

            for event in events:
                self.hub.publish(
                    EventMessage(
                        id=event.id,
                        event_type=event.event_type,
                        aggregate_id=event.aggregate_id,
                        payload=dict(event.payload or {}),
                    )
                )

            db.execute(
                update(DomainEvent)
                .where(DomainEvent.id.in_([e.id for e in events]))
                .values(dispatched=True)
                .execution_options(synchronize_session=False)
            )
            db.commit()
            logger.debug("Dispatched %d domain events", len(events))
            return len(events)


class OutboxRelayWorker:
    """Periodically drains the outbox in the background."""

    def __init__(self, relay: OutboxRelay, interval_seconds: float = 1.0) -> None:
        self.relay = relay
        self.interval = max(0.1, float(interval_seconds))
        self._task: asyncio.Task[None] | None = None
        self._stopping = asyncio.Event()

    async def start(self) -> None:
        """Start the background relay loop."""
        if self._task is None or self._task.done():
            self._stopping.clear()
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop the background relay loop."""
        if self._task is None:
            return
        self._stopping.set()
        await self._task
        self._task = None

    async def _run(self) -> None:
        while not self._stopping.is_set():
            try:
                await asyncio.to_thread(self.relay.dispatch_pending)
            except SQLAlchemyError as e:
                logger.warning("OutboxRelayWorker encountered store error: %s", e)
                await asyncio.sleep(min(self.interval * 4, 30.0))
                continue
            await asyncio.sleep(self.interval)


_hub: EventHub | None = None


def get_event_hub() -> EventHub:
    """Return the process-wide event hub."""
    global _hub
    if _hub is None:
        _hub = EventHub()
    return _hub
