import asyncio
import inspect
from collections import defaultdict
from collections.abc import Awaitable, Callable
from typing import Any

import structlog

from shared.observability import payment_listener_failures_total
from .events import PaymentEvent

logger = structlog.get_logger(__name__)

Handler = Callable[[Any], Awaitable[None] | None]


class EventBus:
    """In-process publish/subscribe for payment outcome events.

    ``publish`` only schedules delivery: each subscribed handler runs in its
    own task, so the publisher never waits on a listener and a failing
    listener cannot stop the others.
    """

    def __init__(self):
        self._handlers: dict[type, list[Handler]] = defaultdict(list)
        self._in_flight: set[asyncio.Task] = set()

    def subscribe(self, event_type: type[PaymentEvent], handler: Handler):
        self._handlers[event_type].append(handler)
        return handler

    def handlers_for(self, event: PaymentEvent) -> list[Handler]:
        handlers = []
        for event_type in type(event).__mro__:
            handlers.extend(self._handlers.get(event_type, ()))
        return handlers

    def publish(self, event: PaymentEvent) -> int:
        """Schedules one delivery per handler. Returns the number scheduled."""
        handlers = self.handlers_for(event)
        for handler in handlers:
            task = asyncio.create_task(self._deliver(handler, event))
            # Strong reference until the task finishes, otherwise it may be GC'd mid-flight
            self._in_flight.add(task)
            task.add_done_callback(self._in_flight.discard)

        logger.info(
            "payment_event_published",
            event_type=event.event_type,
            event_id=event.event_id,
            payment_id=event.payment_id,
            listeners=len(handlers),
        )
        return len(handlers)

    async def _deliver(self, handler: Handler, event: PaymentEvent):
        listener = getattr(handler, "__qualname__", type(handler).__name__)
        try:
            result = handler(event)
            if inspect.isawaitable(result):
                await result
        except Exception:
            # Contained here: never reaches the publisher or sibling listeners
            payment_listener_failures_total.labels(
                event_type=event.event_type, listener=listener
            ).inc()
            logger.exception(
                "payment_listener_failed",
                event_type=event.event_type,
                event_id=event.event_id,
                payment_id=event.payment_id,
                listener=listener,
            )

    @property
    def pending(self) -> int:
        return len(self._in_flight)

    async def drain(self):
        """Waits for every delivery scheduled so far (shutdown, tests)."""
        while self._in_flight:
            await asyncio.gather(*list(self._in_flight))
