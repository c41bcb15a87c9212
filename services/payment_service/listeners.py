"""
Subscribers reacting to payment outcomes.

Listeners only read the event they receive; they never touch the payment
record. Each runs in its own task on the event bus.
"""
from collections import deque
from collections.abc import Awaitable, Callable

import structlog

from .event_bus import EventBus
from .events import PaymentApproved, PaymentEvent, PaymentFailed

logger = structlog.get_logger(__name__)

EmailSender = Callable[[str, str, str], Awaitable[None]]


async def log_email_sender(template: str, payment_id: str, body: str):
    """Default sender: no SMTP in this service, the send is logged."""
    logger.info("email_sent", template=template, payment_id=payment_id, body=body)


class EmailNotificationListener:
    def __init__(self, sender: EmailSender = log_email_sender):
        self.sender = sender

    async def on_payment_approved(self, event: PaymentApproved):
        await self.sender(
            "payment_receipt",
            event.payment_id,
            f"Payment {event.payment_id} was approved.",
        )

    async def on_payment_failed(self, event: PaymentFailed):
        await self.sender(
            "payment_failed",
            event.payment_id,
            f"Payment {event.payment_id} via {event.provider} failed: {event.reason or 'declined'}.",
        )


class AuditTrailListener:
    """Keeps the most recent outcomes in memory and writes each to the audit log."""

    def __init__(self, max_entries: int = 1000):
        self.entries: deque[dict] = deque(maxlen=max_entries)

    def __call__(self, event: PaymentEvent):
        entry = {
            "event_id": event.event_id,
            "event_type": event.event_type,
            "payment_id": event.payment_id,
            "occurred_at": event.occurred_at.isoformat(),
        }
        if isinstance(event, PaymentFailed):
            entry["provider"] = event.provider
            entry["reason"] = event.reason
        self.entries.append(entry)
        logger.info("payment_audit", **entry)


def register_listeners(event_bus: EventBus, email_sender: EmailSender = log_email_sender):
    """Wires the notification and audit listeners onto the bus."""
    email = EmailNotificationListener(email_sender)
    audit = AuditTrailListener()

    event_bus.subscribe(PaymentApproved, email.on_payment_approved)
    event_bus.subscribe(PaymentFailed, email.on_payment_failed)
    event_bus.subscribe(PaymentEvent, audit)
    return email, audit
