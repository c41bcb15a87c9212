"""
Payment outcome events.

Immutable facts published once the payment's terminal status is persisted.
Listeners consume them; nothing mutates them.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass(frozen=True)
class PaymentEvent:
    payment_id: str
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()), kw_only=True)
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc), kw_only=True)

    @property
    def event_type(self) -> str:
        return type(self).__name__


@dataclass(frozen=True)
class PaymentApproved(PaymentEvent):
    pass


@dataclass(frozen=True)
class PaymentFailed(PaymentEvent):
    provider: str
    reason: str | None = None
