"""
Reconciliation sweep for payments stuck in PENDING.

A payment stays PENDING when the final status update fails after the
provider already answered. The sweep closes such records as FAILED with
``failure_reason="reconciliation_expired"`` and publishes PaymentFailed so
listeners still see an outcome. It does not query the provider again.
"""
from datetime import datetime, timedelta, timezone

import structlog

from shared.config.settings import RECONCILIATION_PENDING_TTL_SECONDS
from shared.observability import payments_reconciled_total
from .event_bus import EventBus
from .events import PaymentFailed
from .exceptions import InvalidStatusTransition
from .models import PaymentStatus
from .repository import PaymentRepository

logger = structlog.get_logger(__name__)

RECONCILIATION_REASON = "reconciliation_expired"


class PaymentReconciler:
    def __init__(
        self,
        repository: PaymentRepository,
        event_bus: EventBus,
        pending_ttl: timedelta = timedelta(seconds=RECONCILIATION_PENDING_TTL_SECONDS),
    ):
        self.repository = repository
        self.event_bus = event_bus
        self.pending_ttl = pending_ttl

    async def sweep(self, now: datetime | None = None, limit: int = 100) -> list[str]:
        """Fails PENDING payments older than the TTL. Returns the resolved ids."""
        now = now or datetime.now(timezone.utc)
        cutoff = now - self.pending_ttl
        stale = await self.repository.find_stale_pending(cutoff, limit=limit)
        logger.info("reconciliation_sweep_started", cutoff=cutoff.isoformat(), candidates=len(stale))

        # A skipped update rolls the session back and expires loaded rows
        candidates = [(payment.id, payment.provider) for payment in stale]

        resolved = []
        for payment_id, provider in candidates:
            try:
                await self.repository.update_status(
                    payment_id, PaymentStatus.FAILED, failure_reason=RECONCILIATION_REASON
                )
            except InvalidStatusTransition:
                # Resolved by its own request between the query and the update
                logger.info("reconciliation_skipped", payment_id=payment_id)
                continue

            payments_reconciled_total.inc()
            self.event_bus.publish(
                PaymentFailed(payment_id, provider=provider, reason=RECONCILIATION_REASON)
            )
            resolved.append(payment_id)

        logger.info("reconciliation_sweep_completed", resolved=len(resolved))
        return resolved
