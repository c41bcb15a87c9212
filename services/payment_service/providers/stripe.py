from uuid import uuid4

from .base import ChargeOutcome, SimulatedProvider


class StripeProvider(SimulatedProvider):
    """Stripe-like card network. Approves unless configured to decline."""

    name = "Stripe"

    def _decide(self, request):
        if not self.should_approve:
            return ChargeOutcome.decline(self.decline_reason)
        return ChargeOutcome.approve(f"ch_{uuid4().hex[:24]}")
