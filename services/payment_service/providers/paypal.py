from decimal import Decimal
from uuid import uuid4

from .base import ChargeOutcome, SimulatedProvider


class PaypalProvider(SimulatedProvider):
    """Paypal-like wallet network.

    On top of the forced-decline switch, Paypal declines any single charge
    above ``max_amount``.
    """

    name = "Paypal"

    def __init__(self, max_amount: Decimal | None = None, **kwargs) -> None:
        kwargs.setdefault("decline_reason", "Transaction refused by Paypal")
        super().__init__(**kwargs)
        self.max_amount = max_amount

    def _decide(self, request):
        if not self.should_approve:
            return ChargeOutcome.decline(self.decline_reason)
        if self.max_amount is not None and request.amount > self.max_amount:
            return ChargeOutcome.decline(f"Amount exceeds Paypal limit of {self.max_amount}")
        return ChargeOutcome.approve(f"PAY-{uuid4().hex[:20].upper()}")
