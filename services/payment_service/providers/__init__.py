from shared.config.settings import PAYPAL_MAX_AMOUNT, PROVIDER_SIMULATED_LATENCY

from .base import ChargeOutcome, PaymentProvider, SimulatedProvider
from .paypal import PaypalProvider
from .registry import ProviderRegistry
from .stripe import StripeProvider


def build_default_registry() -> ProviderRegistry:
    """Every provider this deployment can route to, registered explicitly."""
    return ProviderRegistry([
        StripeProvider(latency=PROVIDER_SIMULATED_LATENCY),
        PaypalProvider(max_amount=PAYPAL_MAX_AMOUNT, latency=PROVIDER_SIMULATED_LATENCY),
    ])


__all__ = [
    "ChargeOutcome",
    "PaymentProvider",
    "PaypalProvider",
    "ProviderRegistry",
    "SimulatedProvider",
    "StripeProvider",
    "build_default_registry",
]
