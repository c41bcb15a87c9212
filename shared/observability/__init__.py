from .setup import setup_observability
from .metrics import (
    payments_created_total,
    payment_provider_duration_seconds,
    payment_provider_errors_total,
    payment_listener_failures_total,
    payments_reconciled_total
)
