from prometheus_client import Counter, Histogram

# Business Metrics
payments_created_total = Counter(
    "payments_created_total",
    "Payments that reached a terminal status",
    ["provider", "status"] # Labels: status='APPROVED' or 'FAILED'
)

payment_provider_duration_seconds = Histogram(
    "payment_provider_duration_seconds",
    "Time spent inside a provider charge call",
    ["provider"]
)

payment_provider_errors_total = Counter(
    "payment_provider_errors_total",
    "Provider calls that errored or timed out (not business declines)",
    ["provider"]
)

payment_listener_failures_total = Counter(
    "payment_listener_failures_total",
    "Event listeners that raised while handling an event",
    ["event_type", "listener"]
)

payments_reconciled_total = Counter(
    "payments_reconciled_total",
    "Dangling PENDING payments resolved by the reconciliation sweep"
)
