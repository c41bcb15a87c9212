"""
Runtime knobs for the payment service, read once from the environment.
"""
import os
from decimal import Decimal
from dotenv import load_dotenv

load_dotenv()

ALLOWED_CURRENCIES = frozenset(
    code.strip().upper()
    for code in os.getenv("ALLOWED_CURRENCIES", "BRL,USD,EUR,GBP").split(",")
    if code.strip()
)

# Upper bound for a single provider call; exceeding it counts as an integration failure
PROVIDER_TIMEOUT_SECONDS = float(os.getenv("PROVIDER_TIMEOUT_SECONDS", "5"))

# PENDING payments older than this are picked up by the reconciliation sweep
RECONCILIATION_PENDING_TTL_SECONDS = int(os.getenv("RECONCILIATION_PENDING_TTL_SECONDS", "900"))

PAYPAL_MAX_AMOUNT = Decimal(os.getenv("PAYPAL_MAX_AMOUNT", "10000"))

# Simulated provider latency, in seconds
PROVIDER_SIMULATED_LATENCY = float(os.getenv("PROVIDER_SIMULATED_LATENCY", "0.05"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
