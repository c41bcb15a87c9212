import asyncio
import time
from decimal import Decimal

import structlog

from shared.config.settings import ALLOWED_CURRENCIES, PROVIDER_TIMEOUT_SECONDS
from shared.observability import (
    payments_created_total,
    payment_provider_duration_seconds,
    payment_provider_errors_total,
)
from .event_bus import EventBus
from .events import PaymentApproved, PaymentFailed
from .exceptions import (
    PaymentNotFoundError,
    PaymentPersistenceError,
    PaymentValidationError,
    ProviderIntegrationError,
)
from .models import AMOUNT_LIMIT, TERMINAL_STATUSES, Payment, PaymentMethod, PaymentStatus
from .providers import ChargeOutcome, PaymentProvider, ProviderRegistry
from .repository import PaymentRepository
from .schemas import PaymentCreate

logger = structlog.get_logger(__name__)

INTEGRATION_FAILURE_REASON = "provider_integration_error"


def validate_payment_request(data: PaymentCreate, allowed_currencies=ALLOWED_CURRENCIES):
    """Raises PaymentValidationError for the first bad field. No side effects."""
    amount = data.amount
    if not amount.is_finite() or amount <= 0:
        raise PaymentValidationError("Amount must be greater than zero", code="invalid_amount", field="amount")
    if amount.as_tuple().exponent < -2:
        raise PaymentValidationError(
            "Amount must have at most two decimal places", code="invalid_amount", field="amount"
        )
    if amount >= AMOUNT_LIMIT:
        raise PaymentValidationError(
            f"Amount must be less than {AMOUNT_LIMIT}", code="invalid_amount", field="amount"
        )

    if data.currency not in allowed_currencies:
        raise PaymentValidationError(
            f"Currency '{data.currency}' is not supported", code="invalid_currency", field="currency"
        )

    if data.method not in PaymentMethod.__members__:
        raise PaymentValidationError(
            f"Payment method '{data.method}' is not supported", code="invalid_method", field="method"
        )

    if not data.provider or not data.provider.strip():
        raise PaymentValidationError("Provider name is required", code="missing_provider", field="provider")


class CreatePaymentHandler:
    """Drives one payment creation end to end.

    validate -> resolve provider -> persist PENDING -> charge -> persist
    terminal status -> publish exactly one outcome event. Steps run strictly
    in that order; listeners run after the caller already has its answer.
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        repository: PaymentRepository,
        event_bus: EventBus,
        provider_timeout: float = PROVIDER_TIMEOUT_SECONDS,
        allowed_currencies=ALLOWED_CURRENCIES,
    ):
        self.registry = registry
        self.repository = repository
        self.event_bus = event_bus
        self.provider_timeout = provider_timeout
        self.allowed_currencies = allowed_currencies

    async def create_payment(self, data: PaymentCreate) -> Payment:
        # 1. Validate
        validate_payment_request(data, self.allowed_currencies)

        # 2. Resolve provider (ProviderNotFoundError before anything is written)
        provider = self.registry.resolve(data.provider)

        # 3. Persist PENDING so a record exists whatever the provider does
        payment = Payment(
            amount=Decimal(data.amount),
            currency=data.currency,
            method=data.method,
            provider=provider.name,
            status=PaymentStatus.PENDING.value,
        )
        payment_id = await self.repository.create(payment)
        log = logger.bind(payment_id=payment_id, provider=provider.name)
        log.info("payment_pending", amount=str(data.amount), currency=data.currency, method=data.method)

        # 4. Charge
        outcome = await self._charge(provider, data, log)

        # 5. Persist the terminal status, then publish
        try:
            payment = await self.repository.update_status(
                payment_id,
                outcome.status,
                provider_reference=outcome.reference,
                failure_reason=outcome.reason,
            )
        except PaymentPersistenceError:
            # Record stays PENDING and no event goes out; the reconciliation sweep resolves it
            log.error("payment_left_pending", outcome=outcome.status.value)
            raise
        payments_created_total.labels(provider=provider.name, status=payment.status).inc()

        if outcome.approved:
            log.info("payment_approved", provider_reference=outcome.reference)
            self.event_bus.publish(PaymentApproved(payment_id))
        else:
            log.info("payment_failed", reason=outcome.reason)
            self.event_bus.publish(PaymentFailed(payment_id, provider=provider.name, reason=outcome.reason))

        # 6. Terminal payment back to the caller
        return payment

    async def _charge(self, provider: PaymentProvider, data: PaymentCreate, log) -> ChargeOutcome:
        """Calls the provider once. Errors and timeouts become a FAILED outcome."""
        started = time.perf_counter()
        try:
            outcome = await asyncio.wait_for(provider.charge(data), timeout=self.provider_timeout)
            if not isinstance(outcome, ChargeOutcome) or outcome.status not in TERMINAL_STATUSES:
                raise ProviderIntegrationError(provider.name, f"malformed charge outcome: {outcome!r}")
            return outcome
        except asyncio.TimeoutError:
            payment_provider_errors_total.labels(provider=provider.name).inc()
            log.warning("provider_timeout", timeout=self.provider_timeout)
            return ChargeOutcome.decline(INTEGRATION_FAILURE_REASON)
        except Exception as e:
            payment_provider_errors_total.labels(provider=provider.name).inc()
            log.warning("provider_integration_error", error=str(e), error_type=type(e).__name__)
            return ChargeOutcome.decline(INTEGRATION_FAILURE_REASON)
        finally:
            payment_provider_duration_seconds.labels(provider=provider.name).observe(
                time.perf_counter() - started
            )


class PaymentQueryService:
    """Read side: fetch a stored payment by id."""

    def __init__(self, repository: PaymentRepository):
        self.repository = repository

    async def get_payment(self, payment_id: str) -> Payment:
        payment = await self.repository.find_by_id(payment_id)
        if not payment:
            raise PaymentNotFoundError(payment_id)
        return payment
