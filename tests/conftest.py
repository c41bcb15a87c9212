"""
Pytest configuration and fixtures.
"""
import os

# Must be set before the service modules read them at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("INTERNAL_API_KEY", "test-internal-key")
os.environ.setdefault("PROVIDER_SIMULATED_LATENCY", "0")

import uuid
from datetime import datetime, timezone
from typing import Any, AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from shared.config.database import Base, get_db
from services.payment_service.dependencies import get_event_bus, get_provider_registry
from services.payment_service.event_bus import EventBus
from services.payment_service.events import PaymentEvent
from services.payment_service.exceptions import PaymentNotFoundError, PaymentPersistenceError
from services.payment_service.main import payment_app
from services.payment_service.models import Payment, PaymentStatus
from services.payment_service.providers import PaypalProvider, ProviderRegistry, StripeProvider
from services.payment_service.repository import PaymentRepository
from services.payment_service.service import CreatePaymentHandler

API_KEY = os.environ["INTERNAL_API_KEY"]


class EventRecorder:
    """Listener that remembers every event it receives."""

    def __init__(self):
        self.events = []

    async def __call__(self, event):
        self.events.append(event)

    def of_type(self, event_type):
        return [e for e in self.events if isinstance(e, event_type)]


class InMemoryPaymentRepository:
    """Dict-backed stand-in for PaymentRepository."""

    def __init__(self):
        self.payments: dict[str, Payment] = {}

    async def create(self, payment: Payment) -> str:
        now = datetime.now(timezone.utc)
        payment.id = payment.id or str(uuid.uuid4())
        payment.created_at = payment.created_at or now
        payment.updated_at = payment.updated_at or now
        self.payments[payment.id] = payment
        return payment.id

    async def update_status(self, payment_id, status, provider_reference=None, failure_reason=None):
        payment = self.payments.get(payment_id)
        if not payment:
            raise PaymentNotFoundError(payment_id)
        payment.transition_to(status, provider_reference=provider_reference, failure_reason=failure_reason)
        return payment

    async def find_by_id(self, payment_id):
        return self.payments.get(payment_id)

    async def find_stale_pending(self, older_than, limit=100):
        stale = [
            p for p in self.payments.values()
            if p.status == PaymentStatus.PENDING.value and p.created_at < older_than
        ]
        return sorted(stale, key=lambda p: p.created_at)[:limit]


class FailingUpdateRepository(InMemoryPaymentRepository):
    """Accepts the PENDING insert, then loses the database on the status update."""

    async def update_status(self, payment_id, status, provider_reference=None, failure_reason=None):
        raise PaymentPersistenceError(f"Could not update payment {payment_id}: connection lost")


@pytest.fixture
def stripe_provider() -> StripeProvider:
    return StripeProvider(should_approve=True)


@pytest.fixture
def paypal_provider() -> PaypalProvider:
    return PaypalProvider(should_approve=False)


@pytest.fixture
def registry(stripe_provider, paypal_provider) -> ProviderRegistry:
    return ProviderRegistry([stripe_provider, paypal_provider])


@pytest.fixture
def recorder() -> EventRecorder:
    return EventRecorder()


@pytest.fixture
def event_bus(recorder) -> EventBus:
    bus = EventBus()
    bus.subscribe(PaymentEvent, recorder)
    return bus


@pytest.fixture
def memory_repository() -> InMemoryPaymentRepository:
    return InMemoryPaymentRepository()


@pytest.fixture
def handler(registry, memory_repository, event_bus) -> CreatePaymentHandler:
    return CreatePaymentHandler(registry, memory_repository, event_bus)


@pytest.fixture
def payment_data() -> dict[str, Any]:
    """Sample create-payment request."""
    return {
        "amount": 100.50,
        "currency": "BRL",
        "method": "CREDIT_CARD",
        "provider": "Stripe",
    }


@pytest_asyncio.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker, Any]:
    """In-memory sqlite; the payment_schema schema is mapped away."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        execution_options={"schema_translate_map": {"payment_schema": None}},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, Any]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def repository(db_session) -> PaymentRepository:
    return PaymentRepository(db_session)


@pytest_asyncio.fixture
async def client(session_factory, registry, event_bus) -> AsyncGenerator[AsyncClient, Any]:
    """HTTP client against the payment app with test collaborators."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    payment_app.dependency_overrides[get_db] = override_get_db
    payment_app.dependency_overrides[get_provider_registry] = lambda: registry
    payment_app.dependency_overrides[get_event_bus] = lambda: event_bus

    transport = ASGITransport(app=payment_app)
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        headers={"X-Internal-API-Key": API_KEY},
    ) as ac:
        yield ac

    await event_bus.drain()
    payment_app.dependency_overrides.clear()
