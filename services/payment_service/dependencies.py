"""
Process-wide collaborators and the per-request wiring around them.

The registry and the event bus are built once at import (process start);
repositories and handlers are built per request on top of a fresh session.
Tests swap any of these through ``app.dependency_overrides``.
"""
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from .event_bus import EventBus
from .providers import ProviderRegistry, build_default_registry
from .reconciliation import PaymentReconciler
from .repository import PaymentRepository
from .service import CreatePaymentHandler, PaymentQueryService

provider_registry = build_default_registry()
event_bus = EventBus()


def get_provider_registry() -> ProviderRegistry:
    return provider_registry


def get_event_bus() -> EventBus:
    return event_bus


def get_payment_repository(db: AsyncSession = Depends(get_db)) -> PaymentRepository:
    return PaymentRepository(db)


def get_create_payment_handler(
    registry: ProviderRegistry = Depends(get_provider_registry),
    repository: PaymentRepository = Depends(get_payment_repository),
    bus: EventBus = Depends(get_event_bus),
) -> CreatePaymentHandler:
    return CreatePaymentHandler(registry, repository, bus)


def get_payment_query_service(
    repository: PaymentRepository = Depends(get_payment_repository),
) -> PaymentQueryService:
    return PaymentQueryService(repository)


def get_payment_reconciler(
    repository: PaymentRepository = Depends(get_payment_repository),
    bus: EventBus = Depends(get_event_bus),
) -> PaymentReconciler:
    return PaymentReconciler(repository, bus)
