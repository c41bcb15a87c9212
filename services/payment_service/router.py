"""
Entry facade for the payment service.

Create goes to CreatePaymentHandler, read goes to PaymentQueryService. No
business logic lives here. Every route except /health requires the
X-Internal-API-Key header.
"""
from fastapi import APIRouter, Depends, status

from shared.security.dependencies import verify_internal_api_key

from .dependencies import (
    get_create_payment_handler,
    get_payment_query_service,
    get_payment_reconciler,
    get_provider_registry,
)
from .providers import ProviderRegistry
from .reconciliation import PaymentReconciler
from .schemas import PaymentCreate, PaymentResponse, ProviderListResponse, ReconciliationResponse
from .service import CreatePaymentHandler, PaymentQueryService

router = APIRouter(dependencies=[Depends(verify_internal_api_key)])
public_router = APIRouter()  # health check

@public_router.get("/health", include_in_schema=False)
async def health_check():
    return {"service": "payment", "status": "running"}


# APPROVED and FAILED are both successful creations: a decline is not a transport error
@router.post("/", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
async def create_payment(
    payment: PaymentCreate,
    handler: CreatePaymentHandler = Depends(get_create_payment_handler),
):
    return await handler.create_payment(payment)


@router.get("/providers", response_model=ProviderListResponse)
async def list_providers(registry: ProviderRegistry = Depends(get_provider_registry)):
    return ProviderListResponse(providers=registry.names())


@router.post("/reconciliation/sweep", response_model=ReconciliationResponse)
async def sweep_pending_payments(reconciler: PaymentReconciler = Depends(get_payment_reconciler)):
    resolved = await reconciler.sweep()
    return ReconciliationResponse(resolved=len(resolved), payment_ids=resolved)


@router.get("/{payment_id}", response_model=PaymentResponse)
async def get_payment(
    payment_id: str,
    queries: PaymentQueryService = Depends(get_payment_query_service),
):
    # PaymentNotFoundError -> 404 via the service's exception handler
    return await queries.get_payment(payment_id)
