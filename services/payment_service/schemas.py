from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel

# Field values (sign, currency, method) are checked by CreatePaymentHandler so
# that every rejection carries the same machine-readable error code shape.
class PaymentCreate(BaseModel):
    amount: Decimal
    currency: str
    method: str
    provider: str

class PaymentResponse(BaseModel):
    id: str
    amount: Decimal # serialized as a JSON string, e.g. "100.50"
    currency: str
    method: str
    provider: str
    status: str
    provider_reference: str | None = None
    failure_reason: str | None = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class ProviderListResponse(BaseModel):
    providers: list[str]

class ReconciliationResponse(BaseModel):
    resolved: int
    payment_ids: list[str]
