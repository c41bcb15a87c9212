import enum
import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import Column, DateTime, Numeric, String
from shared.config.database import Base

from .exceptions import InvalidStatusTransition


class PaymentStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    FAILED = "FAILED"


class PaymentMethod(str, enum.Enum):
    CREDIT_CARD = "CREDIT_CARD"
    DEBIT_CARD = "DEBIT_CARD"
    BANK_TRANSFER = "BANK_TRANSFER"


TERMINAL_STATUSES = frozenset({PaymentStatus.APPROVED, PaymentStatus.FAILED})

AMOUNT_PRECISION = 12
AMOUNT_SCALE = 2
# Smallest amount the amount column cannot hold
AMOUNT_LIMIT = Decimal(10) ** (AMOUNT_PRECISION - AMOUNT_SCALE)


def _utcnow():
    return datetime.now(timezone.utc)


class Payment(Base):
    __tablename__ = "payments"
    __table_args__ = {"schema": "payment_schema"}

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    amount = Column(Numeric(AMOUNT_PRECISION, AMOUNT_SCALE), nullable=False) # fixed-point, never float
    currency = Column(String(3), nullable=False)
    method = Column(String(32), nullable=False)
    provider = Column(String(64), nullable=False, index=True)
    status = Column(String(16), nullable=False, default=PaymentStatus.PENDING.value, index=True)
    provider_reference = Column(String(128), nullable=True)
    failure_reason = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    def transition_to(self, new_status: PaymentStatus, *, provider_reference=None, failure_reason=None):
        """Moves a PENDING payment to a terminal status. Terminal statuses are final."""
        current = PaymentStatus(self.status)
        new_status = PaymentStatus(new_status)
        if current is not PaymentStatus.PENDING or new_status not in TERMINAL_STATUSES:
            raise InvalidStatusTransition(self.id, current.value, new_status.value)

        self.status = new_status.value
        self.provider_reference = provider_reference
        self.failure_reason = failure_reason
        self.updated_at = _utcnow()
