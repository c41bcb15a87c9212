from datetime import datetime

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from .exceptions import PaymentNotFoundError, PaymentPersistenceError, PaymentServiceError
from .models import Payment, PaymentStatus


class PaymentRepository:
    """Payment record store bound to one request's session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, payment: Payment) -> str:
        try:
            self.db.add(payment)
            await self.db.commit()
            await self.db.refresh(payment)
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise PaymentPersistenceError(f"Could not create payment: {e}") from e
        return payment.id

    async def update_status(
        self,
        payment_id: str,
        status: PaymentStatus,
        provider_reference: str | None = None,
        failure_reason: str | None = None,
    ) -> Payment:
        try:
            result = await self.db.execute(
                select(Payment).where(Payment.id == payment_id).with_for_update()
            )
            payment = result.scalars().first()
            if not payment:
                raise PaymentNotFoundError(payment_id)

            # Raises InvalidStatusTransition unless the payment is still PENDING
            payment.transition_to(
                status,
                provider_reference=provider_reference,
                failure_reason=failure_reason,
            )
            await self.db.commit()
            await self.db.refresh(payment)
        except PaymentServiceError:
            # Releases the row lock taken above
            await self.db.rollback()
            raise
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise PaymentPersistenceError(f"Could not update payment {payment_id}: {e}") from e
        return payment

    async def find_by_id(self, payment_id: str) -> Payment | None:
        try:
            result = await self.db.execute(select(Payment).where(Payment.id == payment_id))
        except SQLAlchemyError as e:
            raise PaymentPersistenceError(f"Could not load payment {payment_id}: {e}") from e
        return result.scalars().first()

    async def find_stale_pending(self, older_than: datetime, limit: int = 100) -> list[Payment]:
        try:
            result = await self.db.execute(
                select(Payment)
                .where(Payment.status == PaymentStatus.PENDING.value)
                .where(Payment.created_at < older_than)
                .order_by(Payment.created_at)
                .limit(limit)
            )
        except SQLAlchemyError as e:
            raise PaymentPersistenceError(f"Could not list pending payments: {e}") from e
        return list(result.scalars().all())
