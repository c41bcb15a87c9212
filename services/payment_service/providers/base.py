"""
Payment provider port.

Every payment network the service can route to implements ``PaymentProvider``.
A business decline is returned as a FAILED ``ChargeOutcome``; only transport
problems (provider unreachable, malformed reply) raise
``ProviderIntegrationError``.
"""
from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

from ..exceptions import ProviderIntegrationError
from ..models import PaymentStatus

if TYPE_CHECKING:
    from ..schemas import PaymentCreate


@dataclass(frozen=True)
class ChargeOutcome:
    """Result of a charge attempt."""

    status: PaymentStatus
    reference: str | None = None
    reason: str | None = None

    @property
    def approved(self) -> bool:
        return self.status is PaymentStatus.APPROVED

    @classmethod
    def approve(cls, reference: str) -> ChargeOutcome:
        return cls(status=PaymentStatus.APPROVED, reference=reference)

    @classmethod
    def decline(cls, reason: str, reference: str | None = None) -> ChargeOutcome:
        return cls(status=PaymentStatus.FAILED, reference=reference, reason=reason)


class PaymentProvider(ABC):
    """Abstract payment provider."""

    # Canonical name used by the registry and stored on the payment
    name: ClassVar[str]

    @abstractmethod
    async def charge(self, request: PaymentCreate) -> ChargeOutcome:
        """Charge the request against this provider's network."""
        ...


class SimulatedProvider(PaymentProvider):
    """Configurable in-process stand-in for a real provider network.

    ``should_approve`` forces a decline when False, ``should_error`` makes the
    call raise ``ProviderIntegrationError`` as if the network were down, and
    ``latency`` is how long the simulated round trip takes.
    """

    def __init__(
        self,
        should_approve: bool = True,
        decline_reason: str = "Card declined",
        should_error: bool = False,
        latency: float = 0.0,
    ) -> None:
        self.should_approve = should_approve
        self.decline_reason = decline_reason
        self.should_error = should_error
        self.latency = latency
        self.calls: list[PaymentCreate] = []

    def configure(
        self,
        should_approve: bool | None = None,
        decline_reason: str | None = None,
        should_error: bool | None = None,
        latency: float | None = None,
    ) -> None:
        """Change behaviour at runtime."""
        if should_approve is not None:
            self.should_approve = should_approve
        if decline_reason is not None:
            self.decline_reason = decline_reason
        if should_error is not None:
            self.should_error = should_error
        if latency is not None:
            self.latency = latency

    async def charge(self, request: PaymentCreate) -> ChargeOutcome:
        self.calls.append(request)
        if self.latency:
            await asyncio.sleep(self.latency)
        if self.should_error:
            raise ProviderIntegrationError(self.name, "network unreachable")
        return self._decide(request)

    @abstractmethod
    def _decide(self, request: PaymentCreate) -> ChargeOutcome:
        ...
