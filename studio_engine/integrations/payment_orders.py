"""
Payment-order client contract and a mock implementation.

In production this creates an order with the POS provider so the payment
taken at the studio can be matched back to the booking. When credentials
are missing the studio runs in cash-only mode: ``is_configured()`` is
False and order creation is skipped without error.
"""

import logging
import uuid
from dataclasses import dataclass, field
from typing import Optional, Protocol

from studio_engine.config import PaymentConfig, settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrderRequest:
    booking_id: int
    service_name: str
    amount_in_cents: int
    client_name: Optional[str] = None


class PaymentOrderClient(Protocol):
    provider: str

    def is_configured(self) -> bool: ...

    async def create_order(self, request: OrderRequest) -> str: ...


class PaymentOrderError(Exception):
    """The provider did not return an order reference."""


@dataclass
class MockPaymentOrderClient:
    """Issues ``ORD-`` references locally and remembers the requests."""

    config: PaymentConfig = field(default_factory=lambda: settings.payment)
    provider: str = "square"
    orders: dict[str, OrderRequest] = field(default_factory=dict)
    fail_with: Optional[str] = None

    def is_configured(self) -> bool:
        return self.config.is_configured

    async def create_order(self, request: OrderRequest) -> str:
        if not self.is_configured():
            raise PaymentOrderError("Payment provider not configured")
        if self.fail_with is not None:
            raise PaymentOrderError(self.fail_with)
        ref = f"ORD-{uuid.uuid4().hex[:10].upper()}"
        self.orders[ref] = request
        logger.info(
            "Order %s created for booking %s (%d %s)",
            ref, request.booking_id, request.amount_in_cents, self.config.currency,
        )
        return ref
