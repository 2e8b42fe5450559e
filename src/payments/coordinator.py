"""Payment Coordinator.

Wraps the payment processor port for the order workflow: a synchronous
create-and-confirm charge at order placement and a full refund when a paid
card order is cancelled. The coordinator persists nothing; callers store the
returned charge id on the order.
"""

from dataclasses import dataclass
from uuid import uuid4

import structlog
from shared import config
from shared.exceptions import PaymentError

from payments.gateway import get_gateway
from payments.gateway.port import PaymentGateway

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ChargeRecord:
    """A confirmed charge, as stored on the order."""

    charge_id: str
    amount_cents: int
    currency: str
    status: str


@dataclass(frozen=True)
class RefundRecord:
    charge_id: str
    refund_id: str | None
    status: str | None


class PaymentCoordinator:
    """Authorizes charges and issues refunds. Never retries."""

    def __init__(self, gateway: PaymentGateway | None = None) -> None:
        self._gateway = gateway

    @property
    def gateway(self) -> PaymentGateway:
        return self._gateway or get_gateway()

    def authorize(
        self,
        amount_cents: int,
        currency: str,
        payment_method_token: str | None,
        idempotency_key: str | None = None,
    ) -> ChargeRecord:
        """Create and confirm a charge in one step.

        Raises ``PaymentError`` when the token is missing, the amount is not
        positive, or the processor declines the charge. The processor is not
        contacted for the first two cases.
        """
        if not payment_method_token:
            raise PaymentError("missing_payment_method", "Payment method ID is required for card payments")
        if amount_cents <= 0:
            raise PaymentError("invalid_amount", f"Charge amount must be positive, got {amount_cents}")

        idempotency_key = idempotency_key or uuid4().hex
        result = self.gateway.create_and_confirm_charge(
            amount_minor_units=amount_cents,
            currency=currency,
            method_token=payment_method_token,
            return_url=config.get_checkout_return_url(),
            idempotency_key=idempotency_key,
        )

        if not result.success:
            logger.info(
                "Charge declined",
                amount_cents=amount_cents,
                currency=currency,
                error_code=result.error_code,
                decline_code=result.decline_code,
            )
            raise PaymentError(
                result.error_code or "card_declined",
                result.failure_reason or "Payment was declined",
                decline_code=result.decline_code,
            )

        logger.info("Charge authorized", charge_id=result.charge_id, amount_cents=amount_cents, currency=currency)
        return ChargeRecord(
            charge_id=result.charge_id,
            amount_cents=amount_cents,
            currency=currency,
            status=result.status or "succeeded",
        )

    def refund(self, charge_id: str) -> RefundRecord:
        """Refund a previously authorized charge. Raises ``PaymentError`` on failure.

        The processor sees one idempotency key per charge, so refunding the
        same charge again returns the original refund rather than a new one.
        """
        if not charge_id:
            raise PaymentError("missing_charge", "No charge to refund")

        result = self.gateway.refund(charge_id, idempotency_key=refund_idempotency_key(charge_id))
        if not result.success:
            logger.warning("Refund failed", charge_id=charge_id, error_code=result.error_code)
            raise PaymentError(result.error_code or "refund_failed", result.failure_reason or "Refund failed")

        logger.info("Refund issued", charge_id=charge_id, refund_id=result.refund_id)
        return RefundRecord(charge_id=charge_id, refund_id=result.refund_id, status=result.status)


def refund_idempotency_key(charge_id: str) -> str:
    return f"refund-{charge_id}"


def to_minor_units(amount: float) -> int:
    """Convert a decimal currency amount to integer minor units (cents)."""
    return int(round(amount * 100))
