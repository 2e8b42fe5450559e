"""Stripe payment processor adapter.

Uses the stripe-python SDK to create-and-confirm PaymentIntents and to issue
refunds against them. The PaymentIntent id is the charge id stored on orders.
"""

import stripe
import structlog

from payments.gateway.port import ChargeResult, PaymentGateway, RefundResult

logger = structlog.get_logger(__name__)

# PaymentIntent statuses that mean the customer has been charged (or will be
# without further action on their side).
_CONFIRMED_STATUSES = frozenset({"succeeded", "processing", "requires_capture"})


def _decline_code(exc: stripe.StripeError) -> str | None:
    error = getattr(exc, "error", None)
    return getattr(error, "decline_code", None) if error is not None else None


def _message(exc: stripe.StripeError) -> str:
    return getattr(exc, "user_message", None) or str(exc) or exc.__class__.__name__


class StripeGateway(PaymentGateway):
    """Production Stripe adapter."""

    def __init__(self, api_key: str) -> None:
        self.api_key = api_key

    def create_and_confirm_charge(
        self,
        amount_minor_units: int,
        currency: str,
        method_token: str,
        return_url: str,
        idempotency_key: str,
    ) -> ChargeResult:
        try:
            intent = stripe.PaymentIntent.create(
                api_key=self.api_key,
                idempotency_key=idempotency_key,
                amount=amount_minor_units,
                currency=currency,
                payment_method=method_token,
                confirm=True,
                return_url=return_url,
            )
        except stripe.CardError as exc:
            logger.info("Stripe declined the card", code=exc.code, decline_code=_decline_code(exc))
            return ChargeResult(
                success=False,
                status="declined",
                error_code=exc.code or "card_declined",
                failure_reason=_message(exc),
                decline_code=_decline_code(exc),
            )
        except stripe.StripeError as exc:
            logger.warning("Stripe charge request failed", error=str(exc), code=exc.code)
            return ChargeResult(
                success=False,
                status="error",
                error_code=exc.code or "processor_error",
                failure_reason=_message(exc),
            )

        if intent.status not in _CONFIRMED_STATUSES:
            return ChargeResult(
                success=False,
                charge_id=intent.id,
                status=intent.status,
                error_code="payment_incomplete",
                failure_reason=f"Payment could not be completed (status: {intent.status})",
            )

        return ChargeResult(success=True, charge_id=intent.id, status=intent.status)

    def refund(self, charge_id: str, idempotency_key: str | None = None) -> RefundResult:
        try:
            refund = stripe.Refund.create(
                api_key=self.api_key,
                idempotency_key=idempotency_key,
                payment_intent=charge_id,
            )
        except stripe.StripeError as exc:
            logger.warning("Stripe refund request failed", charge_id=charge_id, error=str(exc))
            return RefundResult(
                success=False,
                status="error",
                error_code=exc.code or "refund_failed",
                failure_reason=_message(exc),
            )

        if refund.status in ("failed", "canceled"):
            return RefundResult(
                success=False,
                refund_id=refund.id,
                status=refund.status,
                error_code="refund_failed",
                failure_reason=f"Refund {refund.id} ended as {refund.status}",
            )
        return RefundResult(success=True, refund_id=refund.id, status=refund.status)
