"""Configurable fake payment processor for development and testing.

Simulates the processor without any external calls. It can be configured at
runtime to decline charges or fail refunds, which makes it useful for:
- Manual API testing via /payments/gateway/configure
- Automated tests with predictable outcomes
- Development without real processor credentials
"""

from uuid import uuid4

from payments.gateway.port import ChargeResult, PaymentGateway, RefundResult


class FakeGateway(PaymentGateway):
    """Configurable fake payment processor."""

    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.refunds_succeed: bool = True
        self.failure_reason: str = "Your card was declined."
        self.decline_code: str | None = "generic_decline"
        self.charge_id: str | None = None
        self.calls: list[dict] = []
        # Successful refunds by idempotency key
        self.refunds: dict[str, RefundResult] = {}

    def configure(
        self,
        should_succeed: bool,
        failure_reason: str = "Your card was declined.",
        decline_code: str | None = "generic_decline",
        refunds_succeed: bool | None = None,
        charge_id: str | None = None,
    ) -> None:
        """Configure processor behavior at runtime.

        Refunds follow ``should_succeed`` unless ``refunds_succeed`` is given.
        A fixed ``charge_id`` replaces the generated ids of successful charges.
        """
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.decline_code = decline_code
        self.refunds_succeed = should_succeed if refunds_succeed is None else refunds_succeed
        self.charge_id = charge_id

    def calls_to(self, method: str) -> list[dict]:
        return [call for call in self.calls if call["method"] == method]

    def create_and_confirm_charge(
        self,
        amount_minor_units: int,
        currency: str,
        method_token: str,
        return_url: str,
        idempotency_key: str,
    ) -> ChargeResult:
        self.calls.append(
            {
                "method": "create_and_confirm_charge",
                "amount_minor_units": amount_minor_units,
                "currency": currency,
                "method_token": method_token,
                "return_url": return_url,
                "idempotency_key": idempotency_key,
            }
        )

        if self.should_succeed:
            return ChargeResult(
                success=True,
                charge_id=self.charge_id or f"pi_fake_{uuid4().hex[:16]}",
                status="succeeded",
            )
        return ChargeResult(
            success=False,
            status="requires_payment_method",
            error_code="card_declined",
            failure_reason=self.failure_reason,
            decline_code=self.decline_code,
        )

    def refund(self, charge_id: str, idempotency_key: str | None = None) -> RefundResult:
        self.calls.append({"method": "refund", "charge_id": charge_id, "idempotency_key": idempotency_key})

        if idempotency_key in self.refunds:
            return self.refunds[idempotency_key]

        if self.refunds_succeed:
            result = RefundResult(
                success=True,
                refund_id=f"re_fake_{uuid4().hex[:16]}",
                status="succeeded",
            )
            if idempotency_key:
                self.refunds[idempotency_key] = result
            return result
        return RefundResult(
            success=False,
            status="failed",
            error_code="refund_failed",
            failure_reason=self.failure_reason,
        )
