"""Payment processor port (abstract interface).

Every processor adapter exposes the same two calls: create-and-confirm a
charge in one step, and refund a previously confirmed charge. The Payment
Coordinator talks only to this interface, so swapping FakeGateway (dev/test)
for StripeGateway (production) never touches ordering code.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class ChargeResult:
    """Result of a create-and-confirm charge attempt."""

    success: bool
    charge_id: str | None = None
    status: str | None = None
    error_code: str | None = None
    failure_reason: str | None = None
    decline_code: str | None = None


@dataclass(frozen=True)
class RefundResult:
    """Result of a refund attempt."""

    success: bool
    refund_id: str | None = None
    status: str | None = None
    error_code: str | None = None
    failure_reason: str | None = None


class PaymentGateway(ABC):
    """Abstract payment processor interface."""

    @abstractmethod
    def create_and_confirm_charge(
        self,
        amount_minor_units: int,
        currency: str,
        method_token: str,
        return_url: str,
        idempotency_key: str,
    ) -> ChargeResult:
        """Create a charge and confirm it immediately."""
        ...

    @abstractmethod
    def refund(self, charge_id: str, idempotency_key: str | None = None) -> RefundResult:
        """Refund a previously confirmed charge in full.

        Repeating a call with the same ``idempotency_key`` returns the original
        refund instead of issuing a second one.
        """
        ...
