"""Service-level errors raised across the ordering and payments packages.

Field-level validation and missing records use Protean's own exceptions
(``ValidationError``, ``ObjectNotFoundError``). The two errors below carry
extra structured data that the HTTP layer surfaces to clients.
"""

from protean.exceptions import ValidationError


class InsufficientStock(ValidationError):
    """A reservation asked for more units than a variant holds."""

    def __init__(
        self,
        product_id: str,
        variant_id: str | None,
        available: int,
        requested: int,
        product_name: str | None = None,
    ) -> None:
        self.product_id = product_id
        self.variant_id = variant_id
        self.available = available
        self.requested = requested

        label = product_name or product_id
        self.message = f"Insufficient stock for product {label}. Available: {available}, Requested: {requested}"
        super().__init__({"quantity": [self.message]})


class PaymentError(Exception):
    """The payment processor declined or could not process a charge or refund."""

    def __init__(self, code: str, message: str, decline_code: str | None = None) -> None:
        self.code = code
        self.message = message
        self.decline_code = decline_code
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message, "decline_code": self.decline_code}
