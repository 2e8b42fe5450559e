"""Order placement: command and handler.

Placement reserves stock first and charges the card second, so a declined
card never leaves stock held and a short variant never leaves a charge
behind. Any failure after a step succeeded undoes that step before the error
propagates.
"""

import json

import structlog
from payments.coordinator import PaymentCoordinator, to_minor_units
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain
from shared import config
from shared.exceptions import PaymentError

from ordering.domain import ordering
from ordering.inventory.ledger import StockLine, VariantLedger
from ordering.inventory.resolution import resolve_line_items
from ordering.order.order import Order, PaymentMethod

logger = structlog.get_logger(__name__)

_ADDRESS_FIELDS = ("name", "phone", "flat_house", "area", "city", "state", "pin_code")


@ordering.command(part_of="Order")
class PlaceOrder:
    customer_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of {product, color, size, quantity, price}
    shipping_address = Text(required=True)  # JSON: address dict
    payment_method = String(required=True, max_length=10)
    payment_method_token = String(max_length=255)
    card_type = String(max_length=50)
    last4 = String(max_length=4)
    total_amount = Float(required=True, min_value=0.0)
    shipping_cost = Float(default=0.0)
    idempotency_key = String(max_length=255)


def _load_json(value):
    return json.loads(value) if isinstance(value, str) else value


@ordering.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        payment_method = (command.payment_method or "").lower()
        if payment_method not in {m.value for m in PaymentMethod}:
            raise ValidationError({"payment_method": [f"Unsupported payment method: {command.payment_method}"]})

        address = _load_json(command.shipping_address) or {}
        if not address.get("name"):
            raise ValidationError({"shipping_address": ["Recipient name is required"]})
        address = {key: address.get(key) for key in _ADDRESS_FIELDS if address.get(key) is not None}

        items_data = resolve_line_items(_load_json(command.items))
        lines = [
            StockLine(
                product_id=item["product_id"],
                color_id=item["color_id"],
                size_id=item["size_id"],
                quantity=item["quantity"],
            )
            for item in items_data
        ]

        ledger = VariantLedger()
        ledger.reserve(lines)

        charge = None
        if payment_method == PaymentMethod.CARD.value:
            try:
                charge = PaymentCoordinator().authorize(
                    amount_cents=to_minor_units(command.total_amount),
                    currency=config.get_order_currency(),
                    payment_method_token=command.payment_method_token,
                    idempotency_key=command.idempotency_key,
                )
            except Exception:
                ledger.restore(lines)
                raise

        try:
            order = Order.place(
                customer_id=command.customer_id,
                items_data=items_data,
                shipping_address=address,
                payment_method=payment_method,
                total_amount=command.total_amount,
                shipping_cost=command.shipping_cost,
                charge_id=charge.charge_id if charge else None,
                card_type=command.card_type,
                last4=command.last4,
            )
            current_domain.repository_for(Order).add(order)
        except Exception:
            logger.error(
                "Order could not be persisted after stock was reserved, compensating",
                customer_id=str(command.customer_id),
                charge_id=charge.charge_id if charge else None,
                exc_info=True,
            )
            self._compensate(ledger, lines, charge)
            raise

        logger.info(
            "Order placed",
            order_id=str(order.id),
            customer_id=str(order.customer_id),
            payment_method=payment_method,
            items=len(lines),
        )
        return str(order.id)

    @staticmethod
    def _compensate(ledger, lines, charge):
        if charge is not None:
            try:
                PaymentCoordinator().refund(charge.charge_id)
            except PaymentError:
                logger.error("Compensating refund failed", charge_id=charge.charge_id, exc_info=True)
        ledger.restore(lines)
