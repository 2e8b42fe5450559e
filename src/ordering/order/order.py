"""Order aggregate: the order state machine.

State Machine:
    pending → processing → shipped → delivered
    cancelled (from pending, processing or shipped)

``delivered`` and ``cancelled`` are terminal. Moves are forward-only; an
administrator may skip ahead (pending → shipped) but never go back.

Inventory side effects of a status change are decided by one function,
``next_inventory_action(previous, new)``, over an explicit table covering
every (previous, new) pair. Stock is reserved when the order is placed; the
first move into a fulfillment state reduces stock once more, and cancelling
gives the units back.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, ValueObject

from ordering.domain import ordering
from ordering.inventory.ledger import StockLine
from ordering.order.events import OrderCancelled, OrderPlaced, OrderRefunded, OrderStatusChanged


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentMethod(Enum):
    CARD = "card"
    COD = "cod"


class PaymentStatus(Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class CancellationActor(Enum):
    CUSTOMER = "customer"
    ADMIN = "admin"


class InventoryAction(Enum):
    REDUCE = "reduce"
    RESTORE = "restore"
    NONE = "none"


# State machine transition map. Re-applying the current status is accepted
# separately as a no-op.
_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {
        OrderStatus.PROCESSING,
        OrderStatus.SHIPPED,
        OrderStatus.DELIVERED,
        OrderStatus.CANCELLED,
    },
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

# States in which stock has been reduced for fulfillment
_INVENTORY_REDUCING = frozenset({OrderStatus.PROCESSING, OrderStatus.SHIPPED, OrderStatus.DELIVERED})


def _inventory_action_for(previous, new):
    if new in _INVENTORY_REDUCING and previous not in _INVENTORY_REDUCING and previous != OrderStatus.CANCELLED:
        return InventoryAction.REDUCE
    if new == OrderStatus.CANCELLED and previous != OrderStatus.CANCELLED:
        # From pending this releases the reservation taken at placement.
        return InventoryAction.RESTORE
    return InventoryAction.NONE


_INVENTORY_ACTIONS = {
    (previous, new): _inventory_action_for(previous, new) for previous in OrderStatus for new in OrderStatus
}


def next_inventory_action(previous, new) -> InventoryAction:
    """Return the ledger action implied by moving from ``previous`` to ``new``."""
    return _INVENTORY_ACTIONS[(OrderStatus(previous), OrderStatus(new))]


def parse_status(value) -> OrderStatus:
    try:
        return OrderStatus(str(value).strip().lower())
    except ValueError:
        raise ValidationError({"status": [f"Invalid status: {value}"]}) from None


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@ordering.value_object(part_of="Order")
class ShippingAddress:
    """Where the order ships, as captured at checkout.

    A snapshot: later edits to the customer's saved addresses never reach it.
    """

    name = String(required=True, max_length=255)
    phone = String(max_length=30)
    flat_house = String(max_length=255)
    area = String(max_length=255)
    city = String(max_length=100)
    state = String(max_length=100)
    pin_code = String(max_length=20)


@ordering.value_object(part_of="Order")
class PaymentDetails:
    """Processor references for a card order."""

    charge_id = String(max_length=255)
    card_type = String(max_length=50)
    last4 = String(max_length=4)
    refund_id = String(max_length=255)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@ordering.entity(part_of="Order")
class OrderItem:
    """A quantity of one product variant with the unit price locked at checkout."""

    product_id = Identifier(required=True)
    color_id = Identifier(required=True)
    size_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    price = Float(required=True, min_value=0.0)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@ordering.aggregate
class Order:
    customer_id = Identifier(required=True)
    items = HasMany(OrderItem)
    shipping_address = ValueObject(ShippingAddress)
    recipient_name = String(max_length=255)  # copy of shipping_address.name for admin search
    payment_method = String(required=True, choices=PaymentMethod)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    payment_details = ValueObject(PaymentDetails)
    order_status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    total_amount = Float(required=True, min_value=0.0)
    shipping_cost = Float(default=0.0, min_value=0.0)
    tracking_number = String(max_length=255)
    cancelled_by = String(choices=CancellationActor)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def order_must_have_items(self):
        if not self.items:
            raise ValidationError({"items": ["Order must contain at least one item"]})

    @invariant.post
    def delivered_cod_orders_are_paid(self):
        if (
            self.payment_method == PaymentMethod.COD.value
            and self.order_status == OrderStatus.DELIVERED.value
            and self.payment_status != PaymentStatus.COMPLETED.value
        ):
            raise ValidationError({"payment_status": ["Delivered cash-on-delivery orders must be paid"]})

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        customer_id,
        items_data,
        shipping_address,
        payment_method,
        total_amount,
        shipping_cost=0.0,
        charge_id=None,
        card_type=None,
        last4=None,
    ):
        """Create a new order whose stock has already been reserved.

        Args:
            customer_id: The customer placing the order.
            items_data: List of dicts with product_id, color_id, size_id,
                        quantity, price.
            shipping_address: Dict with name, phone, flat_house, area, city,
                              state, pin_code.
            payment_method: "card" or "cod".
            charge_id: Processor charge id for an authorized card payment.
        """
        now = datetime.now(UTC)
        is_card = payment_method == PaymentMethod.CARD.value

        order = cls(
            customer_id=customer_id,
            items=[
                OrderItem(
                    product_id=item["product_id"],
                    color_id=item["color_id"],
                    size_id=item["size_id"],
                    quantity=item["quantity"],
                    price=item["price"],
                )
                for item in items_data
            ],
            shipping_address=ShippingAddress(**shipping_address),
            recipient_name=shipping_address.get("name"),
            payment_method=payment_method,
            payment_status=(
                PaymentStatus.COMPLETED.value if is_card and charge_id else PaymentStatus.PENDING.value
            ),
            payment_details=(
                PaymentDetails(charge_id=charge_id, card_type=card_type, last4=last4) if is_card else None
            ),
            total_amount=total_amount,
            shipping_cost=shipping_cost or 0.0,
            created_at=now,
            updated_at=now,
        )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                customer_id=str(customer_id),
                items=json.dumps(items_data),
                payment_method=payment_method,
                payment_status=order.payment_status,
                charge_id=charge_id,
                total_amount=total_amount,
                shipping_cost=order.shipping_cost,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def stock_lines(self):
        return [
            StockLine(
                product_id=str(item.product_id),
                color_id=str(item.color_id),
                size_id=str(item.size_id),
                quantity=item.quantity,
            )
            for item in self.items
        ]

    @property
    def requires_refund(self):
        """True when cancelling must give money back to the customer's card."""
        return (
            self.payment_method == PaymentMethod.CARD.value
            and self.payment_status == PaymentStatus.COMPLETED.value
            and self.payment_details is not None
            and bool(self.payment_details.charge_id)
            and not self.payment_details.refund_id
        )

    # -------------------------------------------------------------------
    # State transitions
    # -------------------------------------------------------------------
    def assert_can_transition(self, target):
        current = OrderStatus(self.order_status)
        if target != current and target not in _VALID_TRANSITIONS[current]:
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target.value}"]})

    def transition_to(self, new_status, tracking_number=None, actor=CancellationActor.ADMIN):
        """Move the order to ``new_status`` and return the inventory action the move implies."""
        target = parse_status(new_status)
        self.assert_can_transition(target)

        previous = OrderStatus(self.order_status)
        action = next_inventory_action(previous, target)
        now = datetime.now(UTC)

        if target == OrderStatus.DELIVERED and self.payment_method == PaymentMethod.COD.value:
            self.payment_status = PaymentStatus.COMPLETED.value
        self.order_status = target.value
        if tracking_number:
            self.tracking_number = tracking_number
        self.updated_at = now

        if target == previous:
            return action

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                previous_status=previous.value,
                new_status=target.value,
                inventory_action=action.value,
                payment_status=self.payment_status,
                tracking_number=self.tracking_number,
                changed_at=now,
            )
        )
        if target == OrderStatus.CANCELLED:
            self.cancelled_by = actor.value
            self.raise_(
                OrderCancelled(
                    order_id=str(self.id),
                    customer_id=str(self.customer_id),
                    previous_status=previous.value,
                    cancelled_by=actor.value,
                    cancelled_at=now,
                )
            )
        return action

    def assert_cancellable_by_customer(self):
        if OrderStatus(self.order_status) != OrderStatus.PENDING:
            raise ValidationError({"order_status": ["Cannot cancel order in current status"]})

    def cancel_by_customer(self):
        """Customer-initiated cancellation, allowed only while the order is pending."""
        self.assert_cancellable_by_customer()
        return self.transition_to(OrderStatus.CANCELLED.value, actor=CancellationActor.CUSTOMER)

    def record_refund(self, refund_id):
        details = self.payment_details
        self.payment_details = PaymentDetails(
            charge_id=details.charge_id,
            card_type=details.card_type,
            last4=details.last4,
            refund_id=refund_id,
        )
        self.updated_at = datetime.now(UTC)
        self.raise_(
            OrderRefunded(
                order_id=str(self.id),
                charge_id=details.charge_id,
                refund_id=refund_id,
                amount=self.total_amount,
                refunded_at=self.updated_at,
            )
        )
