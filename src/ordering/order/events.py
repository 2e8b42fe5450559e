"""Domain events for the Order aggregate.

Events are immutable facts raised alongside state changes and persisted with
the aggregate. Nothing in this service subscribes to them yet; they form the
order's audit trail.
"""

from protean.fields import DateTime, Float, Identifier, String, Text

from ordering.domain import ordering


@ordering.event(part_of="Order")
class OrderPlaced:
    """A customer placed an order and its stock was reserved."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of item dicts
    payment_method = String(required=True)
    payment_status = String(required=True)
    charge_id = String()
    total_amount = Float(required=True)
    shipping_cost = Float()
    placed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderStatusChanged:
    """An administrator moved the order to a new status."""

    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    inventory_action = String(required=True)
    payment_status = String(required=True)
    tracking_number = String()
    changed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderCancelled:
    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    previous_status = String(required=True)
    cancelled_by = String(required=True)
    cancelled_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderRefunded:
    """The card charge behind a cancelled order was refunded."""

    __version__ = 1

    order_id = Identifier(required=True)
    charge_id = String(required=True)
    refund_id = String()
    amount = Float(required=True)
    refunded_at = DateTime(required=True)
