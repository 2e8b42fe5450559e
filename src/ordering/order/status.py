"""Administrative order status updates: command and handler."""

import structlog
from payments.coordinator import PaymentCoordinator
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.inventory.ledger import VariantLedger
from ordering.order.order import InventoryAction, Order, OrderStatus, parse_status

logger = structlog.get_logger(__name__)


def apply_inventory_action(action, lines):
    """Run the ledger movement an order transition calls for."""
    ledger = VariantLedger()
    if action == InventoryAction.REDUCE:
        ledger.reduce_on_fulfillment(lines)
    elif action == InventoryAction.RESTORE:
        ledger.restore(lines)


def refund_order(order):
    """Refund the order's card charge and record the refund on the order.

    A failed refund raises ``PaymentError`` and leaves the order untouched.
    Refunding the same order again replays the processor's original refund.
    """
    refund = PaymentCoordinator().refund(order.payment_details.charge_id)
    order.record_refund(refund.refund_id)
    return refund


def log_unpersisted_refund(order, refund):
    logger.error(
        "Order refunded but the cancellation could not be persisted",
        order_id=str(order.id),
        charge_id=refund.charge_id,
        refund_id=refund.refund_id,
        exc_info=True,
    )


@ordering.command(part_of="Order")
class UpdateOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, max_length=20)
    tracking_number = String(max_length=255)


@ordering.command_handler(part_of=Order)
class OrderStatusHandler:
    @handle(UpdateOrderStatus)
    def update_status(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)

        target = parse_status(command.status)
        previous = OrderStatus(order.order_status)
        order.assert_can_transition(target)

        refund = None
        if target == OrderStatus.CANCELLED and previous != OrderStatus.CANCELLED and order.requires_refund:
            refund = refund_order(order)

        try:
            action = order.transition_to(target.value, tracking_number=command.tracking_number)
            apply_inventory_action(action, order.stock_lines())
            repo.add(order)
        except Exception:
            if refund is not None:
                log_unpersisted_refund(order, refund)
            raise

        logger.info(
            "Order status updated",
            order_id=str(order.id),
            previous_status=previous.value,
            new_status=target.value,
            inventory_action=action.value,
        )
        return str(order.id)
