"""Customer-initiated order cancellation: command and handler."""

import structlog
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import Order
from ordering.order.status import apply_inventory_action, log_unpersisted_refund, refund_order

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)


@ordering.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.owned_by(command.order_id, command.customer_id)
        order.assert_cancellable_by_customer()

        # Refund before cancelling: a failed refund leaves the order pending.
        refund = refund_order(order) if order.requires_refund else None

        try:
            action = order.cancel_by_customer()
            apply_inventory_action(action, order.stock_lines())
            repo.add(order)
        except Exception:
            if refund is not None:
                log_unpersisted_refund(order, refund)
            raise

        logger.info(
            "Order cancelled by customer",
            order_id=str(order.id),
            customer_id=str(order.customer_id),
            refunded=refund is not None,
        )
        return str(order.id)
