"""Order queries: a customer's own orders, admin search, and active-order lookups."""

from datetime import UTC

from protean.exceptions import ObjectNotFoundError

from ordering.domain import ordering
from ordering.order.order import Order, OrderStatus

# Orders in these states still hold stock or await delivery
ACTIVE_STATUSES = (OrderStatus.PENDING.value, OrderStatus.PROCESSING.value, OrderStatus.SHIPPED.value)

_BATCH_SIZE = 100


def _as_utc(value):
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


@ordering.repository(part_of=Order)
class OrderRepository:
    def _all(self, query):
        """Iterate every match of ``query``, fetching in batches."""
        offset = 0
        while True:
            result = query.offset(offset).limit(_BATCH_SIZE).all()
            yield from result.items
            offset += _BATCH_SIZE
            if offset >= result.total:
                break

    def owned_by(self, order_id, customer_id):
        """Return the order if it belongs to ``customer_id``; otherwise it does not exist."""
        try:
            order = self.get(order_id)
        except ObjectNotFoundError:
            order = None

        if order is None or str(order.customer_id) != str(customer_id):
            raise ObjectNotFoundError({"order": ["Order not found"]})
        return order

    def for_customer(self, customer_id):
        """All of a customer's orders, newest first."""
        query = self._dao.query.filter(customer_id=customer_id).order_by("-created_at")
        return list(self._all(query))

    def search(
        self,
        status=None,
        payment_method=None,
        start_date=None,
        end_date=None,
        search=None,
        page=1,
        limit=20,
    ):
        """Filter, sort newest first and paginate. Returns ``(orders, total)``."""
        criteria = {}
        if status:
            criteria["order_status"] = status
        if payment_method:
            criteria["payment_method"] = payment_method
        if start_date:
            criteria["created_at__gte"] = _as_utc(start_date)
        if end_date:
            criteria["created_at__lte"] = _as_utc(end_date)
        if search:
            criteria["recipient_name__icontains"] = search

        query = self._dao.query
        if criteria:
            query = query.filter(**criteria)
        result = query.order_by("-created_at").offset((page - 1) * limit).limit(limit).all()
        return result.items, result.total

    def active_for_product(self, product_id):
        """Orders that still reference ``product_id`` and are not delivered or cancelled."""
        query = self._dao.query.filter(order_status__in=list(ACTIVE_STATUSES)).order_by("created_at")
        return [
            order
            for order in self._all(query)
            if any(str(item.product_id) == str(product_id) for item in order.items)
        ]
