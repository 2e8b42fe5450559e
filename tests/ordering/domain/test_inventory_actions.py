"""Tests for the inventory action table behind every status transition."""

import pytest
from ordering.order.order import InventoryAction, OrderStatus, next_inventory_action

PENDING = OrderStatus.PENDING
PROCESSING = OrderStatus.PROCESSING
SHIPPED = OrderStatus.SHIPPED
DELIVERED = OrderStatus.DELIVERED
CANCELLED = OrderStatus.CANCELLED

REDUCE = InventoryAction.REDUCE
RESTORE = InventoryAction.RESTORE
NONE = InventoryAction.NONE

_EXPECTED = {
    PENDING: {PENDING: NONE, PROCESSING: REDUCE, SHIPPED: REDUCE, DELIVERED: REDUCE, CANCELLED: RESTORE},
    PROCESSING: {PENDING: NONE, PROCESSING: NONE, SHIPPED: NONE, DELIVERED: NONE, CANCELLED: RESTORE},
    SHIPPED: {PENDING: NONE, PROCESSING: NONE, SHIPPED: NONE, DELIVERED: NONE, CANCELLED: RESTORE},
    DELIVERED: {PENDING: NONE, PROCESSING: NONE, SHIPPED: NONE, DELIVERED: NONE, CANCELLED: RESTORE},
    CANCELLED: {PENDING: NONE, PROCESSING: NONE, SHIPPED: NONE, DELIVERED: NONE, CANCELLED: NONE},
}


@pytest.mark.parametrize(
    "previous,new",
    [(previous, new) for previous in OrderStatus for new in OrderStatus],
)
def test_every_pair_has_the_expected_action(previous, new):
    assert next_inventory_action(previous, new) == _EXPECTED[previous][new]


def test_accepts_raw_status_values():
    assert next_inventory_action("pending", "processing") == REDUCE
    assert next_inventory_action("shipped", "cancelled") == RESTORE


def test_progressing_through_fulfillment_reduces_once():
    path = [PENDING, PROCESSING, SHIPPED, DELIVERED]
    actions = [next_inventory_action(a, b) for a, b in zip(path, path[1:], strict=False)]
    assert actions.count(REDUCE) == 1


def test_cancelled_never_reduces():
    for new in OrderStatus:
        assert next_inventory_action(CANCELLED, new) != REDUCE
