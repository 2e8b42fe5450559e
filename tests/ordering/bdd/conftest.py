"""Shared BDD fixtures and step definitions for the order service."""

import pytest
from ordering.order.order import Order
from ordering.order.status import UpdateOrderStatus
from protean import current_domain
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then
from shared.exceptions import InsufficientStock, PaymentError


@pytest.fixture()
def scenario_state():
    """Mutable state shared between the steps of one scenario."""
    return {"order_id": None, "error": None}


def _current_order(scenario_state):
    return current_domain.repository_for(Order).get(scenario_state["order_id"])


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse("the catalog tee has {stock:d} units of Red M"))
def _(catalog, stock_of, stock):
    assert stock_of(catalog.product_id, catalog.red, catalog.medium) == stock


@given(parsers.cfparse('the processor authorizes charges as "{charge_id}"'))
def _(gateway, charge_id):
    gateway.configure(should_succeed=True, charge_id=charge_id)


@given("the processor declines charges")
def _(gateway):
    gateway.configure(should_succeed=False)


@given(parsers.cfparse('the customer placed an order for a quantity of {quantity:d} paying "{method}"'))
def _(place_order, scenario_state, quantity, method):
    scenario_state["order_id"] = place_order(quantity=quantity, payment_method=method)


@given(parsers.cfparse('the admin set the order status to "{status}"'))
def _(scenario_state, status):
    current_domain.process(
        UpdateOrderStatus(order_id=scenario_state["order_id"], status=status),
        asynchronous=False,
    )


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then("the order is placed")
def _(scenario_state):
    assert scenario_state["error"] is None
    assert scenario_state["order_id"] is not None


@then(parsers.cfparse("Red M stock is {stock:d}"))
def _(catalog, stock_of, stock):
    assert stock_of(catalog.product_id, catalog.red, catalog.medium) == stock


@then(
    parsers.cfparse(
        "the order is rejected for insufficient stock with {available:d} available and {requested:d} requested"
    )
)
def _(scenario_state, available, requested):
    error = scenario_state["error"]
    assert isinstance(error, InsufficientStock)
    assert error.available == available
    assert error.requested == requested


@then("the order is rejected by the processor")
def _(scenario_state):
    assert isinstance(scenario_state["error"], PaymentError)


@then("the status update is rejected")
def _(scenario_state):
    assert isinstance(scenario_state["error"], ValidationError)


@then("the customer has no orders")
def _():
    assert current_domain.repository_for(Order).for_customer("cust-001") == []


@then(parsers.cfparse('the order payment status is "{payment_status}"'))
def _(scenario_state, payment_status):
    assert _current_order(scenario_state).payment_status == payment_status


@then(parsers.cfparse('the order status is "{status}"'))
def _(scenario_state, status):
    assert _current_order(scenario_state).order_status == status


@then(parsers.cfparse('the order charge id is "{charge_id}"'))
def _(scenario_state, charge_id):
    assert _current_order(scenario_state).payment_details.charge_id == charge_id


@then(parsers.cfparse('a refund was issued for "{charge_id}"'))
def _(gateway, charge_id):
    assert [call["charge_id"] for call in gateway.calls_to("refund")] == [charge_id]


@then("no refund was issued")
def _(gateway):
    assert gateway.calls_to("refund") == []
