import json
from dataclasses import dataclass

import pytest
from payments.gateway import reset_gateway, set_gateway
from payments.gateway.fake_adapter import FakeGateway
from protean import current_domain
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def ordering_bed():
    from ordering.domain import ordering

    bed = DomainFixture(ordering)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(ordering_bed):
    with ordering_bed.domain_context():
        yield

        for _, provider in current_domain.providers.items():
            provider._data_reset()

        for _, broker in current_domain.brokers.items():
            broker._data_reset()

        current_domain.event_store.store._data_reset()


@pytest.fixture(autouse=True)
def gateway():
    """A fresh fake payment processor for every test."""
    fake = FakeGateway()
    set_gateway(fake)
    yield fake
    reset_gateway()


# ---------------------------------------------------------------------------
# Catalogue seeding
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class Catalog:
    product_id: str
    red: str
    blue: str
    medium: str
    large: str


@pytest.fixture()
def catalog():
    """Colors Red/Blue, sizes M/L, and a tee with Red-M x5 and Blue-L x2."""
    from ordering.inventory.stocking import RegisterColor, RegisterSize, StockProduct

    red = current_domain.process(RegisterColor(name="Red", hex_code="#FF0000"), asynchronous=False)
    blue = current_domain.process(RegisterColor(name="Blue", hex_code="#0000FF"), asynchronous=False)
    medium = current_domain.process(RegisterSize(name="M"), asynchronous=False)
    large = current_domain.process(RegisterSize(name="L"), asynchronous=False)
    product_id = current_domain.process(
        StockProduct(
            name="Classic Tee",
            variants=json.dumps(
                [
                    {"color": "Red", "size": "M", "stock": 5},
                    {"color": "Blue", "size": "L", "stock": 2},
                ]
            ),
        ),
        asynchronous=False,
    )
    return Catalog(product_id=product_id, red=red, blue=blue, medium=medium, large=large)


@pytest.fixture()
def stock_of():
    """Return a variant's current stock."""
    from ordering.inventory.product import Product

    def _stock_of(product_id, color_id, size_id):
        product = current_domain.repository_for(Product).get(product_id)
        return product.variant_for(color_id, size_id).stock

    return _stock_of


@pytest.fixture()
def place_order(catalog):
    """Place an order for Red/M units of the catalog tee and return its id."""
    from ordering.order.creation import PlaceOrder

    def _place(
        quantity=1,
        payment_method="cod",
        customer_id="cust-001",
        payment_method_token="pm_card_visa",
        color="Red",
        size="M",
        price=25.0,
        recipient="Asha Rao",
    ):
        return current_domain.process(
            PlaceOrder(
                customer_id=customer_id,
                items=json.dumps(
                    [
                        {
                            "product": catalog.product_id,
                            "color": color,
                            "size": size,
                            "quantity": quantity,
                            "price": price,
                        }
                    ]
                ),
                shipping_address=json.dumps({"name": recipient, "city": "Pune", "pin_code": "411001"}),
                payment_method=payment_method,
                payment_method_token=payment_method_token if payment_method == "card" else None,
                card_type="visa" if payment_method == "card" else None,
                last4="4242" if payment_method == "card" else None,
                total_amount=price * quantity + 5.0,
                shipping_cost=5.0,
            ),
            asynchronous=False,
        )

    return _place
