"""FastAPI routes for the order service: orders, product stock and reference data."""

import json
import math
from datetime import datetime

from fastapi import APIRouter, Depends, Query
from protean.utils.globals import current_domain

from ordering.api.auth import Caller, admin_caller, current_caller
from ordering.api.schemas import (
    AddressSchema,
    AdjustStockRequest,
    AdminOrderListEnvelope,
    IdEnvelope,
    IdOut,
    OrderEnvelope,
    OrderItemOut,
    OrderListEnvelope,
    OrderOut,
    PaymentDetailsOut,
    PlaceOrderRequest,
    ProductEnvelope,
    ProductOut,
    RegisterColorRequest,
    RegisterSizeRequest,
    StockProductRequest,
    UpdateOrderStatusRequest,
    VariantOut,
)
from ordering.inventory.product import Product
from ordering.inventory.stocking import (
    AdjustVariantStock,
    RegisterColor,
    RegisterSize,
    RemoveProduct,
    StockProduct,
)
from ordering.order.cancellation import CancelOrder
from ordering.order.creation import PlaceOrder
from ordering.order.order import Order, parse_status
from ordering.order.status import UpdateOrderStatus


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------
def _order_out(order) -> OrderOut:
    address = order.shipping_address
    details = order.payment_details
    return OrderOut(
        id=str(order.id),
        customer_id=str(order.customer_id),
        items=[
            OrderItemOut(
                id=str(item.id),
                product_id=str(item.product_id),
                color_id=str(item.color_id),
                size_id=str(item.size_id),
                quantity=item.quantity,
                price=item.price,
            )
            for item in order.items
        ],
        shipping_address=(
            AddressSchema(
                name=address.name,
                phone=address.phone,
                flat_house=address.flat_house,
                area=address.area,
                city=address.city,
                state=address.state,
                pin_code=address.pin_code,
            )
            if address
            else None
        ),
        payment_method=order.payment_method,
        payment_status=order.payment_status,
        payment_details=(
            PaymentDetailsOut(
                charge_id=details.charge_id,
                card_type=details.card_type,
                last4=details.last4,
                refund_id=details.refund_id,
            )
            if details
            else None
        ),
        order_status=order.order_status,
        total_amount=order.total_amount,
        shipping_cost=order.shipping_cost or 0.0,
        tracking_number=order.tracking_number,
        cancelled_by=order.cancelled_by,
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


def _product_out(product) -> ProductOut:
    return ProductOut(
        id=str(product.id),
        name=product.name,
        available_for_sale=product.available_for_sale,
        inventory=product.inventory,
        variants=[
            VariantOut(id=str(v.id), color_id=str(v.color_id), size_id=str(v.size_id), stock=v.stock)
            for v in product.variants
        ],
    )


def _orders():
    return current_domain.repository_for(Order)


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderEnvelope)
async def place_order(body: PlaceOrderRequest, caller: Caller = Depends(current_caller)) -> OrderEnvelope:
    """Place an order: reserve stock, charge the card if paying by card, persist."""
    payment = body.payment_details
    command = PlaceOrder(
        customer_id=caller.customer_id,
        items=json.dumps([item.model_dump() for item in body.items]),
        shipping_address=json.dumps(body.shipping_address.model_dump()),
        payment_method=body.payment_method,
        payment_method_token=payment.payment_method_token if payment else None,
        card_type=payment.card_type if payment else None,
        last4=payment.last4 if payment else None,
        total_amount=body.total_amount,
        shipping_cost=body.shipping_cost,
    )
    order_id = current_domain.process(command, asynchronous=False)
    return OrderEnvelope(data=_order_out(_orders().get(order_id)))


@order_router.get("", response_model=OrderListEnvelope)
async def list_my_orders(caller: Caller = Depends(current_caller)) -> OrderListEnvelope:
    """The caller's orders, newest first."""
    orders = _orders().for_customer(caller.customer_id)
    return OrderListEnvelope(data=[_order_out(order) for order in orders])


@order_router.get("/admin/all", response_model=AdminOrderListEnvelope)
async def list_all_orders(
    status: str | None = None,
    payment_method: str | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    search: str | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    caller: Caller = Depends(admin_caller),
) -> AdminOrderListEnvelope:
    """All orders, filtered and paginated (admin)."""
    orders, total = _orders().search(
        status=parse_status(status).value if status else None,
        payment_method=payment_method,
        start_date=start_date,
        end_date=end_date,
        search=search,
        page=page,
        limit=limit,
    )
    return AdminOrderListEnvelope(
        data=[_order_out(order) for order in orders],
        total=total,
        page=page,
        total_pages=math.ceil(total / limit),
    )


@order_router.get("/{order_id}", response_model=OrderEnvelope)
async def get_order(order_id: str, caller: Caller = Depends(current_caller)) -> OrderEnvelope:
    """One of the caller's orders. Orders of other customers read as missing."""
    order = _orders().owned_by(order_id, caller.customer_id)
    return OrderEnvelope(data=_order_out(order))


@order_router.post("/{order_id}/cancel", response_model=OrderEnvelope)
async def cancel_order(order_id: str, caller: Caller = Depends(current_caller)) -> OrderEnvelope:
    """Cancel a pending order, refunding its card charge first."""
    current_domain.process(CancelOrder(order_id=order_id, customer_id=caller.customer_id), asynchronous=False)
    return OrderEnvelope(data=_order_out(_orders().get(order_id)))


@order_router.put("/{order_id}/status", response_model=OrderEnvelope)
async def update_order_status(
    order_id: str,
    body: UpdateOrderStatusRequest,
    caller: Caller = Depends(admin_caller),
) -> OrderEnvelope:
    """Move an order through its lifecycle (admin)."""
    command = UpdateOrderStatus(order_id=order_id, status=body.status, tracking_number=body.tracking_number)
    current_domain.process(command, asynchronous=False)
    return OrderEnvelope(data=_order_out(_orders().get(order_id)))


# ---------------------------------------------------------------------------
# Product Router
# ---------------------------------------------------------------------------
product_router = APIRouter(prefix="/products", tags=["products"])


@product_router.post("", status_code=201, response_model=ProductEnvelope)
async def stock_product(body: StockProductRequest, caller: Caller = Depends(admin_caller)) -> ProductEnvelope:
    """Create a product with its variants and their opening stock (admin)."""
    command = StockProduct(
        name=body.name,
        variants=json.dumps([variant.model_dump() for variant in body.variants]),
    )
    product_id = current_domain.process(command, asynchronous=False)
    return ProductEnvelope(data=_product_out(current_domain.repository_for(Product).get(product_id)))


@product_router.get("/{product_id}/inventory", response_model=ProductEnvelope)
async def get_inventory(product_id: str) -> ProductEnvelope:
    return ProductEnvelope(data=_product_out(current_domain.repository_for(Product).get(product_id)))


@product_router.put("/{product_id}/variants/{variant_id}/stock", response_model=ProductEnvelope)
async def adjust_variant_stock(
    product_id: str,
    variant_id: str,
    body: AdjustStockRequest,
    caller: Caller = Depends(admin_caller),
) -> ProductEnvelope:
    """Set a variant's stock directly (admin)."""
    command = AdjustVariantStock(product_id=product_id, variant_id=variant_id, stock=body.stock)
    current_domain.process(command, asynchronous=False)
    return ProductEnvelope(data=_product_out(current_domain.repository_for(Product).get(product_id)))


@product_router.delete("/{product_id}", response_model=IdEnvelope)
async def remove_product(product_id: str, caller: Caller = Depends(admin_caller)) -> IdEnvelope:
    """Delete a product unless active orders still reference it (admin)."""
    current_domain.process(RemoveProduct(product_id=product_id), asynchronous=False)
    return IdEnvelope(data=IdOut(id=product_id))


# ---------------------------------------------------------------------------
# Reference data routers
# ---------------------------------------------------------------------------
color_router = APIRouter(prefix="/colors", tags=["colors"])
size_router = APIRouter(prefix="/sizes", tags=["sizes"])


@color_router.post("", status_code=201, response_model=IdEnvelope)
async def register_color(body: RegisterColorRequest, caller: Caller = Depends(admin_caller)) -> IdEnvelope:
    color_id = current_domain.process(RegisterColor(name=body.name, hex_code=body.hex_code), asynchronous=False)
    return IdEnvelope(data=IdOut(id=color_id))


@size_router.post("", status_code=201, response_model=IdEnvelope)
async def register_size(body: RegisterSizeRequest, caller: Caller = Depends(admin_caller)) -> IdEnvelope:
    size_id = current_domain.process(RegisterSize(name=body.name), asynchronous=False)
    return IdEnvelope(data=IdOut(id=size_id))
