"""Pydantic request/response schemas for the order service API.

These are external contracts (anti-corruption layer) kept apart from the
internal Protean commands. Every response is an envelope:
``{"success": bool, "data": ..., "error": ...}``.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class AddressSchema(BaseModel):
    name: str = Field(min_length=1)
    phone: str | None = None
    flat_house: str | None = None
    area: str | None = None
    city: str | None = None
    state: str | None = None
    pin_code: str | None = None


class OrderLineSchema(BaseModel):
    product: str
    color: str = Field(description="Color id or name")
    size: str = Field(description="Size id or name")
    quantity: int = Field(ge=1)
    price: float = Field(ge=0)


class PaymentDetailsSchema(BaseModel):
    payment_method_token: str | None = Field(default=None, description="Processor payment method id")
    card_type: str | None = None
    last4: str | None = Field(default=None, max_length=4)


# ---------------------------------------------------------------------------
# Order Request Schemas
# ---------------------------------------------------------------------------
class PlaceOrderRequest(BaseModel):
    items: list[OrderLineSchema] = Field(min_length=1)
    shipping_address: AddressSchema
    payment_method: Literal["card", "cod"]
    payment_details: PaymentDetailsSchema | None = None
    total_amount: float = Field(ge=0)
    shipping_cost: float = Field(default=0.0, ge=0)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "items": [{"product": "<product-id>", "color": "Red", "size": "M", "quantity": 2, "price": 25.0}],
                    "shipping_address": {
                        "name": "Asha Rao",
                        "phone": "9876543210",
                        "flat_house": "12B",
                        "area": "MG Road",
                        "city": "Pune",
                        "state": "MH",
                        "pin_code": "411001",
                    },
                    "payment_method": "card",
                    "payment_details": {"payment_method_token": "pm_card_visa", "card_type": "visa", "last4": "4242"},
                    "total_amount": 55.0,
                    "shipping_cost": 5.0,
                }
            ]
        }
    }


class UpdateOrderStatusRequest(BaseModel):
    status: str
    tracking_number: str | None = None


# ---------------------------------------------------------------------------
# Product Request Schemas
# ---------------------------------------------------------------------------
class VariantStockSchema(BaseModel):
    color: str
    size: str
    stock: int = Field(ge=0)


class StockProductRequest(BaseModel):
    name: str = Field(min_length=1)
    variants: list[VariantStockSchema] = Field(min_length=1)


class AdjustStockRequest(BaseModel):
    stock: int = Field(ge=0)


class RegisterColorRequest(BaseModel):
    name: str = Field(min_length=1, max_length=50)
    hex_code: str | None = Field(default=None, max_length=7)


class RegisterSizeRequest(BaseModel):
    name: str = Field(min_length=1, max_length=20)


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class OrderItemOut(BaseModel):
    id: str
    product_id: str
    color_id: str
    size_id: str
    quantity: int
    price: float


class PaymentDetailsOut(BaseModel):
    charge_id: str | None = None
    card_type: str | None = None
    last4: str | None = None
    refund_id: str | None = None


class OrderOut(BaseModel):
    id: str
    customer_id: str
    items: list[OrderItemOut]
    shipping_address: AddressSchema | None = None
    payment_method: str
    payment_status: str
    payment_details: PaymentDetailsOut | None = None
    order_status: str
    total_amount: float
    shipping_cost: float
    tracking_number: str | None = None
    cancelled_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class OrderEnvelope(BaseModel):
    success: bool = True
    data: OrderOut


class OrderListEnvelope(BaseModel):
    success: bool = True
    data: list[OrderOut]


class AdminOrderListEnvelope(BaseModel):
    success: bool = True
    data: list[OrderOut]
    total: int
    page: int
    total_pages: int


class VariantOut(BaseModel):
    id: str
    color_id: str
    size_id: str
    stock: int


class ProductOut(BaseModel):
    id: str
    name: str
    available_for_sale: bool
    inventory: int
    variants: list[VariantOut]


class ProductEnvelope(BaseModel):
    success: bool = True
    data: ProductOut


class IdOut(BaseModel):
    id: str


class IdEnvelope(BaseModel):
    success: bool = True
    data: IdOut


class ErrorEnvelope(BaseModel):
    success: bool = False
    error: str
    details: dict | None = None
