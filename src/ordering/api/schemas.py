"""Pydantic request/response schemas for the Ordering API.

These are external contracts (anti-corruption layer), separate from
internal Protean commands.
"""

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class ShippingDetailsSchema(BaseModel):
    name: str
    phone: str
    address: str
    city: str
    state: str | None = None
    postal_code: str
    country: str = "IN"


class StatusResponse(BaseModel):
    status: str = "ok"


class CountResponse(BaseModel):
    count: int


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    product_id: str
    variant_id: str | None = None
    quantity: int = Field(ge=1, default=1)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "product_id": "prod-001",
                    "variant_id": "var-001-red-m",
                    "quantity": 2,
                }
            ]
        }
    }


class UpdateCartQuantityRequest(BaseModel):
    quantity: int  # Zero or less removes the row


class ItemIdResponse(BaseModel):
    item_id: str


class CartProductSchema(BaseModel):
    title: str
    seller_id: str
    unit_price: float | None = None
    image_url: str | None = None
    stock: int
    attributes: dict = Field(default_factory=dict)


class CartItemResponse(BaseModel):
    item_id: str
    product_id: str
    variant_id: str | None = None
    quantity: int
    product: CartProductSchema | None = None
    line_total: float | None = None


class CartResponse(BaseModel):
    items: list[CartItemResponse]
    total: float


class InvalidRowSchema(BaseModel):
    item_id: str
    product_id: str
    variant_id: str | None = None
    quantity: int
    reason: str
    available: int = 0


class CartValidationResponse(BaseModel):
    valid: bool
    invalid_rows: list[InvalidRowSchema]


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------
class CheckoutRequest(BaseModel):
    shipping_details: ShippingDetailsSchema
    payment_method: str = "cod"


class BuyNowRequest(BaseModel):
    product_id: str
    variant_id: str | None = None
    quantity: int = Field(ge=1, default=1)
    shipping_details: ShippingDetailsSchema
    payment_method: str = "cod"


class GatewayOrderRequest(BaseModel):
    """Leave the product fields out to pay for the whole cart."""

    product_id: str | None = None
    variant_id: str | None = None
    quantity: int | None = Field(ge=1, default=None)


class GatewayOrderResponse(BaseModel):
    intent_id: str
    gateway_order_id: str
    amount_minor_units: int
    currency: str
    receipt_id: str
    key_id: str


class GatewayConfirmRequest(BaseModel):
    gateway_order_id: str
    gateway_payment_id: str
    signature: str
    shipping_details: ShippingDetailsSchema


class OrderIdResponse(BaseModel):
    order_id: str


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class SetOrderStatusRequest(BaseModel):
    status: str
    reason: str | None = None


class OrderItemResponse(BaseModel):
    product_id: str
    variant_id: str | None = None
    seller_id: str
    title: str
    quantity: int
    unit_price: float


class PaymentReferenceSchema(BaseModel):
    gateway_order_id: str
    gateway_payment_id: str


class OrderResponse(BaseModel):
    order_id: str
    owner_id: str
    status: str
    total: float
    currency: str
    payment_method: str
    is_paid: bool
    paid_at: str | None = None
    payment_reference: PaymentReferenceSchema | None = None
    shipping_details: ShippingDetailsSchema | None = None
    cancellation_reason: str | None = None
    cancelled_by: str | None = None
    created_at: str | None = None
    items: list[OrderItemResponse]


# ---------------------------------------------------------------------------
# Payment gateway
# ---------------------------------------------------------------------------
class GatewayKeyResponse(BaseModel):
    key_id: str


class ConfigureGatewayRequest(BaseModel):
    should_succeed: bool = True
    capture_status: str = "captured"
    timeout: bool = False


class GatewayConfigResponse(BaseModel):
    gateway: str
    should_succeed: bool
    capture_status: str
    timeout: bool
