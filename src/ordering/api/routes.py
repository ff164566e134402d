"""FastAPI routes for the Ordering domain: cart, checkout and orders.

The authenticated actor arrives in the ``X-Actor-Id`` / ``X-Actor-Role``
headers set by the auth gateway in front of this service. Everything that
touches a buyer's cart runs under that buyer's lock.

Lock waits, catalog lookups and gateway calls block, so domain work runs in
the threadpool and never on the event loop.
"""

import json
import os

from fastapi import APIRouter, Depends, Header, HTTPException
from fastapi.concurrency import run_in_threadpool

from ordering.api.schemas import (
    AddToCartRequest,
    BuyNowRequest,
    CartResponse,
    CartValidationResponse,
    CheckoutRequest,
    ConfigureGatewayRequest,
    CountResponse,
    GatewayConfigResponse,
    GatewayConfirmRequest,
    GatewayKeyResponse,
    GatewayOrderRequest,
    GatewayOrderResponse,
    ItemIdResponse,
    OrderIdResponse,
    OrderResponse,
    SetOrderStatusRequest,
    StatusResponse,
    UpdateCartQuantityRequest,
)
from ordering.cart.items import AddToCart, ClearCart, RemoveFromCart, UpdateCartQuantity
from ordering.cart.listing import list_cart_items
from ordering.cart.validation import CartValidator, CleanupCart
from ordering.checkout.buy_now import BuyNow
from ordering.checkout.gateway import ConfirmGatewayCheckout, RequestGatewayPayment
from ordering.checkout.placement import PlaceOrder
from ordering.order.queries import get_order, list_orders
from ordering.order.status import SetOrderStatus
from ordering.shared.actor import Actor
from ordering.utils.locks import process_for_order, process_for_owner
from payments.gateway import get_gateway
from payments.gateway.fake_adapter import FakeGateway


def current_actor(
    x_actor_id: str = Header(default=""),
    x_actor_role: str = Header(default=""),
) -> Actor:
    if not x_actor_id or not x_actor_role:
        raise HTTPException(status_code=401, detail="Missing actor headers")
    return Actor.of(x_actor_id, x_actor_role)


def _order_response(order) -> OrderResponse:
    return OrderResponse(
        order_id=str(order.id),
        owner_id=str(order.owner_id),
        status=order.status,
        total=order.total,
        currency=order.currency,
        payment_method=order.payment_method,
        is_paid=bool(order.is_paid),
        paid_at=order.paid_at.isoformat() if order.paid_at else None,
        payment_reference=(
            {
                "gateway_order_id": order.payment_reference.gateway_order_id,
                "gateway_payment_id": order.payment_reference.gateway_payment_id,
            }
            if order.payment_reference
            else None
        ),
        shipping_details=(
            {
                "name": order.shipping_details.name,
                "phone": order.shipping_details.phone,
                "address": order.shipping_details.address,
                "city": order.shipping_details.city,
                "state": order.shipping_details.state,
                "postal_code": order.shipping_details.postal_code,
                "country": order.shipping_details.country,
            }
            if order.shipping_details
            else None
        ),
        cancellation_reason=order.cancellation_reason,
        cancelled_by=order.cancelled_by,
        created_at=order.created_at.isoformat() if order.created_at else None,
        items=[
            {
                "product_id": str(item.product_id),
                "variant_id": str(item.variant_id) if item.variant_id else None,
                "seller_id": str(item.seller_id),
                "title": item.title,
                "quantity": item.quantity,
                "unit_price": item.unit_price,
            }
            for item in order.items
        ],
    )


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.get("", response_model=CartResponse)
async def get_cart(actor: Actor = Depends(current_actor)) -> CartResponse:
    rows = await run_in_threadpool(list_cart_items, actor.id)
    total = round(sum(row.get("line_total") or 0.0 for row in rows), 2)
    return CartResponse(items=rows, total=total)


@cart_router.post("", status_code=201, response_model=ItemIdResponse)
async def add_to_cart(body: AddToCartRequest, actor: Actor = Depends(current_actor)) -> ItemIdResponse:
    command = AddToCart(
        actor_id=actor.id,
        actor_role=actor.role.value,
        product_id=body.product_id,
        variant_id=body.variant_id,
        quantity=body.quantity,
    )
    item_id = await run_in_threadpool(process_for_owner, actor.id, command)
    return ItemIdResponse(item_id=item_id)


@cart_router.delete("", response_model=CountResponse)
async def clear_cart(actor: Actor = Depends(current_actor)) -> CountResponse:
    command = ClearCart(actor_id=actor.id, actor_role=actor.role.value)
    return CountResponse(count=await run_in_threadpool(process_for_owner, actor.id, command))


@cart_router.put("/items/{item_id}", response_model=StatusResponse)
async def update_cart_item(
    item_id: str, body: UpdateCartQuantityRequest, actor: Actor = Depends(current_actor)
) -> StatusResponse:
    command = UpdateCartQuantity(
        actor_id=actor.id,
        actor_role=actor.role.value,
        item_id=item_id,
        quantity=body.quantity,
    )
    await run_in_threadpool(process_for_owner, actor.id, command)
    return StatusResponse(status="removed" if body.quantity <= 0 else "updated")


@cart_router.delete("/items/{item_id}", response_model=StatusResponse)
async def remove_cart_item(item_id: str, actor: Actor = Depends(current_actor)) -> StatusResponse:
    command = RemoveFromCart(actor_id=actor.id, actor_role=actor.role.value, item_id=item_id)
    removed = await run_in_threadpool(process_for_owner, actor.id, command)
    return StatusResponse(status="removed" if removed else "unchanged")


@cart_router.post("/validate", response_model=CartValidationResponse)
async def validate_cart(actor: Actor = Depends(current_actor)) -> CartValidationResponse:
    report = await run_in_threadpool(CartValidator().validate, actor.id)
    return CartValidationResponse(**report.to_dict())


@cart_router.post("/cleanup", response_model=CountResponse)
async def cleanup_cart(actor: Actor = Depends(current_actor)) -> CountResponse:
    command = CleanupCart(actor_id=actor.id, actor_role=actor.role.value)
    return CountResponse(count=await run_in_threadpool(process_for_owner, actor.id, command))


# ---------------------------------------------------------------------------
# Checkout Router
# ---------------------------------------------------------------------------
checkout_router = APIRouter(prefix="/checkout", tags=["checkout"])


@checkout_router.post("", status_code=201, response_model=OrderIdResponse)
async def checkout(body: CheckoutRequest, actor: Actor = Depends(current_actor)) -> OrderIdResponse:
    command = PlaceOrder(
        actor_id=actor.id,
        actor_role=actor.role.value,
        shipping_details=json.dumps(body.shipping_details.model_dump()),
        payment_method=body.payment_method,
    )
    return OrderIdResponse(order_id=await run_in_threadpool(process_for_owner, actor.id, command))


@checkout_router.post("/buy-now", status_code=201, response_model=OrderIdResponse)
async def buy_now(body: BuyNowRequest, actor: Actor = Depends(current_actor)) -> OrderIdResponse:
    command = BuyNow(
        actor_id=actor.id,
        actor_role=actor.role.value,
        product_id=body.product_id,
        variant_id=body.variant_id,
        quantity=body.quantity,
        shipping_details=json.dumps(body.shipping_details.model_dump()),
        payment_method=body.payment_method,
    )
    return OrderIdResponse(order_id=await run_in_threadpool(process_for_owner, actor.id, command))


@checkout_router.post("/gateway/orders", status_code=201, response_model=GatewayOrderResponse)
async def create_gateway_order(
    body: GatewayOrderRequest, actor: Actor = Depends(current_actor)
) -> GatewayOrderResponse:
    command = RequestGatewayPayment(
        actor_id=actor.id,
        actor_role=actor.role.value,
        product_id=body.product_id,
        variant_id=body.variant_id,
        quantity=body.quantity,
    )
    return GatewayOrderResponse(**await run_in_threadpool(process_for_owner, actor.id, command))


@checkout_router.post("/gateway/confirm", response_model=OrderIdResponse)
async def confirm_gateway_checkout(
    body: GatewayConfirmRequest, actor: Actor = Depends(current_actor)
) -> OrderIdResponse:
    command = ConfirmGatewayCheckout(
        actor_id=actor.id,
        actor_role=actor.role.value,
        gateway_order_id=body.gateway_order_id,
        gateway_payment_id=body.gateway_payment_id,
        signature=body.signature,
        shipping_details=json.dumps(body.shipping_details.model_dump()),
    )
    return OrderIdResponse(order_id=await run_in_threadpool(process_for_owner, actor.id, command))


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.get("", response_model=list[OrderResponse])
async def get_orders(actor: Actor = Depends(current_actor)) -> list[OrderResponse]:
    return [_order_response(order) for order in await run_in_threadpool(list_orders, actor)]


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order_detail(order_id: str, actor: Actor = Depends(current_actor)) -> OrderResponse:
    return _order_response(await run_in_threadpool(get_order, actor, order_id))


@order_router.put("/{order_id}/status", response_model=StatusResponse)
async def set_order_status(
    order_id: str, body: SetOrderStatusRequest, actor: Actor = Depends(current_actor)
) -> StatusResponse:
    command = SetOrderStatus(
        actor_id=actor.id,
        actor_role=actor.role.value,
        order_id=order_id,
        status=body.status,
        reason=body.reason,
    )
    return StatusResponse(status=await run_in_threadpool(process_for_order, order_id, command))


# ---------------------------------------------------------------------------
# Payment Gateway Router
# ---------------------------------------------------------------------------
payment_router = APIRouter(prefix="/payments", tags=["payments"])


@payment_router.get("/gateway/key", response_model=GatewayKeyResponse)
async def gateway_key() -> GatewayKeyResponse:
    return GatewayKeyResponse(key_id=get_gateway().public_key)


@payment_router.post("/gateway/configure", response_model=GatewayConfigResponse)
async def configure_gateway(body: ConfigureGatewayRequest) -> GatewayConfigResponse:
    """Configure the FakeGateway behavior (non-production only).

    This endpoint is only available when PROTEAN_ENV is not 'production'.
    It allows simulating declined orders, uncaptured payments and timeouts
    for manual API testing.
    """
    if os.environ.get("PROTEAN_ENV") == "production":
        raise HTTPException(status_code=403, detail="Gateway configuration not available in production")

    gateway = get_gateway()
    if not isinstance(gateway, FakeGateway):
        raise HTTPException(status_code=400, detail="Gateway configuration only available for FakeGateway")

    gateway.configure(
        should_succeed=body.should_succeed,
        capture_status=body.capture_status,
        timeout=body.timeout,
    )
    return GatewayConfigResponse(
        gateway=type(gateway).__name__,
        should_succeed=gateway.should_succeed,
        capture_status=gateway.capture_status,
        timeout=gateway.timeout,
    )
