"""Configurable fake payment gateway for development and testing.

This adapter simulates the gateway without any external calls. Signatures
are real HMACs over the fake secret, so a client (or a test) that signs with
``sign()`` goes through exactly the verification a production payment does.
It can be configured at runtime to fail, making it useful for:
- Manual API testing via /payments/gateway/configure
- Automated tests with predictable outcomes
- Development without real gateway credentials
"""

import os
from uuid import uuid4

from payments.gateway.port import GatewayError, GatewayOrder, GatewayTimeout, PaymentGateway
from payments.gateway.signature import payment_signature, signature_matches


class FakeGateway(PaymentGateway):
    """Configurable fake payment gateway."""

    def __init__(self, secret: str | None = None, key_id: str = "rzp_test_fake") -> None:
        self.secret = secret or os.environ.get("FAKE_GATEWAY_SECRET", "fake_secret")
        self.key_id = key_id
        self.should_succeed: bool = True
        self.capture_status: str = "captured"
        self.timeout: bool = False
        self.orders: dict[str, GatewayOrder] = {}
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool = True, capture_status: str = "captured", timeout: bool = False) -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.capture_status = capture_status
        self.timeout = timeout

    @property
    def public_key(self) -> str:
        return self.key_id

    def sign(self, gateway_order_id: str, gateway_payment_id: str) -> str:
        """Produce the signature the hosted checkout would hand to the client."""
        return payment_signature(gateway_order_id, gateway_payment_id, self.secret)

    def create_gateway_order(self, amount_minor_units: int, currency: str, receipt_id: str) -> GatewayOrder:
        self.calls.append(
            {
                "method": "create_gateway_order",
                "amount_minor_units": amount_minor_units,
                "currency": currency,
                "receipt_id": receipt_id,
            }
        )
        if self.timeout:
            raise GatewayTimeout("Fake gateway timed out")
        if not self.should_succeed:
            raise GatewayError("Fake gateway rejected the order")

        order = GatewayOrder(
            id=f"order_{uuid4().hex[:14]}",
            amount_minor_units=amount_minor_units,
            currency=currency,
            receipt_id=receipt_id,
        )
        self.orders[order.id] = order
        return order

    def verify_payment_signature(self, gateway_order_id: str, gateway_payment_id: str, signature: str) -> bool:
        self.calls.append(
            {
                "method": "verify_payment_signature",
                "gateway_order_id": gateway_order_id,
                "gateway_payment_id": gateway_payment_id,
            }
        )
        return signature_matches(gateway_order_id, gateway_payment_id, signature, self.secret)

    def fetch_payment_status(self, gateway_payment_id: str) -> str:
        self.calls.append({"method": "fetch_payment_status", "gateway_payment_id": gateway_payment_id})
        if self.timeout:
            raise GatewayTimeout("Fake gateway timed out")
        return self.capture_status
