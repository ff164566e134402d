"""Payment gateway factory.

Provides get_gateway() / set_gateway() to swap implementations:
- FakeGateway for development and testing (PAYMENT_GATEWAY=fake, the default)
- RazorpayGateway for production (PAYMENT_GATEWAY=razorpay)
"""

import os

from payments.gateway.fake_adapter import FakeGateway
from payments.gateway.port import PaymentGateway
from payments.gateway.razorpay_adapter import DEFAULT_API_URL, RazorpayGateway

_current_gateway: PaymentGateway | None = None


def _gateway_from_env() -> PaymentGateway:
    if os.environ.get("PAYMENT_GATEWAY", "fake") == "razorpay":
        return RazorpayGateway(
            key_id=os.environ.get("RAZORPAY_KEY_ID", ""),
            key_secret=os.environ.get("RAZORPAY_KEY_SECRET", ""),
            api_url=os.environ.get("RAZORPAY_API_URL", DEFAULT_API_URL),
            timeout=float(os.environ.get("RAZORPAY_TIMEOUT_SECONDS", "10")),
        )
    return FakeGateway()


def get_gateway() -> PaymentGateway:
    """Return the current payment gateway. Defaults to FakeGateway."""
    global _current_gateway
    if _current_gateway is None:
        _current_gateway = _gateway_from_env()
    return _current_gateway


def set_gateway(gateway: PaymentGateway) -> None:
    """Override the active payment gateway (useful for tests)."""
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    """Reset to default gateway."""
    global _current_gateway
    _current_gateway = None
