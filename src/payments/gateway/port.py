"""Payment gateway port (abstract interface).

Defines the contract that all payment gateway adapters must implement.
This enables swapping between FakeGateway (dev/test) and RazorpayGateway
(production) without changing any checkout code.

The flow is order-based: the server creates a gateway order for an amount,
the buyer pays it on the gateway's hosted checkout, and the client hands back
(gateway order id, gateway payment id, signature) for server-side
verification.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


class GatewayError(Exception):
    """The gateway rejected the request or answered with something unusable."""


class GatewayTimeout(GatewayError):
    """The gateway could not be reached or did not answer in time."""


@dataclass(frozen=True)
class GatewayOrder:
    """An order created on the gateway for a fixed amount."""

    id: str
    amount_minor_units: int
    currency: str
    receipt_id: str
    status: str = "created"


# Payment states in which the money is secured for the merchant
SETTLED_PAYMENT_STATUSES = frozenset({"captured", "authorized"})


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @property
    @abstractmethod
    def public_key(self) -> str:
        """Key id the client needs to open the gateway's checkout."""
        ...

    @abstractmethod
    def create_gateway_order(self, amount_minor_units: int, currency: str, receipt_id: str) -> GatewayOrder:
        """Create a gateway order. Raises ``GatewayError`` / ``GatewayTimeout``."""
        ...

    @abstractmethod
    def verify_payment_signature(self, gateway_order_id: str, gateway_payment_id: str, signature: str) -> bool:
        """Check the signature the client received from the gateway's checkout."""
        ...

    @abstractmethod
    def fetch_payment_status(self, gateway_payment_id: str) -> str:
        """Return the gateway's status for a payment (e.g. ``captured``)."""
        ...
