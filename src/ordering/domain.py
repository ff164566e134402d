"""Ordering bounded context: Shopping Cart, Checkout and Orders.

Handles per-owner shopping carts, the checkout transaction that converts a
cart into an immutable order, gateway payment confirmation and the order
status lifecycle.
"""

from protean.domain import Domain

from ordering.utils.logging import configure_logging, get_logger

configure_logging()

logger = get_logger(__name__)

ordering = Domain(name="ordering")
