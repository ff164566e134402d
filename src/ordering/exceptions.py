"""Error taxonomy for the checkout pipeline.

Four categories, each mapped to an HTTP status by ``ordering.api.errors``:

    InvalidRequest    bad input shape or role; rejected before any mutation
    ConflictError     the request conflicts with current state (stock, cart, lifecycle)
    IntegrityFailure  the atomic order commit could not be completed as a whole
    ExternalFailure   the payment gateway rejected, timed out or is unknown

Command field validation (e.g. ``quantity >= 1``) still surfaces as Protean's
``ValidationError`` and belongs to the first category.
"""


class OrderingError(Exception):
    """Base class for every error raised by the ordering domain."""

    code = "OrderingError"
    status_code = 400

    def __init__(self, message: str, **details) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message, **self.details}


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------
class InvalidRequest(OrderingError):
    code = "InvalidRequest"
    status_code = 400


class VariantRequired(InvalidRequest):
    code = "VariantRequired"

    def __init__(self, product_id: str) -> None:
        super().__init__(
            f"Product {product_id} has variants; a variant must be selected",
            product_id=str(product_id),
        )


class NotAuthorized(InvalidRequest):
    code = "NotAuthorized"
    status_code = 403


class InvalidStatus(InvalidRequest):
    code = "InvalidStatus"

    def __init__(self, status: str) -> None:
        super().__init__(f"Unknown order status '{status}'", status=status)


class InvalidPaymentMethod(InvalidRequest):
    code = "InvalidPaymentMethod"


class NotFound(OrderingError):
    code = "NotFound"
    status_code = 404


# ---------------------------------------------------------------------------
# Conflicts
# ---------------------------------------------------------------------------
class ConflictError(OrderingError):
    code = "Conflict"
    status_code = 409


class OutOfStock(ConflictError):
    code = "OutOfStock"

    def __init__(self, product_id: str, variant_id: str | None = None, available: int = 0) -> None:
        super().__init__(
            f"Product {product_id} is out of stock",
            product_id=str(product_id),
            variant_id=str(variant_id) if variant_id else None,
            available=available,
        )


class CartInvalid(ConflictError):
    """Checkout refused because some cart rows no longer match the catalog."""

    code = "CartInvalid"

    def __init__(self, invalid_rows: list) -> None:
        self.invalid_rows = list(invalid_rows)
        super().__init__(
            f"{len(self.invalid_rows)} cart row(s) are no longer valid",
            invalid_rows=[row.to_dict() for row in self.invalid_rows],
        )


class EmptyCart(ConflictError):
    code = "EmptyCart"

    def __init__(self) -> None:
        super().__init__("Cart is empty")


class InvalidTransition(ConflictError):
    code = "InvalidTransition"

    def __init__(self, current: str, target: str) -> None:
        super().__init__(
            f"Cannot transition order from {current} to {target}",
            current_status=current,
            target_status=target,
        )


# ---------------------------------------------------------------------------
# Integrity
# ---------------------------------------------------------------------------
class IntegrityFailure(OrderingError):
    code = "IntegrityFailure"
    status_code = 500


# ---------------------------------------------------------------------------
# External
# ---------------------------------------------------------------------------
class ExternalFailure(OrderingError):
    """The external collaborator failed. No order was created and nothing was charged by us."""

    code = "ExternalFailure"
    status_code = 502

    def to_dict(self) -> dict:
        return {**super().to_dict(), "order_created": False}


class PaymentVerificationFailed(ExternalFailure):
    code = "PaymentVerificationFailed"
    status_code = 402

    def __init__(self, reason: str, **details) -> None:
        self.reason = reason
        super().__init__(f"Payment verification failed: {reason}", reason=reason, **details)


class UnknownIntent(PaymentVerificationFailed):
    code = "UnknownIntent"

    def __init__(self, gateway_order_id: str) -> None:
        super().__init__("UnknownIntent", gateway_order_id=gateway_order_id)


class GatewayUnavailable(ExternalFailure):
    code = "GatewayUnavailable"


class CatalogUnavailable(ExternalFailure):
    code = "CatalogUnavailable"
