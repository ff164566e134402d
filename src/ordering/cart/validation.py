"""Cart Validator: re-checks every cart row against the live catalog.

Findings are returned as data. ``CleanupCart`` is the only path that acts on
them, and it only ever deletes rows: quantities are never reduced and
variants are never substituted on the buyer's behalf.
"""

from dataclasses import asdict, dataclass, field
from enum import Enum

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.cart.cart import ShoppingCart
from ordering.catalog import get_catalog
from ordering.catalog.port import Catalog
from ordering.domain import ordering
from ordering.shared.actor import Role

logger = structlog.get_logger(__name__)


class InvalidReason(Enum):
    PRODUCT_REMOVED = "ProductRemoved"
    VARIANT_REMOVED = "VariantRemoved"
    INSUFFICIENT_STOCK = "InsufficientStock"


@dataclass(frozen=True)
class InvalidRow:
    item_id: str
    product_id: str
    variant_id: str | None
    quantity: int
    reason: str
    available: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class CartValidation:
    invalid_rows: list[InvalidRow] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.invalid_rows

    def to_dict(self) -> dict:
        return {"valid": self.valid, "invalid_rows": [row.to_dict() for row in self.invalid_rows]}


class CartValidator:
    def __init__(self, catalog: Catalog | None = None) -> None:
        self.catalog = catalog or get_catalog()

    def validate(self, owner_id) -> CartValidation:
        cart = current_domain.repository_for(ShoppingCart).find_for_owner(owner_id)
        if cart is None:
            return CartValidation()
        return self.validate_cart(cart)

    def validate_cart(self, cart: ShoppingCart) -> CartValidation:
        return CartValidation(invalid_rows=[row for row in map(self._check_row, cart.items) if row is not None])

    def _check_row(self, item) -> InvalidRow | None:
        product_id = str(item.product_id)
        variant_id = str(item.variant_id) if item.variant_id else None

        def invalid(reason: InvalidReason, available: int = 0) -> InvalidRow:
            return InvalidRow(
                item_id=str(item.id),
                product_id=product_id,
                variant_id=variant_id,
                quantity=item.quantity,
                reason=reason.value,
                available=available,
            )

        product = self.catalog.get_product(product_id)
        if product is None or not self.catalog.is_approved(product_id):
            return invalid(InvalidReason.PRODUCT_REMOVED)

        if variant_id or product.has_variants:
            # A product that gained variants after the row was added is treated
            # like a removed variant: the row no longer names something sellable.
            variant = self.catalog.get_variant(variant_id) if variant_id else None
            if variant is None or str(variant.product_id) != product_id or not variant.is_active:
                return invalid(InvalidReason.VARIANT_REMOVED)

        available = self.catalog.available_stock(product_id, variant_id)
        if item.quantity > available:
            return invalid(InvalidReason.INSUFFICIENT_STOCK, available=available)
        return None


@ordering.command(part_of="ShoppingCart")
class CleanupCart:
    actor_id = Identifier(required=True)
    actor_role = String(required=True, choices=Role)


@ordering.command_handler(part_of=ShoppingCart)
class CleanupCartHandler:
    @handle(CleanupCart)
    def cleanup_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.find_for_owner(command.actor_id)
        if cart is None:
            return 0

        result = CartValidator().validate_cart(cart)
        for row in result.invalid_rows:
            cart.remove_item(row.item_id, reason=row.reason)

        if result.invalid_rows:
            repo.add(cart)
            logger.info(
                "Invalid cart rows removed",
                owner_id=str(command.actor_id),
                removed=len(result.invalid_rows),
            )
        return len(result.invalid_rows)
