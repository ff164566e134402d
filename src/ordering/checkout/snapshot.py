"""Checkout snapshot: the priced, immutable view of what is being bought.

A snapshot is built once per checkout from live catalog data and is the only
source of the order's lines and total. It is never persisted.
"""

import os
from dataclasses import asdict, dataclass

from ordering.cart.validation import InvalidReason, InvalidRow
from ordering.catalog import get_catalog
from ordering.catalog.port import Catalog
from ordering.exceptions import CartInvalid, EmptyCart


def checkout_currency() -> str:
    return os.environ.get("CHECKOUT_CURRENCY", "INR")


@dataclass(frozen=True)
class SnapshotLine:
    product_id: str
    variant_id: str | None
    seller_id: str
    title: str
    quantity: int
    unit_price: float

    @property
    def line_total(self) -> float:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class CheckoutSnapshot:
    lines: tuple[SnapshotLine, ...]
    currency: str = "INR"

    @property
    def total(self) -> float:
        return round(sum(line.line_total for line in self.lines), 2)

    @property
    def amount_minor_units(self) -> int:
        return int(round(self.total * 100))

    def to_dict(self) -> dict:
        return {
            "lines": [asdict(line) for line in self.lines],
            "total": self.total,
            "currency": self.currency,
        }


def build_snapshot(rows, catalog: Catalog | None = None, currency: str | None = None) -> CheckoutSnapshot:
    """Price ``rows`` of (product_id, variant_id, quantity) at current catalog prices.

    Raises ``EmptyCart`` when there is nothing to buy and ``CartInvalid`` if a
    product or variant disappeared after the rows were validated.
    """
    catalog = catalog or get_catalog()
    lines, invalid = [], []
    for product_id, variant_id, quantity in rows:
        product = catalog.get_product(str(product_id))
        variant = catalog.get_variant(str(variant_id)) if variant_id and product else None

        if product is None:
            reason = InvalidReason.PRODUCT_REMOVED
        elif variant_id and (variant is None or not variant.is_active or variant.product_id != str(product_id)):
            reason = InvalidReason.VARIANT_REMOVED
        else:
            reason = None

        if reason is not None:
            invalid.append(
                InvalidRow(
                    item_id="",
                    product_id=str(product_id),
                    variant_id=str(variant_id) if variant_id else None,
                    quantity=quantity,
                    reason=reason.value,
                )
            )
            continue

        lines.append(
            SnapshotLine(
                product_id=str(product_id),
                variant_id=str(variant_id) if variant_id else None,
                seller_id=str(product.seller_id),
                title=product.name,
                quantity=quantity,
                unit_price=catalog.unit_price(product, variant),
            )
        )

    if invalid:
        raise CartInvalid(invalid)
    if not lines:
        raise EmptyCart()
    return CheckoutSnapshot(lines=tuple(lines), currency=currency or checkout_currency())
