"""Repository for the Order aggregate."""

from protean.exceptions import ObjectNotFoundError

from ordering.domain import ordering
from ordering.exceptions import NotFound
from ordering.order.order import Order


def _newest_first(orders) -> list[Order]:
    return sorted(orders, key=lambda o: o.created_at.timestamp() if o.created_at else 0.0, reverse=True)


@ordering.repository(part_of=Order)
class OrderRepository:
    def load(self, order_id) -> Order:
        """Fetch an order, raising ``NotFound`` when it does not exist."""
        try:
            return self.get(str(order_id))
        except ObjectNotFoundError:
            raise NotFound(f"Order {order_id} not found", order_id=str(order_id)) from None

    def find_for_owner(self, owner_id) -> list[Order]:
        return _newest_first(self._dao.query.filter(owner_id=str(owner_id)).all().items)

    def find_for_seller(self, seller_id) -> list[Order]:
        return [order for order in self.find_all() if order.contains_seller(seller_id)]

    def find_all(self) -> list[Order]:
        return _newest_first(self._dao.query.all().items)
