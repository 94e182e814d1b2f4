"""Repository for the Order aggregate."""

from protean.utils.query import Q

from dinein.domain import dinein
from dinein.order.order import Order


@dinein.repository(part_of=Order)
class OrderRepository:
    def find_by_order_number(self, order_number: str) -> Order | None:
        results = self._dao.query.filter(order_number=order_number).all()
        if not results or not results.items:
            return None
        return results.first

    def find_recent(self, limit: int, **filters) -> list[Order]:
        """Newest first, optionally filtered by exact field values."""
        query = self._dao.query
        if filters:
            query = query.filter(**filters)
        return query.order_by("-created_at").limit(limit).all().items

    def find_unlinked_to_booking(self, limit: int) -> list[Order]:
        """Newest orders missing either the booking id or the GRC number."""
        return (
            self._dao.query.filter(Q(booking_id=None) | Q(grc_no=None))
            .order_by("-created_at")
            .limit(limit)
            .all()
            .items
        )
