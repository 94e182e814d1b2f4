"""Repository for the KitchenTicket aggregate."""

from dinein.domain import dinein
from dinein.ticket.ticket import KitchenTicket


@dinein.repository(part_of=KitchenTicket)
class KitchenTicketRepository:
    def find_by_order_id(self, order_id) -> list[KitchenTicket]:
        """All tickets for an order. Normally exactly one."""
        return self._dao.query.filter(order_id=str(order_id)).all().items
