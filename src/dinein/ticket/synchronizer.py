"""Ticket synchronizer — keeps each kitchen ticket in step with its order.

Consumes the Order's events after the order has been saved and applies them
to the order's ticket. Every event is an idempotent intent: replaying it
leaves the ticket unchanged.

Synchronization is best-effort. A missing ticket or ticket item is logged as
a ``synchronization_warning`` and never fails the command that produced the
event; ``ReconcileOrder`` repairs the ticket afterwards.
"""

import json

import structlog
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from dinein.domain import dinein
from dinein.order.events import (
    ItemsAdded,
    ItemStatusChanged,
    OrderCreated,
    OrderDetailsUpdated,
    OrderItemsReplaced,
    OrderStatusChanged,
    PaymentRecorded,
    TableTransferred,
)
from dinein.ticket.ticket import KitchenTicket
from dinein.utils.sync import best_effort

logger = structlog.get_logger(__name__)


@dinein.event_handler(part_of=KitchenTicket, stream_category="dinein::order")
class TicketSynchronizer:
    """Projects order changes onto the order's kitchen ticket."""

    def _tickets_for(self, order_id) -> list[KitchenTicket]:
        tickets = current_domain.repository_for(KitchenTicket).find_by_order_id(order_id)
        if not tickets:
            raise LookupError(f"No kitchen ticket for order {order_id}")
        return tickets

    def _apply(self, order_id, mutate) -> None:
        repo = current_domain.repository_for(KitchenTicket)
        for ticket in self._tickets_for(order_id):
            mutate(ticket)
            repo.add(ticket)

    @handle(OrderCreated)
    def on_order_created(self, event: OrderCreated) -> None:
        with best_effort("ticket", event):
            repo = current_domain.repository_for(KitchenTicket)
            if repo.find_by_order_id(event.order_id):
                return
            ticket = KitchenTicket.open(
                order_id=str(event.order_id),
                order_number=event.order_number,
                table_number=event.table_number,
                customer_name=event.customer_name,
                status=event.status,
                priority=event.priority,
                items=json.loads(event.items),
            )
            repo.add(ticket)
            logger.info("Kitchen ticket opened", order_id=str(event.order_id), ticket_id=str(ticket.id))

    @handle(ItemsAdded)
    def on_items_added(self, event: ItemsAdded) -> None:
        with best_effort("ticket", event, kind=event.kind):
            items = json.loads(event.items)
            self._apply(event.order_id, lambda ticket: ticket.append_items(items))

    @handle(ItemStatusChanged)
    def on_item_status_changed(self, event: ItemStatusChanged) -> None:
        with best_effort("ticket", event, line_item_id=str(event.line_item_id)):
            self._apply(
                event.order_id,
                lambda ticket: ticket.mirror_item_status(
                    event.line_item_id,
                    event.status,
                    started_at=event.started_at,
                    ready_at=event.ready_at,
                    actual_prep_time=event.actual_prep_time,
                ),
            )

    @handle(OrderStatusChanged)
    def on_order_status_changed(self, event: OrderStatusChanged) -> None:
        with best_effort("ticket", event, status=event.status):
            self._apply(event.order_id, lambda ticket: ticket.change_status(event.status))

    @handle(PaymentRecorded)
    def on_payment_recorded(self, event: PaymentRecorded) -> None:
        with best_effort("ticket", event):
            self._apply(event.order_id, lambda ticket: ticket.change_status("PAID"))

    @handle(TableTransferred)
    def on_table_transferred(self, event: TableTransferred) -> None:
        with best_effort("ticket", event, table_number=event.new_table_number):
            self._apply(event.order_id, lambda ticket: ticket.move_to_table(event.new_table_number))

    @handle(OrderDetailsUpdated)
    def on_order_details_updated(self, event: OrderDetailsUpdated) -> None:
        with best_effort("ticket", event):
            self._apply(
                event.order_id,
                lambda ticket: ticket.update_header(customer_name=event.customer_name, priority=event.priority),
            )

    @handle(OrderItemsReplaced)
    def on_order_items_replaced(self, event: OrderItemsReplaced) -> None:
        with best_effort("ticket", event):
            items = json.loads(event.items)
            self._apply(event.order_id, lambda ticket: ticket.replace_items("item", items))
