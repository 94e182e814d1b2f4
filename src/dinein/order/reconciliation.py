"""Order reconciliation — replays an order's state into its ticket and table.

Ticket and table updates are best-effort and may be lost. Reconciliation
repairs them from the order, which is always right: the ticket is rebuilt
from the order's current items and header, and the table is occupied or
released according to the order's status. Running it twice changes nothing.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from dinein.audit import record_audit
from dinein.domain import dinein
from dinein.order.order import TERMINAL_STATUSES, LineItemKind, Order, OrderStatus
from dinein.table.table import Table, TableStatus
from dinein.ticket.ticket import KitchenTicket

logger = structlog.get_logger(__name__)


@dinein.command(part_of="Order")
class ReconcileOrder:
    order_id = Identifier(required=True)
    actor_id = Identifier()
    actor_role = String(max_length=50)


def reconcile_ticket(order: Order) -> KitchenTicket:
    repo = current_domain.repository_for(KitchenTicket)
    tickets = repo.find_by_order_id(order.id)
    items = [item.snapshot() for item in order.items]
    extra_items = [item.snapshot() for item in order.extra_items]

    if not tickets:
        ticket = KitchenTicket.open(
            order_id=str(order.id),
            order_number=order.order_number,
            table_number=order.table_number,
            customer_name=order.customer_name,
            status=order.status,
            priority=order.priority,
            items=items + extra_items,
        )
        repo.add(ticket)
        logger.info("Kitchen ticket recreated", order_id=str(order.id))
        return ticket

    for ticket in tickets:
        ticket.order_number = order.order_number
        ticket.move_to_table(order.table_number)
        ticket.update_header(customer_name=order.customer_name, priority=order.priority)
        ticket.change_status(order.status)
        ticket.replace_items(LineItemKind.ITEM.value, items)
        ticket.replace_items(LineItemKind.EXTRA.value, extra_items)
        repo.add(ticket)
    return tickets[0]


def reconcile_table(order: Order) -> Table | None:
    if not order.table_number:
        return None
    repo = current_domain.repository_for(Table)
    table = repo.find_by_table_number(order.table_number)
    if table is None:
        logger.info("Table not registered, skipping", table_number=order.table_number, order_id=str(order.id))
        return None

    if OrderStatus(order.status) in TERMINAL_STATUSES:
        # Only release the table if no one else has taken it since
        if table.current_order_id and str(table.current_order_id) != str(order.id):
            return table
        if table.status != TableStatus.AVAILABLE.value:
            table.release(TableStatus.AVAILABLE, order_id=str(order.id))
            repo.add(table)
    elif table.status != TableStatus.OCCUPIED.value or str(table.current_order_id) != str(order.id):
        table.occupy(order_id=str(order.id))
        repo.add(table)
    return table


@dinein.command_handler(part_of=Order)
class ReconcileOrderHandler:
    @handle(ReconcileOrder)
    def reconcile_order(self, command):
        order = current_domain.repository_for(Order).get(command.order_id)

        ticket = reconcile_ticket(order)
        table = reconcile_table(order)
        logger.info(
            "Order reconciled",
            order_id=str(order.id),
            ticket_id=str(ticket.id),
            table_number=order.table_number,
            table_status=table.status if table else None,
        )

        record_audit(
            "order.reconciled",
            order.id,
            after={
                "ticket_status": ticket.status,
                "table_status": table.status if table else None,
            },
            actor_id=command.actor_id,
            actor_role=command.actor_role,
        )
