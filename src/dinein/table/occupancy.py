"""Table occupancy coordinator — keeps table status truthful.

A table is occupied while a live order sits at it and available once that
order is paid, cancelled or moved elsewhere. Tables are found by their
number only. An order for an unknown table is logged and left alone: table
records are optional and never block ordering.
"""

import structlog
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from dinein.domain import dinein
from dinein.order.events import (
    OrderCreated,
    OrderStatusChanged,
    PaymentRecorded,
    TableTransferred,
)
from dinein.table.table import Table, TableStatus
from dinein.utils.sync import best_effort

logger = structlog.get_logger(__name__)

_RELEASING_STATUSES = frozenset({"PAID", "CANCELLED"})


def _find_table(table_number, order_id) -> Table | None:
    if not table_number:
        return None
    table = current_domain.repository_for(Table).find_by_table_number(table_number)
    if table is None:
        logger.info("Table not registered, skipping", table_number=str(table_number), order_id=str(order_id))
    return table


def occupy_table(table_number, order_id) -> None:
    table = _find_table(table_number, order_id)
    if table is None:
        return
    table.occupy(order_id=str(order_id))
    current_domain.repository_for(Table).add(table)
    logger.info("Table occupied", table_number=table.table_number, order_id=str(order_id))


def release_table(table_number, order_id, resulting_status=TableStatus.AVAILABLE) -> None:
    table = _find_table(table_number, order_id)
    if table is None:
        return
    if table.current_order_id and str(table.current_order_id) != str(order_id):
        logger.info(
            "Table held by another order, not released",
            table_number=table.table_number,
            order_id=str(order_id),
            current_order_id=str(table.current_order_id),
        )
        return
    table.release(resulting_status, order_id=str(order_id))
    current_domain.repository_for(Table).add(table)
    logger.info("Table released", table_number=table.table_number, order_id=str(order_id), status=table.status)


@dinein.event_handler(part_of=Table, stream_category="dinein::order")
class TableOccupancyCoordinator:
    """Applies order lifecycle events to table status."""

    @handle(OrderCreated)
    def on_order_created(self, event: OrderCreated) -> None:
        with best_effort("table", event, table_number=event.table_number):
            occupy_table(event.table_number, event.order_id)

    @handle(PaymentRecorded)
    def on_payment_recorded(self, event: PaymentRecorded) -> None:
        with best_effort("table", event, table_number=event.table_number):
            release_table(event.table_number, event.order_id)

    @handle(OrderStatusChanged)
    def on_order_status_changed(self, event: OrderStatusChanged) -> None:
        if event.status not in _RELEASING_STATUSES:
            return
        with best_effort("table", event, table_number=event.table_number):
            release_table(event.table_number, event.order_id)

    @handle(TableTransferred)
    def on_table_transferred(self, event: TableTransferred) -> None:
        with best_effort("table", event, table_number=event.previous_table_number):
            release_table(event.previous_table_number, event.order_id, event.previous_table_status)
        with best_effort("table", event, table_number=event.new_table_number):
            occupy_table(event.new_table_number, event.order_id)
