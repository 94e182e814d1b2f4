"""Order read queries — listing and detail.

Both run against the Order repository under a time budget
(``QUERY_TIME_BUDGET_MS``). A query that comes back after the budget has
elapsed is reported as ``QueryTimeoutError`` rather than returned late.
"""

import time

import structlog
from protean.utils.globals import current_domain

from dinein.exceptions import QueryTimeoutError
from dinein.order.order import Order, parse_order_status
from dinein.utils.config import custom_setting

logger = structlog.get_logger(__name__)

DEFAULT_QUERY_TIME_BUDGET_MS = 5000
DEFAULT_ORDER_LIST_LIMIT = 200


def _time_budget_ms() -> float:
    return float(custom_setting("QUERY_TIME_BUDGET_MS", DEFAULT_QUERY_TIME_BUDGET_MS))


def _enforce_budget(started: float, query: str, budget_ms: float) -> None:
    elapsed_ms = (time.monotonic() - started) * 1000
    if elapsed_ms > budget_ms:
        logger.warning("Query exceeded time budget", query=query, elapsed_ms=round(elapsed_ms), budget_ms=budget_ms)
        raise QueryTimeoutError(
            {"query": [f"{query} took {elapsed_ms:.0f} ms, over the {budget_ms:.0f} ms budget"]}
        )


def _summary(order: Order) -> dict:
    return {
        "order_id": str(order.id),
        "order_number": order.order_number,
        "status": order.status,
        "priority": order.priority,
        "table_number": order.table_number,
        "customer_name": order.customer_name,
        "item_count": len(order.items) + len(order.extra_items),
        "subtotal": order.subtotal,
        "total_amount": order.total_amount,
        "payment_status": order.payment_status,
        "created_at": order.created_at.isoformat() if order.created_at else None,
    }


def list_orders(
    status: str | None = None,
    table_number: str | None = None,
    limit: int | None = None,
    budget_ms: float | None = None,
) -> list[dict]:
    """Newest orders first, optionally filtered by status and table."""
    budget_ms = _time_budget_ms() if budget_ms is None else budget_ms
    limit = limit or int(custom_setting("ORDER_LIST_LIMIT", DEFAULT_ORDER_LIST_LIMIT))

    filters = {}
    if status:
        filters["status"] = parse_order_status(status).value
    if table_number:
        filters["table_number"] = str(table_number)

    started = time.monotonic()
    orders = current_domain.repository_for(Order).find_recent(limit, **filters)
    _enforce_budget(started, "list_orders", budget_ms)
    return [_summary(order) for order in orders]


def get_order(order_id: str, budget_ms: float | None = None) -> dict:
    """Full order detail. Raises ObjectNotFoundError for an unknown id."""
    budget_ms = _time_budget_ms() if budget_ms is None else budget_ms

    started = time.monotonic()
    order = current_domain.repository_for(Order).get(order_id)
    _enforce_budget(started, "get_order", budget_ms)
    return order.to_detail()
