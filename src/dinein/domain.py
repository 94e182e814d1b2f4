"""Dine-in bounded context — Orders, Kitchen Tickets and Tables.

Tracks a dine-in order from creation through payment. The Order aggregate is
the system of record; the Kitchen Ticket and the Table are kept consistent
with it by event handlers that consume the order's events after each unit of
work commits. Those handlers are best-effort: their failures are logged and
repaired later by replaying the order (see ``dinein.order.reconciliation``).
"""

import structlog
from protean.domain import Domain

dinein = Domain(name="dinein")

logger = structlog.get_logger(__name__)
