"""Table aggregate — a physical dining table shared across orders.

A table is either available or occupied. Orders never hold a reference to a
Table record: they carry the human-readable table number, and every status
change is a targeted update of the one table with that number.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, Integer, String

from dinein.domain import dinein
from dinein.table.events import TableOccupied, TableRegistered, TableReleased


class TableStatus(Enum):
    AVAILABLE = "available"
    OCCUPIED = "occupied"


def parse_table_status(status) -> TableStatus:
    if isinstance(status, TableStatus):
        return status
    try:
        return TableStatus(status)
    except ValueError:
        raise ValidationError({"table_status": [f"Unknown table status: {status}"]}) from None


@dinein.aggregate
class Table:
    table_number = String(required=True, max_length=50, unique=True)
    capacity = Integer(min_value=1)
    status = String(
        max_length=20,
        choices=TableStatus,
        default=TableStatus.AVAILABLE.value,
    )
    current_order_id = Identifier()
    updated_at = DateTime()

    @classmethod
    def register(cls, table_number: str, capacity: int | None = None):
        now = datetime.now(UTC)
        table = cls(
            table_number=str(table_number),
            capacity=capacity,
            status=TableStatus.AVAILABLE.value,
            updated_at=now,
        )
        table.raise_(
            TableRegistered(
                table_id=str(table.id),
                table_number=table.table_number,
                capacity=capacity,
                registered_at=now,
            )
        )
        return table

    def occupy(self, order_id: str | None = None) -> None:
        """Mark the table occupied by an order. Re-occupying is a no-op update."""
        now = datetime.now(UTC)
        self.status = TableStatus.OCCUPIED.value
        self.current_order_id = order_id
        self.updated_at = now
        self.raise_(
            TableOccupied(
                table_id=str(self.id),
                table_number=self.table_number,
                order_id=order_id,
                occupied_at=now,
            )
        )

    def release(self, resulting_status=TableStatus.AVAILABLE, order_id: str | None = None) -> None:
        """Let go of the table, leaving it in ``resulting_status``.

        The releasing order no longer holds the table, even when it stays occupied.
        """
        target = parse_table_status(resulting_status)
        now = datetime.now(UTC)
        self.status = target.value
        self.current_order_id = None
        self.updated_at = now
        self.raise_(
            TableReleased(
                table_id=str(self.id),
                table_number=self.table_number,
                order_id=order_id,
                status=target.value,
                released_at=now,
            )
        )
